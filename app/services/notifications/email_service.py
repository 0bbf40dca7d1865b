import asyncio
import logging
import smtplib
from email.mime.text import MIMEText

from app.core import config
from app.core.exceptions import NotificationError
from app.constants.notification_templates import NotificationKind
from app.utils.notification_helpers import render_email

logger = logging.getLogger(__name__)


class EmailService:
    """SMTP mail sender. In test mode messages are only logged."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        from_email: str,
        test_mode: bool = False,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email
        self.test_mode = test_mode
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "EmailService":
        return cls(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
            from_email=config.MAIL_FROM,
            test_mode=config.EMAIL_TEST_MODE,
        )

    async def send(self, to: str, kind: NotificationKind, **context) -> None:
        subject, body = render_email(kind, **context)

        if self.test_mode:
            logger.info("TEST MODE: %s email to %s | %s", kind.value, to, subject)
            logger.debug("TEST MODE body:\n%s", body)
            return

        try:
            await asyncio.to_thread(self._deliver, to, subject, body)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Failed to send {kind.value} email to {to}") from exc

        logger.info("Email %s sent to %s", kind.value, to)

    def _deliver(self, to: str, subject: str, body: str) -> None:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)
