import logging

from app.constants.notification_templates import NotificationKind
from app.core.clock import Clock, get_clock
from app.core.config import FRONTEND_URL
from app.core.exceptions import NotificationError
from app.models.complaints.complaint_models import Complaint
from app.models.enums.complaint_status import ComplaintStatus, SubmissionType
from app.models.users.user_models import User
from app.services.notifications.email_service import EmailService
from app.services.notifications.realtime_service import ConnectionManager, connection_manager
from app.utils.notification_helpers import humanize_status

logger = logging.getLogger(__name__)


async def notify_safely(hook, *args, **kwargs) -> None:
    """Run a notifier hook; delivery failures never reach the caller."""
    try:
        await hook(*args, **kwargs)
    except Exception:
        logger.exception("Notification hook %s failed", getattr(hook, "__name__", hook))


def complaint_event_payload(complaint: Complaint) -> dict:
    return {
        "code": complaint.code,
        "subject": complaint.subject,
        "category": complaint.category.value,
        "priority": complaint.priority.value,
        "status": complaint.status.value,
        "submission_type": complaint.submission_type.value,
        "assigned_to": complaint.assigned_to.display_name if complaint.assigned_to else None,
    }


class ComplaintNotifier:
    """
    Consumes lifecycle events and turns them into emails and realtime events.

    Each recipient is tried independently: one failed email is logged and the
    remaining recipients and the realtime broadcast still go out.
    """

    def __init__(
        self,
        email: EmailService,
        realtime: ConnectionManager,
        *,
        frontend_url: str = FRONTEND_URL,
        clock: Clock | None = None,
    ):
        self.email = email
        self.realtime = realtime
        self.frontend_url = frontend_url.rstrip("/")
        self.clock = clock or get_clock()

    # -----------------------------
    # helpers
    # -----------------------------
    def _tracking_url(self, complaint: Complaint) -> str:
        return f"{self.frontend_url}/complaint/{complaint.code}"

    def _base_context(self, complaint: Complaint) -> dict:
        return {
            "code": complaint.code,
            "subject": complaint.subject,
            "category": complaint.category.value,
            "priority": complaint.priority.value,
            "status": humanize_status(complaint.status),
            "created_on": complaint.created_at.date().isoformat(),
            "timestamp": self.clock.now().strftime("%Y-%m-%d %H:%M:%S"),
            "tracking_url": self._tracking_url(complaint),
        }

    @staticmethod
    def _submitter(complaint: Complaint) -> User | None:
        if complaint.submission_type != SubmissionType.PUBLIC:
            return None
        return complaint.user

    async def _email(self, recipient: User | None, kind: NotificationKind, **context) -> bool:
        if recipient is None or not recipient.email:
            return False
        try:
            await self.email.send(
                recipient.email, kind, recipient_name=recipient.display_name, **context
            )
        except NotificationError:
            logger.exception("Failed to deliver %s email to user %s", kind.value, recipient.id)
            return False
        return True

    async def _broadcast(self, event_type: str, complaint: Complaint, **extra) -> None:
        await self.realtime.broadcast(
            event_type, {"complaint": complaint_event_payload(complaint), **extra}
        )

    # -----------------------------
    # lifecycle hooks
    # -----------------------------
    async def on_complaint_created(self, complaint: Complaint) -> None:
        await self._broadcast(
            "NEW_COMPLAINT", complaint, message=f"New complaint submitted: {complaint.subject}"
        )

    async def on_status_changed(
        self,
        complaint: Complaint,
        old_status: ComplaintStatus,
        new_status: ComplaintStatus,
        actor_name: str,
    ) -> None:
        await self._email(
            self._submitter(complaint),
            NotificationKind.STATUS_UPDATE,
            old_status=humanize_status(old_status),
            new_status=humanize_status(new_status),
            actor_name=actor_name,
            **self._base_context(complaint),
        )
        await self._broadcast(
            "STATUS_CHANGE",
            complaint,
            old_status=old_status.value,
            new_status=new_status.value,
            message=f"Complaint {complaint.code} status changed from {old_status.value} to {new_status.value}",
        )

    async def on_assigned(self, complaint: Complaint, assignee: User) -> None:
        await self._email(assignee, NotificationKind.ASSIGNMENT, **self._base_context(complaint))
        await self._broadcast(
            "ASSIGNMENT",
            complaint,
            assigned_to=assignee.display_name,
            message=f"Complaint {complaint.code} assigned to {assignee.display_name}",
        )

    async def on_escalated(
        self,
        complaint: Complaint,
        reason: str,
        higher_authority: User | None,
        *,
        notify_submitter: bool,
    ) -> None:
        if notify_submitter:
            await self._email(
                self._submitter(complaint),
                NotificationKind.ESCALATION,
                reason=reason,
                **self._base_context(complaint),
            )
        if higher_authority is not None:
            logger.info(
                "Escalated complaint %s assigned to user %s", complaint.code, higher_authority.id
            )
        await self._broadcast(
            "ESCALATION",
            complaint,
            reason=reason,
            message=f"Complaint {complaint.code} has been escalated",
        )

    async def on_auto_escalated(
        self,
        complaint: Complaint,
        senior_authority: User,
        reason: str,
    ) -> None:
        context = self._base_context(complaint)
        submitter = self._submitter(complaint)

        await self._email(
            submitter, NotificationKind.AUTO_ESCALATION_SUBMITTER, reason=reason, **context
        )
        await self._email(
            senior_authority,
            NotificationKind.AUTO_ESCALATION_AUTHORITY,
            reason=reason,
            complainant=submitter.display_name if submitter else "Unknown",
            description=complaint.description,
            **context,
        )
        await self._broadcast(
            "AUTO_ESCALATION",
            complaint,
            reason=reason,
            message=f"Complaint {complaint.code} was automatically escalated",
        )

    async def on_note_added(self, complaint: Complaint, note: str) -> None:
        await self._email(
            self._submitter(complaint),
            NotificationKind.NOTE_ADDED,
            note=note,
            **self._base_context(complaint),
        )
        await self._broadcast(
            "NOTE_ADDED", complaint, message=f"New update on complaint {complaint.code}"
        )


_notifier: ComplaintNotifier | None = None


def get_notifier() -> ComplaintNotifier:
    global _notifier
    if _notifier is None:
        _notifier = ComplaintNotifier(EmailService.from_config(), connection_manager)
    return _notifier
