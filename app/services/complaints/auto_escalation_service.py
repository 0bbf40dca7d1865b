import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.constants.escalation import AUTO_ESCALATION_REASON, ESCALATION_WINDOW
from app.core import config
from app.core.clock import Clock, get_clock
from app.core.exceptions import StorageError
from app.models.complaints.complaint_models import Complaint
from app.models.users.user_models import User
from app.services.complaints.complaint_queries import (
    find_user,
    get_complaint_by_code,
    get_user_by_email,
)
from app.services.complaints.escalation_core import find_escalation_candidates
from app.services.complaints.lifecycle_service import apply_auto_escalation, is_sweep_candidate
from app.services.notifications.notifier import ComplaintNotifier, get_notifier, notify_safely

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeniorAuthority:
    """Who auto-escalated complaints are handed to. Id wins over email."""

    user_id: int | None = None
    email: str | None = None

    @classmethod
    def from_config(cls) -> "SeniorAuthority":
        return cls(user_id=config.SENIOR_AUTHORITY_USER_ID, email=config.SENIOR_AUTHORITY_EMAIL)

    async def resolve(self, db: AsyncSession) -> User | None:
        user = None
        if self.user_id is not None:
            user = await find_user(db, self.user_id)
        elif self.email:
            user = await get_user_by_email(db, self.email)

        if user is not None and not user.is_active:
            logger.error("Senior authority user %s is inactive", user.id)
            return None
        return user


@dataclass
class SweepResult:
    escalated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.escalated) + len(self.skipped) + len(self.failed)


async def _escalate_candidate(
    session_factory: async_sessionmaker,
    code: str,
    *,
    authority: SeniorAuthority,
    clock: Clock,
) -> tuple[Complaint, User] | None:
    """
    Escalate one complaint in its own transaction.
    Returns None when the complaint is skipped; raises StorageError on
    persistence failure, leaving the complaint untouched.
    """
    async with session_factory() as db:
        try:
            complaint = await get_complaint_by_code(db, code, for_update=True)

            now = clock.now()
            if not is_sweep_candidate(complaint, now - ESCALATION_WINDOW):
                logger.info("Complaint %s no longer eligible for auto-escalation", code)
                return None

            senior = await authority.resolve(db)
            if senior is None:
                logger.error(
                    "Senior authority (id=%s, email=%s) not found; skipping complaint %s",
                    authority.user_id, authority.email, code,
                )
                return None

            apply_auto_escalation(complaint, senior, now)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            raise StorageError(f"Could not persist auto-escalation of {code}") from exc

    return complaint, senior


async def auto_escalate_complaints(
    session_factory: async_sessionmaker,
    *,
    clock: Clock | None = None,
    notifier: ComplaintNotifier | None = None,
    authority: SeniorAuthority | None = None,
) -> SweepResult:
    """
    One sweep: escalate PUBLIC complaints older than the escalation window.
    Candidates are handled independently; a failure on one never stops the rest.
    """
    clock = clock or get_clock()
    notifier = notifier or get_notifier()
    authority = authority or SeniorAuthority.from_config()

    cutoff = clock.now() - ESCALATION_WINDOW
    async with session_factory() as db:
        candidates = await find_escalation_candidates(db, cutoff)

    logger.info("Auto-escalation sweep: %d candidate(s) older than %s", len(candidates), cutoff)

    result = SweepResult()
    for code in candidates:
        try:
            outcome = await _escalate_candidate(
                session_factory, code, authority=authority, clock=clock
            )
        except StorageError:
            logger.exception("Failed to auto-escalate complaint %s", code)
            result.failed.append(code)
            continue
        except Exception:
            logger.exception("Unexpected error auto-escalating complaint %s", code)
            result.failed.append(code)
            continue

        if outcome is None:
            result.skipped.append(code)
            continue

        complaint, senior = outcome
        result.escalated.append(code)
        logger.info("Complaint %s auto-escalated to user %s", code, senior.id)

        await notify_safely(notifier.on_auto_escalated, complaint, senior, AUTO_ESCALATION_REASON)

    logger.info(
        "Auto-escalation sweep finished: %d escalated, %d skipped, %d failed",
        len(result.escalated), len(result.skipped), len(result.failed),
    )
    return result
