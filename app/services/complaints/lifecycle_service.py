"""
Complaint lifecycle engine.

Single authority for status transitions and audit records. The pure ``apply_*``
helpers mutate an already-loaded complaint in memory; the async operations load,
mutate, commit the complaint together with its new audit record, and only then
hand the event to the notifier.
"""

import logging
import math
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.escalation import AUTO_ESCALATION_REASON, SECONDS_PER_DAY
from app.core.clock import Clock, get_clock
from app.core.exceptions import EscalationNotEligibleError
from app.models.complaints.complaint_models import (
    Complaint,
    ComplaintUpdate,
    escalation_eligible_at_for,
)
from app.models.enums.complaint_status import (
    SWEEP_EXCLUDED_STATUSES,
    TERMINAL_STATUSES,
    ComplaintStatus,
    SubmissionType,
)
from app.models.users.user_models import User
from app.services.complaints.complaint_queries import get_complaint_by_code, get_user_or_404
from app.services.notifications.notifier import ComplaintNotifier, get_notifier, notify_safely

logger = logging.getLogger(__name__)

__all__ = [
    "escalation_eligible_at_for",
    "is_eligible_for_escalation",
    "days_until_escalation",
    "ensure_escalation_eligible",
    "is_sweep_candidate",
    "record_update",
    "apply_transition",
    "apply_assignment",
    "apply_escalation",
    "apply_auto_escalation",
    "transition_status",
    "add_note",
]


# =====================================================
# ESCALATION ELIGIBILITY
# =====================================================
def is_eligible_for_escalation(complaint: Complaint, now: datetime) -> bool:
    return now >= complaint.escalation_eligible_at


def days_until_escalation(complaint: Complaint, now: datetime) -> int:
    remaining = (complaint.escalation_eligible_at - now).total_seconds()
    if remaining <= 0:
        return 0
    return math.ceil(remaining / SECONDS_PER_DAY)


def ensure_escalation_eligible(complaint: Complaint, now: datetime) -> None:
    if not is_eligible_for_escalation(complaint, now):
        raise EscalationNotEligibleError(
            days_remaining=days_until_escalation(complaint, now),
            eligible_at=complaint.escalation_eligible_at,
        )


def is_sweep_candidate(complaint: Complaint, cutoff: datetime) -> bool:
    return (
        complaint.submission_type == SubmissionType.PUBLIC
        and complaint.created_at < cutoff
        and complaint.status not in SWEEP_EXCLUDED_STATUSES
    )


# =====================================================
# IN-MEMORY MUTATIONS
# =====================================================
def record_update(
    complaint: Complaint,
    *,
    status: ComplaintStatus,
    comment: str | None,
    actor: User | None,
    now: datetime,
    is_public: bool = True,
    is_private_note: bool = False,
) -> ComplaintUpdate:
    update = ComplaintUpdate(
        status=status,
        comment=comment,
        is_public=is_public,
        is_private_note=is_private_note,
        updated_by=actor,
        created_at=now,
    )
    complaint.updates.append(update)
    complaint.updated_at = now
    return update


def apply_transition(
    complaint: Complaint,
    new_status: ComplaintStatus,
    comment: str | None,
    actor: User | None,
    now: datetime,
    *,
    is_public: bool = True,
) -> ComplaintStatus:
    """Set the new status and append its audit record. Returns the old status."""
    old_status = complaint.status

    if old_status in TERMINAL_STATUSES and new_status not in TERMINAL_STATUSES:
        # Reopening is allowed; kept visible for review
        logger.warning(
            "Complaint %s reopened: %s -> %s", complaint.code, old_status.value, new_status.value
        )

    complaint.status = new_status
    if new_status in TERMINAL_STATUSES and complaint.resolved_at is None:
        complaint.resolved_at = now

    record_update(
        complaint,
        status=new_status,
        comment=comment,
        actor=actor,
        now=now,
        is_public=is_public,
    )
    return old_status


def apply_assignment(
    complaint: Complaint,
    assignee: User | None,
    actor: User,
    now: datetime,
) -> ComplaintUpdate:
    complaint.assigned_to = assignee
    comment = (
        f"Complaint assigned to {assignee.display_name}"
        if assignee is not None
        else "Complaint unassigned"
    )
    return record_update(
        complaint,
        status=complaint.status,
        comment=comment,
        actor=actor,
        now=now,
    )


def apply_escalation(
    complaint: Complaint,
    higher_authority: User | None,
    reason: str,
    actor: User,
    now: datetime,
) -> ComplaintStatus:
    comment = f"Complaint escalated. Reason: {reason}"
    if higher_authority is not None:
        comment += f", Escalated to: {higher_authority.display_name}"

    complaint.assigned_to = higher_authority
    # Escalation notes are internal
    return apply_transition(
        complaint, ComplaintStatus.ESCALATED, comment, actor, now, is_public=False
    )


def apply_auto_escalation(
    complaint: Complaint,
    senior_authority: User,
    now: datetime,
) -> ComplaintStatus:
    complaint.assigned_to = senior_authority
    return apply_transition(
        complaint,
        ComplaintStatus.ESCALATED,
        f"{AUTO_ESCALATION_REASON}. Escalated to: {senior_authority.display_name}",
        None,
        now,
        is_public=False,
    )


# =====================================================
# PERSISTED OPERATIONS
# =====================================================
async def transition_status(
    db: AsyncSession,
    code: str,
    new_status: ComplaintStatus,
    comment: str | None,
    actor_id: int,
    *,
    clock: Clock | None = None,
    notifier: ComplaintNotifier | None = None,
) -> Complaint:
    clock = clock or get_clock()
    notifier = notifier or get_notifier()

    complaint = await get_complaint_by_code(db, code, for_update=True)
    actor = await get_user_or_404(db, actor_id)

    old_status = apply_transition(complaint, new_status, comment, actor, clock.now())
    await db.commit()

    logger.info(
        "Complaint %s status %s -> %s by user %s",
        complaint.code, old_status.value, new_status.value, actor.id,
    )
    await notify_safely(
        notifier.on_status_changed, complaint, old_status, new_status, actor.display_name
    )
    return complaint


async def add_note(
    db: AsyncSession,
    code: str,
    text: str,
    *,
    is_public: bool,
    is_private: bool,
    actor_id: int,
    clock: Clock | None = None,
) -> Complaint:
    """Append a note without changing status. Notification is left to the caller."""
    clock = clock or get_clock()

    complaint = await get_complaint_by_code(db, code, for_update=True)
    actor = await get_user_or_404(db, actor_id)

    record_update(
        complaint,
        status=complaint.status,
        comment=text,
        actor=actor,
        now=clock.now(),
        is_public=is_public and not is_private,
        is_private_note=is_private,
    )
    await db.commit()

    logger.info(
        "%s note added to complaint %s by user %s",
        "Private" if is_private else ("Public" if is_public else "Internal"),
        complaint.code,
        actor.id,
    )
    return complaint
