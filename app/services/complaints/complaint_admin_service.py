from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.escalation import SECONDS_PER_DAY
from app.constants.permissions import ASSIGNABLE_ROLES
from app.core.clock import Clock, get_clock
from app.core.exceptions import InvalidAssigneeError
from app.models.complaints.complaint_models import Complaint, ComplaintUpdate
from app.models.enums.complaint_status import (
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
)
from app.models.users.user_models import User
from app.schemas.complaints.complaint_schemas import ComplaintListResponse
from app.services.complaints.complaint_queries import get_complaint_by_code, get_user_or_404
from app.services.complaints.complaint_service import present_complaint
from app.services.complaints.lifecycle_service import (
    add_note,
    apply_assignment,
    apply_escalation,
    ensure_escalation_eligible,
)
from app.services.notifications.notifier import ComplaintNotifier, get_notifier, notify_safely
from app.utils.logger import get_logger

logger = get_logger("complaints.admin")


# =====================================================
# HELPERS
# =====================================================
async def _get_assignee(db: AsyncSession, user_id: int, label: str) -> User:
    user = await get_user_or_404(db, user_id, label)
    if user.role not in ASSIGNABLE_ROLES or not user.is_active:
        raise InvalidAssigneeError(f"{user.display_name} cannot be assigned complaints")
    return user


# =====================================================
# ASSIGN
# =====================================================
async def assign_complaint(
    db: AsyncSession,
    code: str,
    user_id: int | None,
    actor_id: int,
    *,
    clock: Clock | None = None,
    notifier: ComplaintNotifier | None = None,
) -> Complaint:
    clock = clock or get_clock()
    notifier = notifier or get_notifier()

    complaint = await get_complaint_by_code(db, code, for_update=True)
    actor = await get_user_or_404(db, actor_id)
    assignee = await _get_assignee(db, user_id, "Assignee") if user_id is not None else None

    apply_assignment(complaint, assignee, actor, clock.now())
    await db.commit()

    logger.info(
        "Complaint %s assigned to %s by user %s",
        complaint.code, assignee.id if assignee else None, actor.id,
    )
    if assignee is not None:
        await notify_safely(notifier.on_assigned, complaint, assignee)
    return complaint


# =====================================================
# ESCALATE
# =====================================================
async def escalate_complaint(
    db: AsyncSession,
    code: str,
    higher_authority_id: int | None,
    reason: str,
    notify_all_parties: bool,
    actor_id: int,
    *,
    clock: Clock | None = None,
    notifier: ComplaintNotifier | None = None,
) -> Complaint:
    """
    Manual escalation. Eligibility is checked before anything else is resolved,
    so a refused escalation leaves the complaint and its history untouched.
    """
    clock = clock or get_clock()
    notifier = notifier or get_notifier()
    now = clock.now()

    complaint = await get_complaint_by_code(db, code, for_update=True)
    ensure_escalation_eligible(complaint, now)

    actor = await get_user_or_404(db, actor_id)
    higher_authority = (
        await _get_assignee(db, higher_authority_id, "Higher authority")
        if higher_authority_id is not None
        else None
    )

    old_status = apply_escalation(complaint, higher_authority, reason, actor, now)
    await db.commit()

    logger.info(
        "Complaint %s escalated from %s by user %s",
        complaint.code, old_status.value, actor.id,
    )
    await notify_safely(
        notifier.on_escalated,
        complaint,
        reason,
        higher_authority,
        notify_submitter=notify_all_parties,
    )
    return complaint


# =====================================================
# NOTES
# =====================================================
async def add_complaint_note(
    db: AsyncSession,
    code: str,
    note: str,
    is_public: bool,
    actor_id: int,
    *,
    clock: Clock | None = None,
    notifier: ComplaintNotifier | None = None,
) -> Complaint:
    notifier = notifier or get_notifier()

    complaint = await add_note(
        db, code, note, is_public=is_public, is_private=False, actor_id=actor_id, clock=clock
    )
    if is_public and complaint.user is not None:
        await notify_safely(notifier.on_note_added, complaint, note)
    return complaint


async def add_private_note(
    db: AsyncSession,
    code: str,
    note: str,
    actor_id: int,
    *,
    clock: Clock | None = None,
) -> Complaint:
    return await add_note(
        db, code, note, is_public=False, is_private=True, actor_id=actor_id, clock=clock
    )


# =====================================================
# LISTINGS
# =====================================================
UNASSIGNED = "unassigned"


async def list_complaints(
    db: AsyncSession,
    viewer: User,
    *,
    status: ComplaintStatus | None = None,
    category: ComplaintCategory | None = None,
    priority: ComplaintPriority | None = None,
    assigned_to: int | str | None = None,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> ComplaintListResponse:
    """
    Staff triage queue. `assigned_to` takes a user id or "unassigned";
    `search` matches code, subject and description.
    """
    base = select(Complaint)

    if status:
        base = base.where(Complaint.status == status)
    if category:
        base = base.where(Complaint.category == category)
    if priority:
        base = base.where(Complaint.priority == priority)
    if assigned_to == UNASSIGNED:
        base = base.where(Complaint.assigned_to_id.is_(None))
    elif assigned_to is not None:
        base = base.where(Complaint.assigned_to_id == int(assigned_to))
    if search:
        like = f"%{search.strip()}%"
        base = base.where(
            or_(
                Complaint.code.ilike(like),
                Complaint.subject.ilike(like),
                Complaint.description.ilike(like),
            )
        )

    total = await db.scalar(select(func.count()).select_from(base.subquery()))
    result = await db.execute(
        base.order_by(desc(Complaint.created_at), desc(Complaint.id)).offset(offset).limit(limit)
    )

    return ComplaintListResponse(
        message="Complaints retrieved successfully",
        total=total or 0,
        data=[present_complaint(c, viewer) for c in result.scalars().all()],
    )


async def list_escalated_complaints(db: AsyncSession) -> list[Complaint]:
    result = await db.execute(
        select(Complaint)
        .where(
            or_(
                Complaint.status == ComplaintStatus.ESCALATED,
                Complaint.updates.any(ComplaintUpdate.status == ComplaintStatus.ESCALATED),
            )
        )
        .order_by(desc(Complaint.updated_at), desc(Complaint.id))
    )
    return list(result.scalars().all())


async def list_assignable_users(db: AsyncSession) -> list[User]:
    result = await db.execute(
        select(User)
        .where(User.role.in_(list(ASSIGNABLE_ROLES)), User.is_active.is_(True))
        .order_by(User.role, User.username)
    )
    return list(result.scalars().all())


# =====================================================
# DASHBOARD
# =====================================================
async def get_dashboard_stats(db: AsyncSession) -> dict:
    rows = (
        await db.execute(select(Complaint.status, func.count(Complaint.id)).group_by(Complaint.status))
    ).all()
    by_status = {status: count for status, count in rows}

    resolved_rows = (
        await db.execute(
            select(Complaint.created_at, Complaint.resolved_at).where(
                Complaint.status.in_(list(TERMINAL_STATUSES)),
                Complaint.resolved_at.isnot(None),
            )
        )
    ).all()

    avg_resolution_days = 0.0
    if resolved_rows:
        total_seconds = sum(
            (resolved_at - created_at).total_seconds() for created_at, resolved_at in resolved_rows
        )
        avg_resolution_days = round(total_seconds / len(resolved_rows) / SECONDS_PER_DAY, 1)

    return {
        "total_complaints": sum(by_status.values()),
        "open_complaints": sum(by_status.get(s, 0) for s in OPEN_STATUSES),
        "resolved_complaints": sum(by_status.get(s, 0) for s in TERMINAL_STATUSES),
        "escalated_complaints": by_status.get(ComplaintStatus.ESCALATED, 0),
        "avg_resolution_days": avg_resolution_days,
        "by_status": {status.value: by_status.get(status, 0) for status in ComplaintStatus},
    }
