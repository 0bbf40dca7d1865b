from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.error_codes import ErrorCode
from app.constants.escalation import SUBMITTED_COMMENT
from app.constants.permissions import is_privileged
from app.core.clock import Clock, get_clock
from app.core.exceptions import AppException, NotFoundError
from app.models.complaints.complaint_models import Complaint, ComplaintAttachment
from app.models.enums.complaint_status import ComplaintStatus, SubmissionType
from app.models.users.user_models import User
from app.schemas.complaints.complaint_schemas import (
    ComplaintCreate,
    ComplaintListResponse,
    ComplaintOut,
    ComplaintResponse,
)
from app.services.complaints.complaint_queries import get_complaint_by_code
from app.services.complaints.lifecycle_service import record_update, transition_status
from app.services.complaints.ticket_code_service import generate_complaint_code
from app.services.notifications.notifier import ComplaintNotifier, get_notifier, notify_safely
from app.utils.logger import get_logger

logger = get_logger("complaints.service")


# =====================================================
# PRESENTATION
# =====================================================
def present_complaint(complaint: Complaint, viewer: User | None) -> ComplaintOut:
    """
    Staff see everything. Everyone else sees public updates only, and never
    the ticket code of an anonymous complaint.
    """
    out = ComplaintOut.model_validate(complaint)
    if viewer is not None and is_privileged(viewer.role):
        return out

    return out.model_copy(
        update={
            "code": None if complaint.is_anonymous else complaint.code,
            "updates": [u for u in out.updates if u.is_public and not u.is_private_note],
        }
    )


# =====================================================
# CREATE
# =====================================================
async def submit_complaint(
    db: AsyncSession,
    payload: ComplaintCreate,
    submitter: User | None,
    *,
    clock: Clock | None = None,
    notifier: ComplaintNotifier | None = None,
) -> Complaint:
    clock = clock or get_clock()
    notifier = notifier or get_notifier()

    anonymous = payload.submission_type == SubmissionType.ANONYMOUS
    if not anonymous and submitter is None:
        raise AppException(
            401, "Login required for public complaints", ErrorCode.UNAUTHORIZED
        )

    # Anonymous complaints never reference their author, not even in the audit trail
    owner = None if anonymous else submitter
    now = clock.now()

    complaint = Complaint(
        code=await generate_complaint_code(db, now),
        user=owner,
        assigned_to=None,
        subject=payload.subject.strip(),
        description=payload.description.strip(),
        category=payload.category,
        priority=payload.priority,
        status=ComplaintStatus.NEW,
        submission_type=payload.submission_type,
        created_at=now,
        updated_at=now,
        attachments=[
            ComplaintAttachment(**attachment.model_dump(), uploaded_at=now)
            for attachment in payload.attachments
        ],
        updates=[],
    )
    record_update(
        complaint,
        status=ComplaintStatus.NEW,
        comment=SUBMITTED_COMMENT,
        actor=owner,
        now=now,
    )

    db.add(complaint)
    await db.commit()

    logger.info(
        "Complaint %s submitted (%s, %d attachment(s))",
        complaint.code, complaint.submission_type.value, len(complaint.attachments),
    )
    await notify_safely(notifier.on_complaint_created, complaint)

    return complaint


async def create_complaint(
    db: AsyncSession,
    payload: ComplaintCreate,
    submitter: User | None,
    *,
    clock: Clock | None = None,
    notifier: ComplaintNotifier | None = None,
) -> ComplaintResponse:
    complaint = await submit_complaint(db, payload, submitter, clock=clock, notifier=notifier)
    return ComplaintResponse(
        message="Complaint submitted successfully",
        data=present_complaint(complaint, submitter),
    )


# =====================================================
# READ
# =====================================================
async def get_complaint_for_viewer(
    db: AsyncSession,
    code: str,
    viewer: User,
) -> ComplaintResponse:
    complaint = await get_complaint_by_code(db, code)

    # Non-staff may only open their own complaints; anything else looks missing
    if not is_privileged(viewer.role) and complaint.user_id != viewer.id:
        raise NotFoundError("Complaint not found", ErrorCode.COMPLAINT_NOT_FOUND)

    return ComplaintResponse(
        message="Complaint retrieved successfully",
        data=present_complaint(complaint, viewer),
    )


async def list_my_complaints(
    db: AsyncSession,
    user: User,
    *,
    limit: int = 50,
    offset: int = 0,
) -> ComplaintListResponse:
    base = select(Complaint).where(Complaint.user_id == user.id)

    total = await db.scalar(select(func.count()).select_from(base.subquery()))
    result = await db.execute(
        base.order_by(desc(Complaint.created_at), desc(Complaint.id)).offset(offset).limit(limit)
    )

    return ComplaintListResponse(
        message="Complaints retrieved successfully",
        total=total or 0,
        data=[present_complaint(c, user) for c in result.scalars().all()],
    )


# =====================================================
# STATUS
# =====================================================
async def update_complaint_status(
    db: AsyncSession,
    code: str,
    new_status: ComplaintStatus,
    comment: str | None,
    actor: User,
    *,
    clock: Clock | None = None,
    notifier: ComplaintNotifier | None = None,
) -> ComplaintResponse:
    complaint = await transition_status(
        db, code, new_status, comment, actor.id, clock=clock, notifier=notifier
    )
    return ComplaintResponse(
        message="Complaint status updated successfully",
        data=present_complaint(complaint, actor),
    )
