from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.permissions import Capability
from app.core.clock import Clock, get_clock
from app.core.db import get_db, get_session_factory
from app.models.enums.complaint_status import ComplaintCategory, ComplaintPriority, ComplaintStatus
from app.schemas.complaints.complaint_schemas import (
    AssignIn,
    ComplaintListResponse,
    ComplaintResponse,
    DashboardStatsResponse,
    EscalateIn,
    NoteIn,
    PrivateNoteIn,
    SweepResponse,
    UserBrief,
    UserListResponse,
)
from app.services.complaints.auto_escalation_service import auto_escalate_complaints
from app.services.complaints.complaint_admin_service import (
    add_complaint_note,
    add_private_note,
    assign_complaint,
    escalate_complaint,
    get_dashboard_stats,
    list_assignable_users,
    list_complaints,
    list_escalated_complaints,
)
from app.services.complaints.complaint_service import present_complaint
from app.services.notifications.notifier import ComplaintNotifier, get_notifier
from app.utils.check_roles import require_capability
from app.utils.logger import get_logger

logger = get_logger("admin.router")

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.put("/complaints/{code}/assign", response_model=ComplaintResponse)
async def assign_complaint_api(
    code: str,
    payload: AssignIn,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.ASSIGN)),
    clock: Clock = Depends(get_clock),
    notifier: ComplaintNotifier = Depends(get_notifier),
):
    complaint = await assign_complaint(
        db, code, payload.user_id, current_user.id, clock=clock, notifier=notifier
    )
    return {
        "message": "Complaint assigned successfully" if payload.user_id else "Complaint unassigned",
        "data": present_complaint(complaint, current_user),
    }


@router.post("/complaints/{code}/escalate", response_model=ComplaintResponse)
async def escalate_complaint_api(
    code: str,
    payload: EscalateIn,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.ESCALATE)),
    clock: Clock = Depends(get_clock),
    notifier: ComplaintNotifier = Depends(get_notifier),
):
    complaint = await escalate_complaint(
        db,
        code,
        payload.higher_authority_id,
        payload.reason,
        payload.notify_all_parties,
        current_user.id,
        clock=clock,
        notifier=notifier,
    )
    return {
        "message": "Complaint escalated successfully",
        "data": present_complaint(complaint, current_user),
    }


@router.post("/complaints/{code}/notes", response_model=ComplaintResponse)
async def add_note_api(
    code: str,
    payload: NoteIn,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.ADD_NOTE)),
    clock: Clock = Depends(get_clock),
    notifier: ComplaintNotifier = Depends(get_notifier),
):
    complaint = await add_complaint_note(
        db, code, payload.note, payload.is_public, current_user.id, clock=clock, notifier=notifier
    )
    return {
        "message": "Note added successfully",
        "data": present_complaint(complaint, current_user),
    }


@router.post("/complaints/{code}/private-notes", response_model=ComplaintResponse)
async def add_private_note_api(
    code: str,
    payload: PrivateNoteIn,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.ADD_NOTE)),
    clock: Clock = Depends(get_clock),
):
    complaint = await add_private_note(db, code, payload.note, current_user.id, clock=clock)
    return {
        "message": "Private note added successfully",
        "data": present_complaint(complaint, current_user),
    }


@router.get("/complaints", response_model=ComplaintListResponse)
async def list_complaints_api(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.VIEW_ALL_COMPLAINTS)),

    status: ComplaintStatus | None = Query(None),
    category: ComplaintCategory | None = Query(None),
    priority: ComplaintPriority | None = Query(None),
    assigned_to: str | None = Query(None, pattern=r"^(\d+|unassigned)$"),
    search: str | None = Query(None, max_length=200),

    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    return await list_complaints(
        db,
        current_user,
        status=status,
        category=category,
        priority=priority,
        assigned_to=assigned_to,
        search=search,
        limit=limit,
        offset=offset,
    )


@router.get("/complaints/escalated", response_model=ComplaintListResponse)
async def escalated_complaints_api(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.VIEW_ALL_COMPLAINTS)),
):
    complaints = await list_escalated_complaints(db)
    return {
        "message": "Escalated complaints retrieved successfully",
        "total": len(complaints),
        "data": [present_complaint(c, current_user) for c in complaints],
    }


@router.get("/assignable-users", response_model=UserListResponse)
async def assignable_users_api(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.ASSIGN)),
):
    users = await list_assignable_users(db)
    return {
        "message": "Assignable users retrieved successfully",
        "data": [UserBrief.model_validate(u) for u in users],
    }


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
async def dashboard_stats_api(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.VIEW_DASHBOARD)),
):
    return {
        "message": "Dashboard stats retrieved successfully",
        "data": await get_dashboard_stats(db),
    }


@router.post("/escalations/run", response_model=SweepResponse)
async def run_escalation_sweep_api(
    current_user=Depends(require_capability(Capability.RUN_ESCALATION_SWEEP)),
    session_factory=Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
    notifier: ComplaintNotifier = Depends(get_notifier),
):
    logger.info("Manual escalation sweep requested", extra={"user_id": current_user.id})

    result = await auto_escalate_complaints(session_factory, clock=clock, notifier=notifier)
    return {
        "message": f"{len(result.escalated)} complaint(s) escalated",
        "data": {
            "escalated": result.escalated,
            "skipped": result.skipped,
            "failed": result.failed,
        },
    }
