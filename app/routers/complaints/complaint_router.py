from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.permissions import Capability
from app.core.clock import Clock, get_clock
from app.core.db import get_db
from app.schemas.complaints.complaint_schemas import (
    ComplaintCreate,
    ComplaintListResponse,
    ComplaintResponse,
    StatusUpdateIn,
)
from app.services.complaints.complaint_service import (
    create_complaint,
    get_complaint_for_viewer,
    list_my_complaints,
    update_complaint_status,
)
from app.services.notifications.notifier import ComplaintNotifier, get_notifier
from app.utils.check_roles import require_capability
from app.utils.get_user import get_current_user, get_optional_user

router = APIRouter(prefix="/complaints", tags=["Complaints"])


@router.post("", response_model=ComplaintResponse)
async def submit_complaint_api(
    payload: ComplaintCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_optional_user),
    clock: Clock = Depends(get_clock),
    notifier: ComplaintNotifier = Depends(get_notifier),
):
    return await create_complaint(db, payload, current_user, clock=clock, notifier=notifier)


@router.get("/my", response_model=ComplaintListResponse)
async def my_complaints_api(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.VIEW_OWN_COMPLAINTS)),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    return await list_my_complaints(db, current_user, limit=limit, offset=offset)


@router.get("/{code}", response_model=ComplaintResponse)
async def get_complaint_api(
    code: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return await get_complaint_for_viewer(db, code, current_user)


@router.put("/{code}/status", response_model=ComplaintResponse)
async def update_status_api(
    code: str,
    payload: StatusUpdateIn,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(Capability.UPDATE_STATUS)),
    clock: Clock = Depends(get_clock),
    notifier: ComplaintNotifier = Depends(get_notifier),
):
    return await update_complaint_status(
        db, code, payload.status, payload.comment, current_user, clock=clock, notifier=notifier
    )
