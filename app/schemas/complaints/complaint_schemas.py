from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums.complaint_status import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    SubmissionType,
)
from app.models.enums.user_role import UserRole


# =========================
# REQUESTS
# =========================
class AttachmentIn(BaseModel):
    file_name: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1, max_length=500)
    file_size: int = Field(..., ge=0)
    mime_type: Optional[str] = Field(None, max_length=100)


class ComplaintCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: ComplaintCategory
    priority: ComplaintPriority = ComplaintPriority.MEDIUM
    submission_type: SubmissionType = SubmissionType.PUBLIC
    attachments: list[AttachmentIn] = Field(default_factory=list)


class StatusUpdateIn(BaseModel):
    status: ComplaintStatus
    comment: Optional[str] = None


class AssignIn(BaseModel):
    # None unassigns
    user_id: Optional[int] = None


class EscalateIn(BaseModel):
    reason: str = Field(..., min_length=1)
    higher_authority_id: Optional[int] = None
    notify_all_parties: bool = True


class NoteIn(BaseModel):
    note: str = Field(..., min_length=1)
    is_public: bool = True


class PrivateNoteIn(BaseModel):
    note: str = Field(..., min_length=1)


# =========================
# RESPONSES
# =========================
class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: Optional[str]
    email: str
    role: UserRole


class ComplaintUpdateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: ComplaintStatus
    comment: Optional[str]
    is_public: bool
    is_private_note: bool
    updated_by_name: str
    created_at: datetime


class AttachmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    file_size: int
    mime_type: Optional[str]
    uploaded_at: datetime


class ComplaintOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    # Hidden for anonymous complaints when the viewer is not staff
    code: Optional[str]
    subject: str
    description: str
    category: ComplaintCategory
    priority: ComplaintPriority
    status: ComplaintStatus
    submission_type: SubmissionType
    assigned_to: Optional[UserBrief]
    created_at: datetime
    updated_at: Optional[datetime]
    resolved_at: Optional[datetime]
    escalation_eligible_at: datetime
    updates: list[ComplaintUpdateOut] = []
    attachments: list[AttachmentOut] = []


class ComplaintResponse(BaseModel):
    success: bool = True
    message: str
    data: ComplaintOut


class ComplaintListResponse(BaseModel):
    success: bool = True
    message: str
    total: int
    data: list[ComplaintOut]


class UserListResponse(BaseModel):
    success: bool = True
    message: str
    data: list[UserBrief]


class DashboardStats(BaseModel):
    total_complaints: int
    open_complaints: int
    resolved_complaints: int
    escalated_complaints: int
    avg_resolution_days: float
    by_status: dict[str, int]


class DashboardStatsResponse(BaseModel):
    success: bool = True
    message: str
    data: DashboardStats


class SweepSummary(BaseModel):
    escalated: list[str]
    skipped: list[str]
    failed: list[str]


class SweepResponse(BaseModel):
    success: bool = True
    message: str
    data: SweepSummary
