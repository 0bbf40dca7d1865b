from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
    inspect,
)
from sqlalchemy.orm import relationship

from app.constants.escalation import ESCALATION_WINDOW
from app.core.clock import as_utc
from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.base.types import UTCDateTime
from app.models.enums.complaint_status import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    SubmissionType,
)


def escalation_eligible_at_for(created_at: datetime) -> datetime:
    return created_at + ESCALATION_WINDOW


class Complaint(Base, TimestampMixin):
    __tablename__ = "complaints"

    id = Column(Integer, primary_key=True)
    code = Column(String(20), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    subject = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SAEnum(ComplaintCategory), nullable=False, index=True)
    priority = Column(SAEnum(ComplaintPriority), nullable=False, default=ComplaintPriority.MEDIUM, index=True)
    status = Column(SAEnum(ComplaintStatus), nullable=False, default=ComplaintStatus.NEW, index=True)
    submission_type = Column(SAEnum(SubmissionType), nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    resolved_at = Column(UTCDateTime(), nullable=True)
    escalation_eligible_at = Column(UTCDateTime(), nullable=False)

    user = relationship("User", foreign_keys=[user_id], lazy="selectin")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id], lazy="selectin")
    updates = relationship(
        "ComplaintUpdate",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by="ComplaintUpdate.id",
        lazy="selectin",
    )
    attachments = relationship(
        "ComplaintAttachment",
        back_populates="complaint",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "submission_type = 'PUBLIC' OR user_id IS NULL",
            name="ck_complaint_anonymous_has_no_user",
        ),
        Index("ix_complaint_sweep", "submission_type", "status", "created_at"),
    )

    @property
    def is_anonymous(self) -> bool:
        return self.submission_type == SubmissionType.ANONYMOUS

    def __repr__(self):
        return f"<Complaint code={self.code} status={self.status} priority={self.priority}>"


class ComplaintUpdate(Base):
    """Audit record. APPEND-ONLY. Never updated, never deleted."""

    __tablename__ = "complaint_updates"

    id = Column(Integer, primary_key=True)
    complaint_id = Column(Integer, ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SAEnum(ComplaintStatus), nullable=False)
    comment = Column(Text, nullable=True)
    is_public = Column(Boolean, default=True, nullable=False)
    is_private_note = Column(Boolean, default=False, nullable=False)
    # NULL means the automated system acted
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(UTCDateTime(), nullable=False)

    complaint = relationship("Complaint", back_populates="updates")
    updated_by = relationship("User", lazy="selectin")

    @property
    def updated_by_name(self) -> str:
        return self.updated_by.display_name if self.updated_by else "System"

    def __repr__(self):
        return f"<ComplaintUpdate id={self.id} status={self.status} public={self.is_public}>"


class ComplaintAttachment(Base):
    __tablename__ = "complaint_attachments"

    id = Column(Integer, primary_key=True)
    complaint_id = Column(Integer, ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(String(100), nullable=True)
    uploaded_at = Column(UTCDateTime(), nullable=False)

    complaint = relationship("Complaint", back_populates="attachments")


# =====================================================
# ORM HOOKS
# =====================================================
@event.listens_for(Complaint, "before_insert")
def _stamp_escalation_window(mapper, connection, target: Complaint):
    if target.created_at is None:
        target.created_at = datetime.now(timezone.utc)
    target.created_at = as_utc(target.created_at)
    if target.updated_at is None:
        target.updated_at = target.created_at
    target.escalation_eligible_at = escalation_eligible_at_for(target.created_at)


@event.listens_for(Complaint, "before_update")
def _freeze_immutable_fields(mapper, connection, target: Complaint):
    state = inspect(target)
    for field in ("code", "submission_type", "created_at", "escalation_eligible_at"):
        if state.attrs[field].history.has_changes():
            raise ValueError(f"Complaint.{field} is immutable")

    resolved = state.attrs["resolved_at"].history
    if any(v is not None for v in resolved.deleted):
        raise ValueError("Complaint.resolved_at is set exactly once")


@event.listens_for(ComplaintUpdate, "before_update")
def _reject_audit_update(mapper, connection, target: ComplaintUpdate):
    raise ValueError("Complaint updates are append-only")


@event.listens_for(ComplaintUpdate, "before_delete")
def _reject_audit_delete(mapper, connection, target: ComplaintUpdate):
    raise ValueError("Complaint updates are append-only")
