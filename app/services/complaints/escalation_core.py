from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.complaints.complaint_models import Complaint
from app.models.enums.complaint_status import SWEEP_EXCLUDED_STATUSES, SubmissionType


def _escalation_candidates_stmt(*, cutoff: datetime):
    """
    PUBLIC complaints created before cutoff that are not escalated or finished.
    Idempotent & safe for cron: escalated rows drop out of the filter.
    """
    return (
        select(Complaint.code)
        .where(
            Complaint.submission_type == SubmissionType.PUBLIC,
            Complaint.created_at < cutoff,
            Complaint.status.not_in(list(SWEEP_EXCLUDED_STATUSES)),
        )
        .order_by(Complaint.created_at, Complaint.id)
    )


async def find_escalation_candidates(db: AsyncSession, cutoff: datetime) -> list[str]:
    result = await db.execute(_escalation_candidates_stmt(cutoff=cutoff))
    return list(result.scalars().all())
