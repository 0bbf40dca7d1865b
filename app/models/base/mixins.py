from datetime import datetime, timezone

from sqlalchemy import Column
from sqlalchemy.sql import func

from app.models.base.types import UTCDateTime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """
    created_at falls back to the current time; services normally pass an
    explicit value from the injected Clock so seeded history keeps its dates.
    """

    created_at = Column(UTCDateTime(), default=_utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(UTCDateTime(), nullable=True)
