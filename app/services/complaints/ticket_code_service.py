from datetime import datetime

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.escalation import TICKET_SEQUENCE_NAME
from app.models.complaints.sequence_models import SequenceCounter
from app.services.complaints.complaint_queries import count_complaints


def _advance_counter_stmt(name: str):
    return (
        update(SequenceCounter)
        .where(SequenceCounter.name == name)
        .values(value=SequenceCounter.value + 1)
        .returning(SequenceCounter.value)
    )


def _create_counter_stmt(dialect_name: str, name: str, seed: int):
    insert = postgresql.insert if dialect_name == "postgresql" else sqlite.insert
    return (
        insert(SequenceCounter)
        .values(name=name, value=seed)
        .on_conflict_do_nothing(index_elements=[SequenceCounter.name])
    )


async def next_sequence_value(db: AsyncSession, name: str) -> int:
    """
    Atomically advance a named counter inside the caller's transaction.
    The row lock taken by the UPDATE serializes concurrent submitters.
    """
    value = (await db.execute(_advance_counter_stmt(name))).scalar_one_or_none()
    if value is not None:
        return value

    # First use: continue numbering after any complaints that already exist
    seed = await count_complaints(db)
    await db.execute(_create_counter_stmt(db.bind.dialect.name, name, seed))
    return (await db.execute(_advance_counter_stmt(name))).scalar_one()


def format_complaint_code(year: int, sequence: int) -> str:
    return f"C{year}{sequence:03d}"


async def generate_complaint_code(db: AsyncSession, now: datetime) -> str:
    sequence = await next_sequence_value(db, TICKET_SEQUENCE_NAME)
    return format_complaint_code(now.year, sequence)
