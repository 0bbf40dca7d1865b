import asyncio
import os
from datetime import datetime, timezone

import pytest

# Settings are validated at import time
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DB_TYPE", "sqlite")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_complaints.db")
os.environ.setdefault("JWT_ACCESS_SECRET_KEY", "test-secret-key")
os.environ.setdefault("EMAIL_TEST_MODE", "true")

from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app.core.clock import FixedClock  # noqa: E402
from app.core.db import Base, enable_sqlite_foreign_keys  # noqa: E402
from app.core.exceptions import NotificationError  # noqa: E402
from app.models.enums.complaint_status import (  # noqa: E402
    ComplaintCategory,
    ComplaintPriority,
    SubmissionType,
)
from app.models.enums.user_role import UserRole  # noqa: E402
from app.models.users.user_models import User  # noqa: E402
from app.schemas.complaints.complaint_schemas import ComplaintCreate  # noqa: E402
from app.services.complaints.complaint_service import submit_complaint  # noqa: E402

T0 = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


class RecordingNotifier:
    """Notifier double that records every hook call as (name, args, kwargs)."""

    def __init__(self):
        self.calls = []

    def names(self):
        return [name for name, _, _ in self.calls]

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))

    async def on_complaint_created(self, complaint):
        self._record("on_complaint_created", complaint)

    async def on_status_changed(self, complaint, old_status, new_status, actor_name):
        self._record("on_status_changed", complaint, old_status, new_status, actor_name)

    async def on_assigned(self, complaint, assignee):
        self._record("on_assigned", complaint, assignee)

    async def on_escalated(self, complaint, reason, higher_authority, *, notify_submitter):
        self._record(
            "on_escalated", complaint, reason, higher_authority, notify_submitter=notify_submitter
        )

    async def on_auto_escalated(self, complaint, senior_authority, reason):
        self._record("on_auto_escalated", complaint, senior_authority, reason)

    async def on_note_added(self, complaint, note):
        self._record("on_note_added", complaint, note)


class FakeEmailService:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    async def send(self, to, kind, **context):
        if to in self.fail_for:
            raise NotificationError(f"SMTP refused {to}")
        self.sent.append((to, kind, context))


class FakeRealtime:
    def __init__(self):
        self.events = []

    async def broadcast(self, event_type, payload):
        self.events.append((event_type, payload))
        return 0


class Seeder:
    def __init__(self, session_factory, clock):
        self.session_factory = session_factory
        self.clock = clock

    async def user(
        self,
        username,
        role=UserRole.USER,
        *,
        full_name=None,
        email=None,
        is_active=True,
        password_hash="not-a-real-hash",
    ) -> User:
        async with self.session_factory() as db:
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                full_name=full_name,
                password_hash=password_hash,
                role=role,
                is_active=is_active,
            )
            db.add(user)
            await db.commit()
            return user

    async def complaint(
        self,
        submitter: User | None = None,
        *,
        at: datetime | None = None,
        submission_type=SubmissionType.PUBLIC,
        subject="Water leak in corridor",
        category=ComplaintCategory.FACILITY,
        priority=ComplaintPriority.MEDIUM,
    ) -> str:
        payload = ComplaintCreate(
            subject=subject,
            description="Water has been leaking from the ceiling for days.",
            category=category,
            priority=priority,
            submission_type=submission_type,
        )
        async with self.session_factory() as db:
            owner = await db.get(User, submitter.id) if submitter is not None else None
            complaint = await submit_complaint(
                db,
                payload,
                owner,
                clock=FixedClock(at or self.clock.now()),
                notifier=RecordingNotifier(),
            )
            return complaint.code


async def _create_schema(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def session_factory(tmp_path):
    # NullPool: every asyncio.run() gets fresh connections on its own loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    asyncio.run(_create_schema(engine))

    yield async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    asyncio.run(engine.dispose())


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def seed(session_factory, clock):
    return Seeder(session_factory, clock)


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def realtime():
    return FakeRealtime()
