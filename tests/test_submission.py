import asyncio

import pytest

from app.core.exceptions import AppException
from app.models.enums.complaint_status import ComplaintCategory, ComplaintStatus, SubmissionType
from app.models.users.user_models import User
from app.schemas.complaints.complaint_schemas import AttachmentIn, ComplaintCreate
from app.services.complaints.complaint_queries import count_complaints, get_complaint_by_code
from app.services.complaints.complaint_service import create_complaint, submit_complaint


def payload(**overrides):
    data = dict(subject="Noisy fan", description="The fan in room 12 rattles", category=ComplaintCategory.OTHER)
    data.update(overrides)
    return ComplaintCreate(**data)


def test_submit_without_attachments(session_factory, seed, clock, notifier):
    async def scenario():
        alice = await seed.user("alice")
        async with session_factory() as db:
            owner = await db.get(User, alice.id)
            response = await create_complaint(db, payload(), owner, clock=clock, notifier=notifier)

        async with session_factory() as db:
            stored = await get_complaint_by_code(db, response.data.code)
        return alice, response, stored

    alice, response, stored = asyncio.run(scenario())

    assert response.data.code == f"C{clock.now().year}001"
    assert response.data.attachments == []
    assert [u.comment for u in response.data.updates] == ["Complaint submitted successfully"]

    assert stored.status == ComplaintStatus.NEW
    assert stored.user_id == alice.id
    assert stored.attachments == []
    assert stored.escalation_eligible_at is not None

    assert notifier.names() == ["on_complaint_created"]
    assert notifier.calls[0][1][0].code == stored.code


def test_submit_with_attachments(session_factory, seed, clock, notifier):
    attachment = AttachmentIn(file_name="fan.mp4", file_path="uploads/fan.mp4", file_size=10_240)

    async def scenario():
        alice = await seed.user("alice")
        async with session_factory() as db:
            owner = await db.get(User, alice.id)
            complaint = await submit_complaint(
                db, payload(attachments=[attachment]), owner, clock=clock, notifier=notifier
            )
        return complaint

    complaint = asyncio.run(scenario())

    assert [a.file_name for a in complaint.attachments] == ["fan.mp4"]
    assert complaint.attachments[0].uploaded_at == clock.now()


def test_anonymous_submission_has_no_owner(session_factory, seed, clock, notifier):
    async def scenario():
        alice = await seed.user("alice")
        async with session_factory() as db:
            owner = await db.get(User, alice.id)
            complaint = await submit_complaint(
                db, payload(submission_type=SubmissionType.ANONYMOUS), owner,
                clock=clock, notifier=notifier,
            )
        return complaint

    complaint = asyncio.run(scenario())

    assert complaint.user_id is None
    assert complaint.updates[0].updated_by_id is None
    assert complaint.attachments == []


def test_public_submission_without_user_stores_nothing(session_factory, clock, notifier):
    async def scenario():
        async with session_factory() as db:
            with pytest.raises(AppException) as exc_info:
                await submit_complaint(db, payload(), None, clock=clock, notifier=notifier)
        async with session_factory() as db:
            return exc_info.value, await count_complaints(db)

    err, stored = asyncio.run(scenario())

    assert err.status_code == 401
    assert stored == 0
    assert notifier.calls == []
