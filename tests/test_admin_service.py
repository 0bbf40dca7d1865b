import asyncio
from datetime import timedelta

import pytest

from app.core.exceptions import EscalationNotEligibleError, InvalidAssigneeError, NotFoundError
from app.models.enums.complaint_status import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    SubmissionType,
)
from app.models.enums.user_role import UserRole
from app.services.complaints.auto_escalation_service import SeniorAuthority, auto_escalate_complaints
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
from app.services.complaints.complaint_queries import get_complaint_by_code
from app.services.complaints.complaint_service import present_complaint
from app.services.complaints.lifecycle_service import transition_status


async def load(session_factory, code):
    async with session_factory() as db:
        return await get_complaint_by_code(db, code)


# =====================================================
# ESCALATE
# =====================================================
def test_early_manual_escalation_is_refused_without_side_effects(
    session_factory, seed, clock, notifier
):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        manager = await seed.user("manager", UserRole.MANAGER)
        code = await seed.complaint(await seed.user("alice"))
        before = await load(session_factory, code)

        clock.advance(timedelta(days=3))
        async with session_factory() as db:
            with pytest.raises(EscalationNotEligibleError) as exc_info:
                await escalate_complaint(
                    db, code, manager.id, "Too slow", True, admin.id,
                    clock=clock, notifier=notifier,
                )
        return before, exc_info.value, await load(session_factory, code)

    before, err, after = asyncio.run(scenario())

    assert err.days_remaining == 4
    assert err.eligible_at == before.created_at + timedelta(days=7)
    assert err.error_code == "ESCALATION_NOT_ELIGIBLE"
    assert after.status == ComplaintStatus.NEW
    assert after.assigned_to_id is None
    assert after.updated_at == before.updated_at
    assert len(after.updates) == len(before.updates)
    assert notifier.calls == []


def test_eligibility_is_checked_before_the_target(session_factory, seed, clock, notifier):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        code = await seed.complaint(await seed.user("alice"))
        async with session_factory() as db:
            with pytest.raises(EscalationNotEligibleError):
                await escalate_complaint(
                    db, code, 9999, "Too slow", True, admin.id, clock=clock, notifier=notifier
                )

    asyncio.run(scenario())


def test_manual_escalation_after_window(session_factory, seed, clock, notifier):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN, full_name="Ada Admin")
        manager = await seed.user("manager", UserRole.MANAGER, full_name="Grace Hopper")
        code = await seed.complaint(await seed.user("alice"))

        clock.advance(timedelta(days=7))
        async with session_factory() as db:
            await escalate_complaint(
                db, code, manager.id, "No response from team", False, admin.id,
                clock=clock, notifier=notifier,
            )
        return manager, await load(session_factory, code)

    manager, complaint = asyncio.run(scenario())

    assert complaint.status == ComplaintStatus.ESCALATED
    assert complaint.assigned_to_id == manager.id
    assert len(complaint.updates) == 2

    update = complaint.updates[-1]
    assert update.comment == "Complaint escalated. Reason: No response from team, Escalated to: Grace Hopper"
    assert update.is_public is False
    assert update.updated_by_name == "Ada Admin"

    assert notifier.names() == ["on_escalated"]
    _, args, kwargs = notifier.calls[0]
    assert args[1] == "No response from team"
    assert args[2].id == manager.id
    assert kwargs == {"notify_submitter": False}


def test_manual_escalation_without_target(session_factory, seed, clock, notifier):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        code = await seed.complaint(await seed.user("alice"))

        clock.advance(timedelta(days=8))
        async with session_factory() as db:
            await escalate_complaint(
                db, code, None, "Customer called twice", True, admin.id,
                clock=clock, notifier=notifier,
            )
        return await load(session_factory, code)

    complaint = asyncio.run(scenario())

    assert complaint.status == ComplaintStatus.ESCALATED
    assert complaint.assigned_to_id is None
    assert complaint.updates[-1].comment == "Complaint escalated. Reason: Customer called twice"
    assert notifier.calls[0][2] == {"notify_submitter": True}


def test_anonymous_complaint_is_left_by_sweep_but_escalates_manually(
    session_factory, seed, clock, notifier
):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        senior = await seed.user("senior", UserRole.MANAGER, full_name="Sam Senior")
        code = await seed.complaint(
            submission_type=SubmissionType.ANONYMOUS, at=clock.now() - timedelta(days=30)
        )

        result = await auto_escalate_complaints(
            session_factory, clock=clock, notifier=notifier,
            authority=SeniorAuthority(user_id=senior.id),
        )
        swept = await load(session_factory, code)

        async with session_factory() as db:
            await escalate_complaint(
                db, code, senior.id, "Repeated reports", True, admin.id,
                clock=clock, notifier=notifier,
            )
        return senior, result, swept, await load(session_factory, code)

    senior, result, swept, escalated = asyncio.run(scenario())

    assert result.total == 0
    assert swept.status == ComplaintStatus.NEW
    assert len(swept.updates) == 1

    assert escalated.status == ComplaintStatus.ESCALATED
    assert escalated.assigned_to_id == senior.id
    assert len(escalated.updates) == 2
    assert escalated.updates[-1].comment == (
        "Complaint escalated. Reason: Repeated reports, Escalated to: Sam Senior"
    )
    assert notifier.names() == ["on_escalated"]


# =====================================================
# ASSIGN
# =====================================================
def test_assign_and_unassign(session_factory, seed, clock, notifier):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        employee = await seed.user("emp", UserRole.EMPLOYEE, full_name="Eve Employee")
        code = await seed.complaint(await seed.user("alice"))

        async with session_factory() as db:
            await assign_complaint(db, code, employee.id, admin.id, clock=clock, notifier=notifier)
        assigned = await load(session_factory, code)

        async with session_factory() as db:
            await assign_complaint(db, code, None, admin.id, clock=clock, notifier=notifier)
        return employee, assigned, await load(session_factory, code)

    employee, assigned, unassigned = asyncio.run(scenario())

    assert assigned.assigned_to_id == employee.id
    assert assigned.status == ComplaintStatus.NEW
    assert assigned.updates[-1].comment == "Complaint assigned to Eve Employee"
    assert assigned.updates[-1].status == ComplaintStatus.NEW

    assert unassigned.assigned_to_id is None
    assert unassigned.updates[-1].comment == "Complaint unassigned"
    assert len(unassigned.updates) == 3

    # Only the assignment notifies
    assert notifier.names() == ["on_assigned"]
    assert notifier.calls[0][1][1].id == employee.id


def test_assign_rejects_unknown_or_non_staff_targets(session_factory, seed, clock, notifier):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        alice = await seed.user("alice")
        code = await seed.complaint(alice)

        async with session_factory() as db:
            with pytest.raises(InvalidAssigneeError):
                await assign_complaint(db, code, alice.id, admin.id, clock=clock, notifier=notifier)

        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await assign_complaint(db, code, 4242, admin.id, clock=clock, notifier=notifier)

        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await assign_complaint(db, "C0000000", None, admin.id, clock=clock, notifier=notifier)

        return await load(session_factory, code)

    complaint = asyncio.run(scenario())

    assert complaint.assigned_to_id is None
    assert len(complaint.updates) == 1
    assert notifier.calls == []


# =====================================================
# NOTES
# =====================================================
def test_public_note_notifies_submitter(session_factory, seed, clock, notifier):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        code = await seed.complaint(await seed.user("alice"))
        anonymous_code = await seed.complaint(submission_type=SubmissionType.ANONYMOUS)

        async with session_factory() as db:
            await add_complaint_note(db, code, "Technician visits Monday", True, admin.id,
                                     clock=clock, notifier=notifier)
        async with session_factory() as db:
            await add_complaint_note(db, code, "Internal: vendor contract", False, admin.id,
                                     clock=clock, notifier=notifier)
        async with session_factory() as db:
            await add_complaint_note(db, anonymous_code, "Looking into it", True, admin.id,
                                     clock=clock, notifier=notifier)
        return await load(session_factory, code)

    complaint = asyncio.run(scenario())

    assert [u.is_public for u in complaint.updates] == [True, True, False]
    assert notifier.names() == ["on_note_added"]
    assert notifier.calls[0][1][1] == "Technician visits Monday"


def test_private_note_is_hidden_from_submitter(session_factory, seed, clock, notifier):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        alice = await seed.user("alice")
        code = await seed.complaint(alice)

        async with session_factory() as db:
            await add_private_note(db, code, "Possible fraud", admin.id, clock=clock)
        return alice, admin, await load(session_factory, code)

    alice, admin, complaint = asyncio.run(scenario())

    note = complaint.updates[-1]
    assert note.is_private_note is True
    assert note.is_public is False

    staff_view = present_complaint(complaint, admin)
    submitter_view = present_complaint(complaint, alice)
    assert len(staff_view.updates) == 2
    assert [u.comment for u in submitter_view.updates] == ["Complaint submitted successfully"]


def test_anonymous_code_is_hidden_from_non_staff(session_factory, seed):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        alice = await seed.user("alice")
        code = await seed.complaint(submission_type=SubmissionType.ANONYMOUS)
        return admin, alice, await load(session_factory, code)

    admin, alice, complaint = asyncio.run(scenario())

    assert complaint.user_id is None
    assert complaint.updates[0].updated_by_id is None
    assert present_complaint(complaint, admin).code == complaint.code
    assert present_complaint(complaint, alice).code is None
    assert present_complaint(complaint, None).code is None


# =====================================================
# LISTINGS & DASHBOARD
# =====================================================
def test_complaint_listing_filters(session_factory, seed, clock, notifier):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        employee = await seed.user("emp", UserRole.EMPLOYEE)
        alice = await seed.user("alice")
        start = clock.now()

        leak = await seed.complaint(alice, at=start - timedelta(days=2))
        billing = await seed.complaint(
            alice,
            subject="Charged twice for parking",
            category=ComplaintCategory.BILLING,
            priority=ComplaintPriority.URGENT,
            at=start - timedelta(days=1),
        )
        anonymous = await seed.complaint(
            submission_type=SubmissionType.ANONYMOUS,
            subject="Rude reception staff",
            category=ComplaintCategory.STAFF,
        )

        async with session_factory() as db:
            await assign_complaint(db, billing, employee.id, admin.id, clock=clock, notifier=notifier)
        async with session_factory() as db:
            await transition_status(db, leak, ComplaintStatus.IN_PROGRESS, None, admin.id,
                                    clock=clock, notifier=notifier)

        async def codes(**filters):
            async with session_factory() as db:
                res = await list_complaints(db, admin, **filters)
            return res.total, [c.code for c in res.data]

        found = {
            "all": await codes(),
            "status": await codes(status=ComplaintStatus.IN_PROGRESS),
            "category": await codes(category=ComplaintCategory.BILLING),
            "priority": await codes(priority=ComplaintPriority.URGENT),
            "assigned": await codes(assigned_to=str(employee.id)),
            "unassigned": await codes(assigned_to="unassigned"),
            "search": await codes(search="TWICE"),
            "by_code": await codes(search=anonymous),
            "page": await codes(limit=1, offset=1),
        }
        return leak, billing, anonymous, found

    leak, billing, anonymous, found = asyncio.run(scenario())

    # Most recent first; staff see anonymous codes
    assert found["all"] == (3, [anonymous, billing, leak])
    assert found["status"] == (1, [leak])
    assert found["category"] == (1, [billing])
    assert found["priority"] == (1, [billing])
    assert found["assigned"] == (1, [billing])
    assert found["unassigned"] == (2, [anonymous, leak])
    assert found["search"] == (1, [billing])
    assert found["by_code"] == (1, [anonymous])
    assert found["page"] == (3, [billing])


def test_escalated_listing_and_dashboard(session_factory, seed, clock, notifier):
    async def scenario():
        admin = await seed.user("admin", UserRole.ADMIN)
        await seed.user("inactive", UserRole.EMPLOYEE, is_active=False)
        alice = await seed.user("alice")
        start = clock.now()

        escalated = await seed.complaint(alice, at=start - timedelta(days=10))
        reopened = await seed.complaint(alice, at=start - timedelta(days=10))
        resolved = await seed.complaint(alice, at=start - timedelta(days=4))
        await seed.complaint(alice)

        for code in (escalated, reopened):
            async with session_factory() as db:
                await escalate_complaint(db, code, None, "Late", False, admin.id,
                                         clock=clock, notifier=notifier)
        async with session_factory() as db:
            await transition_status(db, reopened, ComplaintStatus.IN_PROGRESS, None, admin.id,
                                    clock=clock, notifier=notifier)
        async with session_factory() as db:
            await transition_status(db, resolved, ComplaintStatus.RESOLVED, None, admin.id,
                                    clock=clock, notifier=notifier)

        async with session_factory() as db:
            listed = [c.code for c in await list_escalated_complaints(db)]
            users = await list_assignable_users(db)
            stats = await get_dashboard_stats(db)
        return escalated, reopened, listed, users, stats

    escalated, reopened, listed, users, stats = asyncio.run(scenario())

    assert set(listed) == {escalated, reopened}
    assert [u.username for u in users] == ["admin"]

    assert stats["total_complaints"] == 4
    assert stats["open_complaints"] == 3
    assert stats["resolved_complaints"] == 1
    assert stats["escalated_complaints"] == 1
    assert stats["avg_resolution_days"] == 4.0
    assert stats["by_status"]["NEW"] == 1
    assert stats["by_status"]["CLOSED"] == 0
