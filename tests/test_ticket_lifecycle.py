import re
from datetime import timedelta

import pytest

from supportdesk.config import ActivityAction, TicketPriority, TicketStatus
from supportdesk.core import (
    AuditTrailException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from supportdesk.infrastructure.unit_of_work import InMemoryUnitOfWork
from supportdesk.tickets.application import TicketLifecycleService
from supportdesk.tickets.domain import generate_ticket_number
from supportdesk.tickets.infrastructure.repositories import InMemoryActivityRepository

from conftest import T0, SequentialNumbers


class BrokenActivityRepository(InMemoryActivityRepository):
    async def append(self, activity):
        raise RuntimeError("disk full")


async def open_ticket(lifecycle, actor, priority=TicketPriority.HIGH, **kwargs):
    return await lifecycle.create(
        title="Cannot log in",
        description="Password reset link is expired",
        priority=priority,
        actor=actor,
        **kwargs,
    )


def test_generated_ticket_numbers_look_right():
    for _ in range(50):
        assert re.fullmatch(r"TK-[A-Z0-9]{4}", generate_ticket_number())


# ========== create ==========

@pytest.mark.asyncio
async def test_create_opens_ticket_with_deadline_and_one_activity(lifecycle, queries, customer):
    ticket = await open_ticket(lifecycle, customer, TicketPriority.CRITICAL)

    assert ticket.id is not None
    assert ticket.ticket_number == "TK-0001"
    assert ticket.status == TicketStatus.OPEN
    assert ticket.created_by_id == customer.id
    assert ticket.created_at == ticket.updated_at == T0
    assert ticket.sla_deadline == T0 + timedelta(hours=4)

    activities = await queries.list_activities(ticket.id)
    assert len(activities) == 1
    assert activities[0].action == ActivityAction.CREATED
    assert activities[0].details == "Ticket created"
    assert activities[0].user_id == customer.id


@pytest.mark.asyncio
async def test_create_ignores_requested_status(lifecycle, customer):
    ticket = await open_ticket(lifecycle, customer, status=TicketStatus.CLOSED)
    assert ticket.status == TicketStatus.OPEN


@pytest.mark.asyncio
@pytest.mark.parametrize("title,description", [("", "text"), ("   ", "text"), ("title", "")])
async def test_create_rejects_empty_text(lifecycle, dataset, customer, title, description):
    with pytest.raises(ValidationException):
        await lifecycle.create(title, description, TicketPriority.LOW, customer)
    assert dataset.tickets == {}


@pytest.mark.asyncio
async def test_create_rejects_unknown_priority(lifecycle, dataset, customer):
    with pytest.raises(ValidationException):
        await open_ticket(lifecycle, customer, priority="urgent")
    assert dataset.activities == []


@pytest.mark.asyncio
async def test_number_collision_is_retried(uow, clock, customer):
    numbers = iter(["TK-AAAA", "TK-AAAA", "TK-AAAA", "TK-BBBB"])
    lifecycle = TicketLifecycleService(uow, clock=clock, number_factory=lambda: next(numbers))

    first = await open_ticket(lifecycle, customer)
    second = await open_ticket(lifecycle, customer)

    assert first.ticket_number == "TK-AAAA"
    assert second.ticket_number == "TK-BBBB"


@pytest.mark.asyncio
async def test_number_exhaustion_raises_conflict(uow, dataset, clock, customer):
    lifecycle = TicketLifecycleService(
        uow, clock=clock, number_factory=lambda: "TK-SAME", max_number_attempts=3
    )
    await open_ticket(lifecycle, customer)

    with pytest.raises(ConflictException):
        await open_ticket(lifecycle, customer)

    assert len(dataset.tickets) == 1
    assert len(dataset.activities) == 1


# ========== change_status ==========

@pytest.mark.asyncio
async def test_change_status_records_transition(lifecycle, queries, clock, customer, agent):
    ticket = await open_ticket(lifecycle, customer)
    later = clock.advance(minutes=30)

    updated = await lifecycle.change_status(ticket.id, TicketStatus.IN_PROGRESS, agent)

    assert updated.status == TicketStatus.IN_PROGRESS
    assert updated.updated_at == later

    latest = (await queries.list_activities(ticket.id))[0]
    assert latest.action == ActivityAction.STATUS_CHANGE
    assert latest.details == "Status changed from open to in-progress"
    assert latest.user_id == agent.id


@pytest.mark.asyncio
async def test_any_status_can_follow_any_other(lifecycle, customer, agent):
    ticket = await open_ticket(lifecycle, customer)
    for status in (TicketStatus.CLOSED, TicketStatus.OPEN, TicketStatus.ON_HOLD, TicketStatus.CLOSED):
        ticket = await lifecycle.change_status(ticket.id, status, agent)
        assert ticket.status == status


@pytest.mark.asyncio
async def test_same_status_change_is_still_audited(lifecycle, queries, customer, agent):
    ticket = await open_ticket(lifecycle, customer)

    await lifecycle.change_status(ticket.id, TicketStatus.OPEN, agent)

    activities = await queries.list_activities(ticket.id)
    assert len(activities) == 2
    assert activities[0].details == "Status changed from open to open"


@pytest.mark.asyncio
async def test_change_status_validates_input(lifecycle, customer, agent):
    ticket = await open_ticket(lifecycle, customer)

    with pytest.raises(ValidationException):
        await lifecycle.change_status(ticket.id, "resolved", agent)
    with pytest.raises(ResourceNotFoundException):
        await lifecycle.change_status(999, TicketStatus.CLOSED, agent)


# ========== reassign ==========

@pytest.mark.asyncio
async def test_reassign_and_unassign(lifecycle, queries, customer, agent):
    ticket = await open_ticket(lifecycle, customer)

    assigned = await lifecycle.reassign(ticket.id, agent.id, agent)
    assert assigned.assigned_to_id == agent.id

    cleared = await lifecycle.reassign(ticket.id, None, agent)
    assert cleared.assigned_to_id is None

    assignments = [
        a for a in await queries.list_activities(ticket.id)
        if a.action == ActivityAction.ASSIGNMENT
    ]
    assert [a.details for a in assignments] == [
        "Ticket unassigned",
        "Ticket assigned to Ana Martínez",
    ]


# ========== add_comment ==========

@pytest.mark.asyncio
async def test_comment_bumps_updated_at(lifecycle, queries, clock, customer, agent):
    ticket = await open_ticket(lifecycle, customer)
    clock.advance(hours=2)

    comment = await lifecycle.add_comment(ticket.id, "Looking into it", agent)

    reloaded = await queries.get_ticket(ticket.id)
    assert reloaded.updated_at == comment.created_at == clock.now
    assert [c.content for c in await queries.list_comments(ticket.id)] == ["Looking into it"]

    latest = (await queries.list_activities(ticket.id))[0]
    assert latest.action == ActivityAction.COMMENT
    assert latest.details == "Comment added"


@pytest.mark.asyncio
async def test_comment_validation(lifecycle, customer):
    ticket = await open_ticket(lifecycle, customer)

    with pytest.raises(ValidationException):
        await lifecycle.add_comment(ticket.id, "  ", customer)
    with pytest.raises(ResourceNotFoundException):
        await lifecycle.add_comment(404, "hello", customer)


@pytest.mark.asyncio
async def test_comments_and_activities_are_newest_first(lifecycle, queries, clock, customer):
    ticket = await open_ticket(lifecycle, customer)
    for text in ("first", "second", "third"):
        clock.advance(minutes=1)
        await lifecycle.add_comment(ticket.id, text, customer)

    comments = await queries.list_comments(ticket.id)
    assert [c.content for c in comments] == ["third", "second", "first"]

    activities = await queries.list_activities(ticket.id)
    assert activities[-1].action == ActivityAction.CREATED
    assert [a.created_at for a in activities] == sorted((a.created_at for a in activities), reverse=True)


# ========== audit trail failures ==========

@pytest.mark.asyncio
async def test_failed_audit_append_rolls_back_status_change(dataset, lifecycle, queries, clock, customer, agent):
    ticket = await open_ticket(lifecycle, customer)

    broken_uow = InMemoryUnitOfWork(dataset)
    broken_uow.activities = BrokenActivityRepository(dataset)
    broken = TicketLifecycleService(broken_uow, clock=clock)

    clock.advance(hours=1)
    with pytest.raises(AuditTrailException) as exc_info:
        await broken.change_status(ticket.id, TicketStatus.CLOSED, agent)

    assert exc_info.value.ticket_id == ticket.id
    reloaded = await queries.get_ticket(ticket.id)
    assert reloaded.status == TicketStatus.OPEN
    assert reloaded.updated_at == T0
    assert len(await queries.list_activities(ticket.id)) == 1


@pytest.mark.asyncio
async def test_failed_audit_append_rolls_back_creation(dataset, clock, customer):
    broken_uow = InMemoryUnitOfWork(dataset)
    broken_uow.activities = BrokenActivityRepository(dataset)
    broken = TicketLifecycleService(broken_uow, clock=clock)

    with pytest.raises(AuditTrailException):
        await open_ticket(broken, customer)

    assert dataset.tickets == {}


@pytest.mark.asyncio
async def test_failed_audit_append_rolls_back_comment(dataset, lifecycle, queries, clock, customer):
    ticket = await open_ticket(lifecycle, customer)

    broken_uow = InMemoryUnitOfWork(dataset)
    broken_uow.activities = BrokenActivityRepository(dataset)
    broken = TicketLifecycleService(broken_uow, clock=clock)

    clock.advance(hours=1)
    with pytest.raises(AuditTrailException):
        await broken.add_comment(ticket.id, "lost", customer)

    assert await queries.list_comments(ticket.id) == []
    assert (await queries.get_ticket(ticket.id)).updated_at == T0


# ========== queries ==========

@pytest.mark.asyncio
async def test_status_counts_are_zero_filled(lifecycle, queries, customer, agent):
    first = await open_ticket(lifecycle, customer)
    await open_ticket(lifecycle, customer)
    await lifecycle.change_status(first.id, TicketStatus.CLOSED, agent)

    counts = await queries.status_counts()
    assert counts == {
        TicketStatus.OPEN: 1,
        TicketStatus.IN_PROGRESS: 0,
        TicketStatus.ON_HOLD: 0,
        TicketStatus.CLOSED: 1,
    }


@pytest.mark.asyncio
async def test_get_ticket_by_number(lifecycle, queries, customer):
    ticket = await open_ticket(lifecycle, customer)

    assert (await queries.get_ticket_by_number(ticket.ticket_number)).id == ticket.id
    with pytest.raises(ResourceNotFoundException):
        await queries.get_ticket_by_number("TK-NOPE")


@pytest.mark.asyncio
async def test_zero_number_attempts_is_not_replaced_by_default(uow, dataset, clock, customer):
    lifecycle = TicketLifecycleService(
        uow, clock=clock, number_factory=SequentialNumbers(), max_number_attempts=0
    )

    with pytest.raises(ConflictException):
        await open_ticket(lifecycle, customer)

    assert dataset.tickets == {}
