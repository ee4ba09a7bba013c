from datetime import timedelta

import pytest

from supportdesk.config import SLAState, TicketPriority, TicketStatus, UserRole
from supportdesk.core import ResourceNotFoundException
from supportdesk.sla.application import PerformanceAggregator, SLAService
from supportdesk.sla.application.services import compliance_rate
from supportdesk.tickets.domain import Ticket

from conftest import T0, make_user


async def resolve(lifecycle, clock, actor, assignee, priority, hours):
    """Open a ticket at the clock's current time and close it ``hours`` later."""
    opened_at = clock.now
    ticket = await lifecycle.create("Slow VPN", "Throughput drops at noon", priority, actor,
                                    assigned_to_id=assignee.id)
    clock.now = opened_at + timedelta(hours=hours)
    closed = await lifecycle.change_status(ticket.id, TicketStatus.CLOSED, actor)
    clock.now = opened_at
    return closed


@pytest.mark.asyncio
async def test_agents_without_tickets_are_fully_compliant(uow, agent, admin):
    rows = await PerformanceAggregator(uow).agent_performance()

    assert len(rows) == 1
    row = rows[0]
    assert row.agent_id == agent.id
    assert row.tickets_resolved == 0
    assert row.average_resolution_hours == 0
    assert row.sla_compliance_rate == 100


@pytest.mark.asyncio
async def test_agent_performance_over_closed_tickets(uow, lifecycle, clock, agent, admin):
    idle = await make_user(uow, "idle", UserRole.AGENT)

    await resolve(lifecycle, clock, admin, agent, TicketPriority.CRITICAL, hours=2)
    await resolve(lifecycle, clock, admin, agent, TicketPriority.HIGH, hours=10)
    # Open tickets and tickets assigned to admins are ignored
    await lifecycle.create("Open", "still open", TicketPriority.LOW, admin, assigned_to_id=agent.id)
    await resolve(lifecycle, clock, admin, admin, TicketPriority.LOW, hours=1)

    rows = {row.username: row for row in await PerformanceAggregator(uow).agent_performance()}

    assert set(rows) == {"ana", "idle"}
    assert rows["ana"].tickets_resolved == 2
    assert rows["ana"].average_resolution_hours == 6.0
    assert rows["ana"].sla_compliance_rate == 50
    assert rows["idle"].agent_id == idle.id
    assert rows["idle"].sla_compliance_rate == 100


@pytest.mark.asyncio
async def test_compliance_rate_is_rounded(uow, lifecycle, clock, agent, admin):
    await resolve(lifecycle, clock, admin, agent, TicketPriority.MEDIUM, hours=1)
    await resolve(lifecycle, clock, admin, agent, TicketPriority.MEDIUM, hours=2)
    await resolve(lifecycle, clock, admin, agent, TicketPriority.MEDIUM, hours=30)

    [row] = await PerformanceAggregator(uow).agent_performance()
    assert row.sla_compliance_rate == 67
    assert row.average_resolution_hours == 11.0


@pytest.mark.asyncio
async def test_priority_performance(uow, lifecycle, clock, agent, admin):
    await resolve(lifecycle, clock, admin, agent, TicketPriority.CRITICAL, hours=3)
    await resolve(lifecycle, clock, admin, agent, TicketPriority.HIGH, hours=9)
    await resolve(lifecycle, clock, admin, agent, TicketPriority.HIGH, hours=1)

    rows = await PerformanceAggregator(uow).priority_performance()

    assert [row.priority for row in rows] == [
        TicketPriority.CRITICAL, TicketPriority.HIGH, TicketPriority.MEDIUM, TicketPriority.LOW,
    ]
    by_priority = {row.priority: row for row in rows}
    assert by_priority[TicketPriority.CRITICAL].sla_compliance_rate == 100
    assert by_priority[TicketPriority.HIGH].sla_compliance_rate == 50
    assert by_priority[TicketPriority.HIGH].tickets_resolved == 2
    assert by_priority[TicketPriority.MEDIUM].tickets_resolved == 0
    assert by_priority[TicketPriority.MEDIUM].sla_compliance_rate == 100


@pytest.mark.asyncio
async def test_sla_service_evaluates_stored_ticket(uow, lifecycle, clock, customer):
    ticket = await lifecycle.create("Outage", "Everything is down", TicketPriority.CRITICAL, customer)
    service = SLAService(uow, clock=clock)

    clock.advance(hours=3)
    loaded, status = await service.evaluate_ticket(ticket.id)
    assert loaded.id == ticket.id
    assert status.state == SLAState.AT_RISK

    clock.advance(hours=2)
    _, status = await service.evaluate_ticket(ticket.id)
    assert status.state == SLAState.EXPIRED

    with pytest.raises(ResourceNotFoundException):
        await service.evaluate_ticket(999)


def test_compliance_rate_rounds_halves_up():
    def closed(hours):
        return Ticket(
            id=None, ticket_number="TK-X", title="t", description="d",
            status=TicketStatus.CLOSED, priority=TicketPriority.CRITICAL,
            created_by_id=1, created_at=T0, updated_at=T0 + timedelta(hours=hours),
            sla_deadline=T0 + timedelta(hours=4),
        )

    # 1 of 8 within the deadline = 12.5%
    tickets = [closed(1)] + [closed(9) for _ in range(7)]

    assert compliance_rate(tickets) == (8, 13)
    assert compliance_rate([]) == (0, 100)
