"""
SLA Application Services
=========================

Application services orchestrate business logic and coordinate between
domain calculations and the store.

Following SOLID principles:
- Single Responsibility: live evaluation and historical aggregation are separate
- Dependency Inversion: both depend on the IUnitOfWork abstraction
"""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Tuple

from supportdesk.config import TicketPriority, TicketStatus, UserRole, settings
from supportdesk.core import ResourceNotFoundException
from supportdesk.shared.infrastructure.logging import get_logger, log_latency
from supportdesk.sla.domain import SLACalculator, SLAStatus, round_half_up
from supportdesk.tickets.application.services import utc_now
from supportdesk.tickets.domain import Ticket, TicketFilter

if TYPE_CHECKING:
    from supportdesk.shared.application import IUnitOfWork

logger = get_logger(__name__)

# Highest urgency first
PRIORITY_ORDER = (
    TicketPriority.CRITICAL,
    TicketPriority.HIGH,
    TicketPriority.MEDIUM,
    TicketPriority.LOW,
)


@dataclass(frozen=True)
class AgentPerformance:
    agent_id: int
    username: str
    name: str
    tickets_resolved: int
    average_resolution_hours: float
    sla_compliance_rate: int


@dataclass(frozen=True)
class PriorityPerformance:
    priority: TicketPriority
    tickets_resolved: int
    sla_compliance_rate: int


def compliance_rate(tickets: Iterable[Ticket]) -> Tuple[int, int]:
    """
    Share of closed tickets resolved by their deadline.

    Returns:
        (ticket count, rate rounded to an int). An empty set is 100% compliant.
    """
    tickets = list(tickets)
    if not tickets:
        return 0, 100
    within = sum(1 for ticket in tickets if SLACalculator.is_within_sla(ticket))
    return len(tickets), round_half_up(within / len(tickets) * 100)


def average_resolution_hours(tickets: Iterable[Ticket]) -> float:
    """Mean of ``updated_at - created_at`` in hours, one decimal. 0 for none."""
    durations = [
        (ticket.updated_at - ticket.created_at).total_seconds() / 3600
        for ticket in tickets
    ]
    if not durations:
        return 0.0
    return round(sum(durations) / len(durations), 1)


class SLAService:
    """Live SLA evaluation for single tickets."""

    def __init__(
        self,
        unit_of_work: "IUnitOfWork",
        clock: Optional[Callable[[], datetime]] = None,
        warning_threshold_percent: Optional[int] = None,
    ):
        self._uow = unit_of_work
        self._clock = clock or utc_now
        if warning_threshold_percent is None:
            warning_threshold_percent = settings.sla_warning_threshold_percent
        self._warning_threshold = warning_threshold_percent

    def evaluate(self, ticket: Ticket, now: Optional[datetime] = None) -> SLAStatus:
        return SLACalculator.evaluate(ticket, now or self._clock(), self._warning_threshold)

    async def evaluate_ticket(self, ticket_id: int) -> Tuple[Ticket, SLAStatus]:
        """
        Load a ticket and evaluate its SLA now.

        Raises:
            ResourceNotFoundException: no such ticket
        """
        ticket = await self._uow.tickets.get_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket, self.evaluate(ticket)


class PerformanceAggregator:
    """
    Read-only compliance statistics over closed tickets.

    ``updated_at`` of a closed ticket is taken as its resolution instant.
    """

    def __init__(self, unit_of_work: "IUnitOfWork"):
        self._uow = unit_of_work

    async def agent_performance(self) -> List[AgentPerformance]:
        """One row per ``agent`` account, including agents with nothing resolved."""
        with log_latency(logger, "agent_performance"):
            agents = await self._uow.users.list(UserRole.AGENT)
            closed = await self._uow.tickets.list(TicketFilter(status=TicketStatus.CLOSED))

            results = []
            for agent in agents:
                resolved = [ticket for ticket in closed if ticket.assigned_to_id == agent.id]
                count, rate = compliance_rate(resolved)
                results.append(AgentPerformance(
                    agent_id=agent.id,
                    username=agent.username,
                    name=agent.name,
                    tickets_resolved=count,
                    average_resolution_hours=average_resolution_hours(resolved),
                    sla_compliance_rate=rate,
                ))
        return results

    async def priority_performance(self) -> List[PriorityPerformance]:
        """One row per priority, critical first."""
        with log_latency(logger, "priority_performance"):
            closed = await self._uow.tickets.list(TicketFilter(status=TicketStatus.CLOSED))

            results = []
            for priority in PRIORITY_ORDER:
                count, rate = compliance_rate(t for t in closed if t.priority == priority)
                results.append(PriorityPerformance(
                    priority=priority,
                    tickets_resolved=count,
                    sla_compliance_rate=rate,
                ))
        return results
