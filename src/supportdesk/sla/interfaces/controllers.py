"""
SLA Controllers (API Routes)
=============================

Live SLA status of a ticket and compliance reporting.
"""

from typing import List

from fastapi import APIRouter, Depends

from supportdesk.identity.domain import AuthenticatedUser
from supportdesk.identity.interfaces.dependencies import get_current_user, require_staff
from supportdesk.shared.api.dependencies import get_unit_of_work
from supportdesk.shared.application import IUnitOfWork
from supportdesk.sla.application import (
    AgentPerformanceResponse,
    PerformanceAggregator,
    PriorityPerformanceResponse,
    SLAService,
    SLAStatusResponse,
    TicketSLAResponse,
)
from supportdesk.tickets.interfaces.controllers import ensure_can_view

sla_router = APIRouter(prefix="/api/tickets", tags=["SLA"])
performance_router = APIRouter(prefix="/api/performance", tags=["Performance"])


TICKET_SLA_RESPONSE_EXAMPLE = {
    "ticket_id": 1,
    "ticket_number": "TK-7QZ2",
    "priority": "critical",
    "status": "open",
    "sla": {
        "state": "at_risk",
        "deadline": "2024-01-15T14:00:00Z",
        "total_minutes": 240,
        "remaining_minutes": 60,
        "percentage_remaining": 25,
        "is_expired": False,
        "display": "1h 0m remaining"
    }
}


# ========== Dependencies ==========

def get_sla_service(uow: IUnitOfWork = Depends(get_unit_of_work)) -> SLAService:
    """Get SLA service instance."""
    return SLAService(uow)


def get_performance_aggregator(uow: IUnitOfWork = Depends(get_unit_of_work)) -> PerformanceAggregator:
    return PerformanceAggregator(uow)


# ========== Route Handlers ==========

@sla_router.get(
    "/{ticket_id}/sla",
    response_model=TicketSLAResponse,
    summary="Get ticket SLA status",
    description="""
    Evaluate a ticket's SLA now.

    States: `on_track`, `at_risk` (25% or less of the allotted time left),
    `expired`, `completed` (ticket closed; the bar shows 100).
    """,
    responses={200: {"content": {"application/json": {"example": TICKET_SLA_RESPONSE_EXAMPLE}}}},
)
async def get_ticket_sla(
    ticket_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    sla_service: SLAService = Depends(get_sla_service),
):
    ticket, sla_status = await sla_service.evaluate_ticket(ticket_id)
    ensure_can_view(ticket, current_user)

    return TicketSLAResponse(
        ticket_id=ticket.id,
        ticket_number=ticket.ticket_number,
        priority=ticket.priority,
        status=ticket.status,
        sla=SLAStatusResponse.model_validate(sla_status),
    )


@performance_router.get(
    "/agents",
    response_model=List[AgentPerformanceResponse],
    summary="Per-agent resolution statistics",
    description="One row per agent over closed tickets assigned to them. "
                "An agent with nothing resolved reports 100% compliance.",
)
async def agent_performance(
    current_user: AuthenticatedUser = Depends(require_staff),
    aggregator: PerformanceAggregator = Depends(get_performance_aggregator),
):
    rows = await aggregator.agent_performance()
    return [AgentPerformanceResponse.model_validate(row) for row in rows]


@performance_router.get(
    "/priorities",
    response_model=List[PriorityPerformanceResponse],
    summary="Per-priority SLA compliance",
)
async def priority_performance(
    current_user: AuthenticatedUser = Depends(require_staff),
    aggregator: PerformanceAggregator = Depends(get_performance_aggregator),
):
    rows = await aggregator.priority_performance()
    return [PriorityPerformanceResponse.model_validate(row) for row in rows]
