"""
Ticket Controllers (API Routes)
================================

FastAPI routes for the ticket lifecycle, comments and activity history.

Controllers are thin - they check who may see or touch a ticket and
delegate everything else to the application services.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from supportdesk.config import TicketPriority, TicketStatus
from supportdesk.core import AuthorizationException, ValidationException
from supportdesk.identity.domain import AuthenticatedUser
from supportdesk.identity.interfaces.dependencies import get_current_user, require_staff
from supportdesk.shared.api.dependencies import get_unit_of_work
from supportdesk.shared.application import IUnitOfWork
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.tickets.application import (
    ActivityResponse,
    CommentCreateRequest,
    CommentResponse,
    TicketAssignRequest,
    TicketCreateRequest,
    TicketLifecycleService,
    TicketQueryService,
    TicketResponse,
    TicketStatsResponse,
    TicketStatusUpdateRequest,
)
from supportdesk.tickets.domain import Ticket, TicketFilter

logger = get_logger(__name__)
router = APIRouter(prefix="/api/tickets", tags=["Tickets"])


# ========== Example payloads for Swagger ==========

TICKET_RESPONSE_EXAMPLE = {
    "id": 1,
    "ticket_number": "TK-7QZ2",
    "title": "VPN drops every few minutes",
    "description": "Since this morning the VPN disconnects roughly every five minutes.",
    "status": "open",
    "priority": "high",
    "created_by_id": 3,
    "assigned_to_id": None,
    "created_at": "2024-01-15T10:00:00Z",
    "updated_at": "2024-01-15T10:00:00Z",
    "sla_deadline": "2024-01-15T18:00:00Z"
}


# ========== Dependencies ==========

def get_lifecycle_service(uow: IUnitOfWork = Depends(get_unit_of_work)) -> TicketLifecycleService:
    return TicketLifecycleService(uow)


def get_query_service(uow: IUnitOfWork = Depends(get_unit_of_work)) -> TicketQueryService:
    return TicketQueryService(uow)


def ensure_can_view(ticket: Ticket, user: AuthenticatedUser) -> None:
    """Staff see every ticket; a plain user only the tickets they created."""
    if not user.is_staff and ticket.created_by_id != user.id:
        raise AuthorizationException(
            "You do not have access to this ticket",
            {"ticket_id": ticket.id}
        )


async def _ensure_assignee_exists(uow: IUnitOfWork, assigned_to_id: Optional[int]) -> None:
    if assigned_to_id is None:
        return
    if await uow.users.get_by_id(assigned_to_id) is None:
        raise ValidationException("Invalid assignee", {"field": "assigned_to_id", "value": assigned_to_id})


async def _visible_ticket(
    ticket_id: int,
    current_user: AuthenticatedUser,
    queries: TicketQueryService,
) -> Ticket:
    ticket = await queries.get_ticket(ticket_id)
    ensure_can_view(ticket, current_user)
    return ticket


# ========== Route Handlers ==========

@router.get(
    "",
    response_model=List[TicketResponse],
    summary="List tickets",
    description="""
    List tickets, newest first.

    Users with role `user` only ever see tickets they created. The
    `assigned_to` filter is honoured for agents and admins only.
    """,
)
async def list_tickets(
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    priority: Optional[TicketPriority] = Query(None),
    assigned_to: Optional[int] = Query(None),
    current_user: AuthenticatedUser = Depends(get_current_user),
    queries: TicketQueryService = Depends(get_query_service),
):
    filters = TicketFilter(
        status=status_filter,
        priority=priority,
        assigned_to_id=assigned_to if current_user.is_staff else None,
        created_by_id=None if current_user.is_staff else current_user.id,
    )
    tickets = await queries.list_tickets(filters)
    return [TicketResponse.model_validate(ticket) for ticket in tickets]


@router.get(
    "/stats",
    response_model=TicketStatsResponse,
    summary="Ticket counts per status",
)
async def ticket_stats(
    current_user: AuthenticatedUser = Depends(require_staff),
    queries: TicketQueryService = Depends(get_query_service),
):
    counts = await queries.status_counts()
    return TicketStatsResponse(
        open=counts[TicketStatus.OPEN],
        in_progress=counts[TicketStatus.IN_PROGRESS],
        on_hold=counts[TicketStatus.ON_HOLD],
        closed=counts[TicketStatus.CLOSED],
    )


@router.get(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Get a ticket",
    responses={200: {"content": {"application/json": {"example": TICKET_RESPONSE_EXAMPLE}}}},
)
async def get_ticket(
    ticket_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    queries: TicketQueryService = Depends(get_query_service),
):
    ticket = await _visible_ticket(ticket_id, current_user, queries)
    return TicketResponse.model_validate(ticket)


@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a ticket",
    description="""
    Open a ticket. It always starts `open` with a fresh `TK-XXXX` number and
    an SLA deadline derived from its priority.

    Only agents and admins may set an initial assignee.
    """,
)
async def create_ticket(
    request: TicketCreateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    uow: IUnitOfWork = Depends(get_unit_of_work),
    lifecycle: TicketLifecycleService = Depends(get_lifecycle_service),
):
    if request.assigned_to_id is not None:
        if not current_user.is_staff:
            raise AuthorizationException("Only agents and admins may assign tickets")
        await _ensure_assignee_exists(uow, request.assigned_to_id)

    ticket = await lifecycle.create(
        title=request.title,
        description=request.description,
        priority=TicketPriority(request.priority),
        actor=current_user,
        assigned_to_id=request.assigned_to_id,
    )
    return TicketResponse.model_validate(ticket)


@router.patch(
    "/{ticket_id}/status",
    response_model=TicketResponse,
    summary="Change ticket status",
    description="Agents, admins and the ticket's creator. Any status may follow any other.",
)
async def update_ticket_status(
    ticket_id: int,
    request: TicketStatusUpdateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    queries: TicketQueryService = Depends(get_query_service),
    lifecycle: TicketLifecycleService = Depends(get_lifecycle_service),
):
    await _visible_ticket(ticket_id, current_user, queries)
    ticket = await lifecycle.change_status(ticket_id, TicketStatus(request.status), current_user)
    return TicketResponse.model_validate(ticket)


@router.patch(
    "/{ticket_id}/assign",
    response_model=TicketResponse,
    summary="Assign or unassign a ticket",
    description="Agents and admins only. `assigned_to_id: null` clears the assignment.",
)
async def assign_ticket(
    ticket_id: int,
    request: TicketAssignRequest,
    current_user: AuthenticatedUser = Depends(require_staff),
    uow: IUnitOfWork = Depends(get_unit_of_work),
    lifecycle: TicketLifecycleService = Depends(get_lifecycle_service),
):
    await _ensure_assignee_exists(uow, request.assigned_to_id)
    ticket = await lifecycle.reassign(ticket_id, request.assigned_to_id, current_user)
    return TicketResponse.model_validate(ticket)


@router.get(
    "/{ticket_id}/comments",
    response_model=List[CommentResponse],
    summary="List comments, newest first",
)
async def list_comments(
    ticket_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    queries: TicketQueryService = Depends(get_query_service),
):
    await _visible_ticket(ticket_id, current_user, queries)
    comments = await queries.list_comments(ticket_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post(
    "/{ticket_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a ticket",
)
async def add_comment(
    ticket_id: int,
    request: CommentCreateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    queries: TicketQueryService = Depends(get_query_service),
    lifecycle: TicketLifecycleService = Depends(get_lifecycle_service),
):
    await _visible_ticket(ticket_id, current_user, queries)
    comment = await lifecycle.add_comment(ticket_id, request.content, current_user)
    return CommentResponse.model_validate(comment)


@router.get(
    "/{ticket_id}/activities",
    response_model=List[ActivityResponse],
    summary="Audit trail, newest first",
)
async def list_activities(
    ticket_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    queries: TicketQueryService = Depends(get_query_service),
):
    await _visible_ticket(ticket_id, current_user, queries)
    activities = await queries.list_activities(ticket_id)
    return [ActivityResponse.model_validate(activity) for activity in activities]


tickets_router = router
