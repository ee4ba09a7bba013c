"""
Ticket Application Layer
=========================

Contains:
- Services: TicketLifecycleService (writes + audit), TicketQueryService (reads)
- DTOs: Data transfer objects for API serialization
- Interfaces: repository abstractions

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from supportdesk.tickets.application.interfaces import (
    ITicketRepository,
    ICommentRepository,
    IActivityRepository,
)
from supportdesk.tickets.application.services import (
    TicketLifecycleService,
    TicketQueryService,
    utc_now,
)
from supportdesk.tickets.application.dto import (
    TicketCreateRequest,
    TicketStatusUpdateRequest,
    TicketAssignRequest,
    CommentCreateRequest,
    TicketResponse,
    CommentResponse,
    ActivityResponse,
    TicketStatsResponse,
)

__all__ = [
    # Repository Interfaces
    "ITicketRepository",
    "ICommentRepository",
    "IActivityRepository",
    # Services
    "TicketLifecycleService",
    "TicketQueryService",
    "utc_now",
    # DTOs
    "TicketCreateRequest",
    "TicketStatusUpdateRequest",
    "TicketAssignRequest",
    "CommentCreateRequest",
    "TicketResponse",
    "CommentResponse",
    "ActivityResponse",
    "TicketStatsResponse",
]
