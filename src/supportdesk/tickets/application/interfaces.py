"""
Ticket Repository Interfaces
=============================

Abstractions the lifecycle and query services depend on.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from supportdesk.config import TicketStatus
from supportdesk.tickets.domain import Activity, Comment, Ticket, TicketFilter


class ITicketRepository(ABC):
    """Interface for ticket data access."""

    @abstractmethod
    async def get_by_id(self, ticket_id: int) -> Optional[Ticket]:
        """Get ticket by internal ID."""

    @abstractmethod
    async def get_by_number(self, ticket_number: str) -> Optional[Ticket]:
        """Get ticket by its human-facing number."""

    @abstractmethod
    async def exists_by_number(self, ticket_number: str) -> bool:
        """Check whether a ticket number is already taken."""

    @abstractmethod
    async def create(self, ticket: Ticket) -> Ticket:
        """Persist a new ticket and return it with its ID set."""

    @abstractmethod
    async def update(self, ticket: Ticket) -> Ticket:
        """Write back status, assignee and ``updated_at``."""

    @abstractmethod
    async def list(self, filters: Optional[TicketFilter] = None) -> List[Ticket]:
        """List tickets matching ``filters``, newest first."""

    @abstractmethod
    async def count_by_status(self) -> Dict[TicketStatus, int]:
        """Ticket counts keyed by status."""


class ICommentRepository(ABC):
    """Interface for comment data access."""

    @abstractmethod
    async def create(self, comment: Comment) -> Comment:
        """Persist a new comment."""

    @abstractmethod
    async def list_by_ticket(self, ticket_id: int) -> List[Comment]:
        """Comments on a ticket, newest first."""


class IActivityRepository(ABC):
    """Interface for the append-only audit trail."""

    @abstractmethod
    async def append(self, activity: Activity) -> Activity:
        """Append an activity record."""

    @abstractmethod
    async def list_by_ticket(self, ticket_id: int) -> List[Activity]:
        """Activities on a ticket, newest first."""
