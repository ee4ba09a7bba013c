"""
Ticket Domain Entities
=======================

Pure Python domain entities for the ticket lifecycle.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from supportdesk.config import ActivityAction, TicketPriority, TicketStatus


@dataclass
class Ticket:
    """
    Ticket entity representing a support request.

    ``ticket_number``, ``created_by_id``, ``created_at`` and ``sla_deadline``
    are fixed at creation. Status, assignee and ``updated_at`` move through
    the lifecycle service.
    """

    id: Optional[int]
    ticket_number: str
    title: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    created_by_id: int
    created_at: datetime
    updated_at: datetime
    assigned_to_id: Optional[int] = None
    sla_deadline: Optional[datetime] = None

    def __post_init__(self):
        """Validate ticket on initialization."""
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be before created_at")

    def touch(self, timestamp: datetime) -> None:
        """Advance ``updated_at`` without ever moving it backwards."""
        if timestamp > self.updated_at:
            self.updated_at = timestamp

    def change_status(self, status: TicketStatus, timestamp: datetime) -> TicketStatus:
        """Set a new status and return the previous one."""
        previous = self.status
        self.status = status
        self.touch(timestamp)
        return previous

    def assign(self, assignee_id: Optional[int], timestamp: datetime) -> None:
        self.assigned_to_id = assignee_id
        self.touch(timestamp)


@dataclass
class Comment:
    """Immutable free-text note on a ticket."""

    id: Optional[int]
    content: str
    ticket_id: int
    user_id: int
    created_at: datetime


@dataclass
class Activity:
    """
    Audit trail entry.

    Append-only: created as a side effect of a lifecycle operation and never
    updated or deleted.
    """

    id: Optional[int]
    action: ActivityAction
    ticket_id: int
    user_id: int
    created_at: datetime
    details: Optional[str] = None
