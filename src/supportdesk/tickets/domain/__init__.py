"""
Ticket Domain Layer
===================

Domain layer for the ticket lifecycle.

Contains:
- Entities: Ticket, Comment, Activity
- Value Objects: TicketFilter, ticket number generation

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from supportdesk.tickets.domain.entities import Ticket, Comment, Activity
from supportdesk.tickets.domain.value_objects import (
    TicketFilter,
    generate_ticket_number,
    TICKET_NUMBER_PREFIX,
)

__all__ = [
    "Ticket",
    "Comment",
    "Activity",
    "TicketFilter",
    "generate_ticket_number",
    "TICKET_NUMBER_PREFIX",
]
