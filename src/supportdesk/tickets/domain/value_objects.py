"""
Ticket Value Objects
=====================

Immutable value objects for the ticket domain.
"""

import secrets
import string
from dataclasses import dataclass
from typing import Optional

from supportdesk.config import TicketPriority, TicketStatus

TICKET_NUMBER_PREFIX = "TK-"
TICKET_CODE_ALPHABET = string.ascii_uppercase + string.digits
TICKET_CODE_LENGTH = 4


def generate_ticket_number() -> str:
    """
    Generate a human-facing ticket number such as ``TK-7QZ2``.

    The number is a display convention only; nothing decodes it.
    """
    code = "".join(secrets.choice(TICKET_CODE_ALPHABET) for _ in range(TICKET_CODE_LENGTH))
    return f"{TICKET_NUMBER_PREFIX}{code}"


@dataclass(frozen=True)
class TicketFilter:
    """Criteria for ticket listings. ``None`` means "any"."""

    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to_id: Optional[int] = None
    created_by_id: Optional[int] = None

    def matches(self, ticket) -> bool:
        """In-memory evaluation, mirrored by the SQL ``WHERE`` clause."""
        if self.status is not None and ticket.status != self.status:
            return False
        if self.priority is not None and ticket.priority != self.priority:
            return False
        if self.assigned_to_id is not None and ticket.assigned_to_id != self.assigned_to_id:
            return False
        if self.created_by_id is not None and ticket.created_by_id != self.created_by_id:
            return False
        return True
