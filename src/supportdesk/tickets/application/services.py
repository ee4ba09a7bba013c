"""
Ticket Application Services
============================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: lifecycle writes and ticket reads are separate services
- Dependency Inversion: both depend on the IUnitOfWork abstraction, never on a
  concrete store
"""

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Type, TypeVar

from supportdesk.config import (
    ActivityAction, TicketPriority, TicketStatus, settings
)
from supportdesk.core import (
    AuditTrailException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from supportdesk.identity.domain import AuthenticatedUser
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.sla.domain import SLACalculator
from supportdesk.tickets.domain import (
    Activity, Comment, Ticket, TicketFilter, generate_ticket_number
)

if TYPE_CHECKING:
    from supportdesk.shared.application import IUnitOfWork

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_enum(enum_type: Type[E], value, field_name: str) -> E:
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationException(
            f"Invalid {field_name}: {value!r} (expected one of {allowed})",
            {"field": field_name, "value": str(value)}
        )


def _require_text(value: Optional[str], field_name: str) -> str:
    if value is None or not value.strip():
        raise ValidationException(f"{field_name} must not be empty", {"field": field_name})
    return value


class TicketLifecycleService:
    """
    Owns ticket state transitions.

    Every mutation runs inside one unit-of-work transaction together with
    exactly one appended Activity. Authorization is the caller's job; the
    acting user arrives already verified.
    """

    def __init__(
        self,
        unit_of_work: "IUnitOfWork",
        clock: Callable[[], datetime] = utc_now,
        number_factory: Callable[[], str] = generate_ticket_number,
        max_number_attempts: Optional[int] = None,
    ):
        self._uow = unit_of_work
        self._clock = clock
        self._number_factory = number_factory
        if max_number_attempts is None:
            max_number_attempts = settings.ticket_number_max_attempts
        self._max_number_attempts = max_number_attempts

    async def create(
        self,
        title: str,
        description: str,
        priority: TicketPriority,
        actor: AuthenticatedUser,
        assigned_to_id: Optional[int] = None,
        status: Optional[TicketStatus] = None,
    ) -> Ticket:
        """
        Open a new ticket.

        Any ``status`` passed in is ignored: new tickets always start ``open``.

        Raises:
            ValidationException: empty title/description or unknown priority
            ConflictException: no free ticket number after the allowed attempts
        """
        title = _require_text(title, "title")
        description = _require_text(description, "description")
        priority = _coerce_enum(TicketPriority, priority, "priority")
        if status is not None and status != TicketStatus.OPEN:
            logger.debug("Ignoring requested initial status", extra={"requested_status": str(status)})

        now = self._clock()
        for attempt in range(1, self._max_number_attempts + 1):
            candidate = self._number_factory()
            try:
                ticket = await self._insert_ticket(
                    candidate, title, description, priority, actor, assigned_to_id, now
                )
            except ConflictException:
                # A concurrent create committed the same number after our check
                if not await self._number_taken(candidate):
                    raise
                ticket = None
            if ticket is not None:
                break
            logger.warning(
                "Ticket number collision",
                extra={"ticket_number": candidate, "attempt": attempt}
            )
        else:
            raise ConflictException(
                "Could not allocate a unique ticket number",
                {"attempts": self._max_number_attempts}
            )

        logger.info(
            "Ticket created",
            extra={
                "ticket_id": ticket.id,
                "ticket_number": ticket.ticket_number,
                "priority": priority.value,
                "user_id": actor.id,
            }
        )
        return ticket

    async def change_status(
        self,
        ticket_id: int,
        new_status: TicketStatus,
        actor: AuthenticatedUser,
    ) -> Ticket:
        """
        Move a ticket to any status.

        There is no transition table and a same-status change is accepted;
        both still append a ``status_change`` activity.

        Raises:
            ValidationException: unknown status
            ResourceNotFoundException: no such ticket
        """
        new_status = _coerce_enum(TicketStatus, new_status, "status")

        now = self._clock()
        async with self._uow.transaction() as uow:
            ticket = await self._load(uow, ticket_id)
            previous = ticket.change_status(new_status, now)
            ticket = await uow.tickets.update(ticket)
            await self._record(
                uow, ticket, ActivityAction.STATUS_CHANGE,
                f"Status changed from {previous.value} to {new_status.value}",
                actor, now
            )

        logger.info(
            "Ticket status changed",
            extra={
                "ticket_id": ticket.id,
                "from_status": previous.value,
                "to_status": new_status.value,
                "user_id": actor.id,
            }
        )
        return ticket

    async def reassign(
        self,
        ticket_id: int,
        assigned_to_id: Optional[int],
        actor: AuthenticatedUser,
    ) -> Ticket:
        """
        Assign a ticket to a user, or clear the assignment with ``None``.

        The assignee's existence is not checked here.

        Raises:
            ResourceNotFoundException: no such ticket
        """
        now = self._clock()
        async with self._uow.transaction() as uow:
            ticket = await self._load(uow, ticket_id)
            ticket.assign(assigned_to_id, now)
            ticket = await uow.tickets.update(ticket)

            if assigned_to_id is None:
                details = "Ticket unassigned"
            else:
                assignee = await uow.users.get_by_id(assigned_to_id)
                assignee_name = assignee.name if assignee else f"user #{assigned_to_id}"
                details = f"Ticket assigned to {assignee_name}"
            await self._record(uow, ticket, ActivityAction.ASSIGNMENT, details, actor, now)

        logger.info(
            "Ticket reassigned",
            extra={"ticket_id": ticket.id, "assigned_to_id": assigned_to_id, "user_id": actor.id}
        )
        return ticket

    async def add_comment(
        self,
        ticket_id: int,
        content: str,
        actor: AuthenticatedUser,
    ) -> Comment:
        """
        Add a comment and bump the ticket's ``updated_at`` to the comment time.

        Raises:
            ValidationException: empty content
            ResourceNotFoundException: no such ticket
        """
        content = _require_text(content, "content")

        now = self._clock()
        async with self._uow.transaction() as uow:
            ticket = await self._load(uow, ticket_id)
            comment = await uow.comments.create(Comment(
                id=None,
                content=content,
                ticket_id=ticket.id,
                user_id=actor.id,
                created_at=now,
            ))
            ticket.touch(comment.created_at)
            ticket = await uow.tickets.update(ticket)
            await self._record(uow, ticket, ActivityAction.COMMENT, "Comment added", actor, now)

        logger.info(
            "Comment added",
            extra={"ticket_id": ticket.id, "comment_id": comment.id, "user_id": actor.id}
        )
        return comment

    # ========== Internals ==========

    async def _load(self, uow: "IUnitOfWork", ticket_id: int) -> Ticket:
        ticket = await uow.tickets.get_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket

    async def _insert_ticket(
        self,
        ticket_number: str,
        title: str,
        description: str,
        priority: TicketPriority,
        actor: AuthenticatedUser,
        assigned_to_id: Optional[int],
        now: datetime,
    ) -> Optional[Ticket]:
        """Write the ticket and its ``created`` activity; None if the number is taken."""
        async with self._uow.transaction() as uow:
            if await uow.tickets.exists_by_number(ticket_number):
                return None
            ticket = await uow.tickets.create(Ticket(
                id=None,
                ticket_number=ticket_number,
                title=title,
                description=description,
                status=TicketStatus.OPEN,
                priority=priority,
                created_by_id=actor.id,
                assigned_to_id=assigned_to_id,
                created_at=now,
                updated_at=now,
                sla_deadline=SLACalculator.deadline_for(priority, now),
            ))
            await self._record(uow, ticket, ActivityAction.CREATED, "Ticket created", actor, now)
        return ticket

    async def _number_taken(self, ticket_number: str) -> bool:
        async with self._uow.transaction() as uow:
            return await uow.tickets.exists_by_number(ticket_number)

    async def _record(
        self,
        uow: "IUnitOfWork",
        ticket: Ticket,
        action: ActivityAction,
        details: str,
        actor: AuthenticatedUser,
        timestamp: datetime,
    ) -> Activity:
        """Append the audit record for a mutation that has already been written."""
        try:
            return await uow.activities.append(Activity(
                id=None,
                action=action,
                details=details,
                ticket_id=ticket.id,
                user_id=actor.id,
                created_at=timestamp,
            ))
        except Exception as exc:
            logger.critical(
                "Audit trail append failed; rolling back ticket mutation",
                extra={
                    "ticket_id": ticket.id,
                    "action": action.value,
                    "user_id": actor.id,
                    "error": str(exc),
                },
            )
            raise AuditTrailException(ticket.id, action.value) from exc


class TicketQueryService:
    """Read-side access to tickets, comments and the audit trail."""

    def __init__(self, unit_of_work: "IUnitOfWork"):
        self._uow = unit_of_work

    async def get_ticket(self, ticket_id: int) -> Ticket:
        ticket = await self._uow.tickets.get_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket

    async def get_ticket_by_number(self, ticket_number: str) -> Ticket:
        ticket = await self._uow.tickets.get_by_number(ticket_number)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_number)
        return ticket

    async def list_tickets(self, filters: Optional[TicketFilter] = None) -> List[Ticket]:
        return await self._uow.tickets.list(filters or TicketFilter())

    async def list_comments(self, ticket_id: int) -> List[Comment]:
        await self.get_ticket(ticket_id)
        return await self._uow.comments.list_by_ticket(ticket_id)

    async def list_activities(self, ticket_id: int) -> List[Activity]:
        await self.get_ticket(ticket_id)
        return await self._uow.activities.list_by_ticket(ticket_id)

    async def status_counts(self) -> Dict[TicketStatus, int]:
        """Counts for every status, zero-filled."""
        counts = await self._uow.tickets.count_by_status()
        return {status: counts.get(status, 0) for status in TicketStatus}
