"""
Ticket Infrastructure Repositories
===================================

Concrete implementations of the ticket, comment and activity repository
interfaces, one set on SQLAlchemy and one on the in-memory dataset.

This layer contains the data access logic - how we store and retrieve
entities. Domain entities go in and come out; ORM models never leak.
"""

import copy
from typing import Dict, List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from supportdesk.config import ActivityAction, TicketPriority, TicketStatus
from supportdesk.core import ConflictException, RepositoryException
from supportdesk.infrastructure.database import translate_store_errors
from supportdesk.tickets.application.interfaces import (
    IActivityRepository,
    ICommentRepository,
    ITicketRepository,
)
from supportdesk.tickets.domain import Activity, Comment, Ticket, TicketFilter
from supportdesk.tickets.infrastructure.models import ActivityModel, CommentModel, TicketModel


# ========== Mapping ==========

def ticket_to_entity(model: TicketModel) -> Ticket:
    return Ticket(
        id=model.id,
        ticket_number=model.ticket_number,
        title=model.title,
        description=model.description,
        status=TicketStatus(model.status),
        priority=TicketPriority(model.priority),
        created_by_id=model.created_by_id,
        assigned_to_id=model.assigned_to_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
        sla_deadline=model.sla_deadline,
    )


def comment_to_entity(model: CommentModel) -> Comment:
    return Comment(
        id=model.id,
        content=model.content,
        ticket_id=model.ticket_id,
        user_id=model.user_id,
        created_at=model.created_at,
    )


def activity_to_entity(model: ActivityModel) -> Activity:
    return Activity(
        id=model.id,
        action=ActivityAction(model.action),
        details=model.details,
        ticket_id=model.ticket_id,
        user_id=model.user_id,
        created_at=model.created_at,
    )


# ========== SQLAlchemy ==========

class SQLAlchemyTicketRepository(ITicketRepository):
    """
    SQLAlchemy implementation of ticket repository.

    Handles persistence of Ticket entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, ticket_id: int) -> Optional[Ticket]:
        with translate_store_errors("get ticket"):
            model = await self._session.get(TicketModel, ticket_id)
        return ticket_to_entity(model) if model else None

    async def get_by_number(self, ticket_number: str) -> Optional[Ticket]:
        stmt = select(TicketModel).where(TicketModel.ticket_number == ticket_number)
        with translate_store_errors("get ticket"):
            result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return ticket_to_entity(model) if model else None

    async def exists_by_number(self, ticket_number: str) -> bool:
        stmt = select(TicketModel.id).where(TicketModel.ticket_number == ticket_number)
        with translate_store_errors("check ticket number"):
            result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create(self, ticket: Ticket) -> Ticket:
        model = TicketModel(
            ticket_number=ticket.ticket_number,
            title=ticket.title,
            description=ticket.description,
            status=TicketStatus(ticket.status).value,
            priority=TicketPriority(ticket.priority).value,
            created_by_id=ticket.created_by_id,
            assigned_to_id=ticket.assigned_to_id,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            sla_deadline=ticket.sla_deadline,
        )
        with translate_store_errors("create ticket"):
            self._session.add(model)
            await self._session.flush()
        return ticket_to_entity(model)

    async def update(self, ticket: Ticket) -> Ticket:
        with translate_store_errors("update ticket"):
            model = await self._session.get(TicketModel, ticket.id)
            if model is None:
                raise RepositoryException(f"Ticket {ticket.id} not found")

            # Mutable lifecycle fields only
            model.status = TicketStatus(ticket.status).value
            model.assigned_to_id = ticket.assigned_to_id
            model.updated_at = ticket.updated_at

            await self._session.flush()
        return ticket_to_entity(model)

    async def list(self, filters: Optional[TicketFilter] = None) -> List[Ticket]:
        stmt = select(TicketModel)

        # Apply filters
        conditions = []
        if filters is not None:
            if filters.status is not None:
                conditions.append(TicketModel.status == TicketStatus(filters.status).value)
            if filters.priority is not None:
                conditions.append(TicketModel.priority == TicketPriority(filters.priority).value)
            if filters.assigned_to_id is not None:
                conditions.append(TicketModel.assigned_to_id == filters.assigned_to_id)
            if filters.created_by_id is not None:
                conditions.append(TicketModel.created_by_id == filters.created_by_id)
        if conditions:
            stmt = stmt.where(and_(*conditions))

        # Newest first
        stmt = stmt.order_by(TicketModel.created_at.desc(), TicketModel.id.desc())

        with translate_store_errors("list tickets"):
            result = await self._session.execute(stmt)
        return [ticket_to_entity(model) for model in result.scalars().all()]

    async def count_by_status(self) -> Dict[TicketStatus, int]:
        stmt = select(TicketModel.status, func.count(TicketModel.id)).group_by(TicketModel.status)
        with translate_store_errors("count tickets"):
            result = await self._session.execute(stmt)
        return {TicketStatus(status): count for status, count in result.all()}


class SQLAlchemyCommentRepository(ICommentRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, comment: Comment) -> Comment:
        model = CommentModel(
            content=comment.content,
            ticket_id=comment.ticket_id,
            user_id=comment.user_id,
            created_at=comment.created_at,
        )
        with translate_store_errors("create comment"):
            self._session.add(model)
            await self._session.flush()
        return comment_to_entity(model)

    async def list_by_ticket(self, ticket_id: int) -> List[Comment]:
        stmt = (
            select(CommentModel)
            .where(CommentModel.ticket_id == ticket_id)
            .order_by(CommentModel.created_at.desc(), CommentModel.id.desc())
        )
        with translate_store_errors("list comments"):
            result = await self._session.execute(stmt)
        return [comment_to_entity(model) for model in result.scalars().all()]


class SQLAlchemyActivityRepository(IActivityRepository):
    """Append-only store for the audit trail."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def append(self, activity: Activity) -> Activity:
        model = ActivityModel(
            action=ActivityAction(activity.action).value,
            details=activity.details,
            ticket_id=activity.ticket_id,
            user_id=activity.user_id,
            created_at=activity.created_at,
        )
        with translate_store_errors("append activity"):
            self._session.add(model)
            await self._session.flush()
        return activity_to_entity(model)

    async def list_by_ticket(self, ticket_id: int) -> List[Activity]:
        stmt = (
            select(ActivityModel)
            .where(ActivityModel.ticket_id == ticket_id)
            .order_by(ActivityModel.created_at.desc(), ActivityModel.id.desc())
        )
        with translate_store_errors("list activities"):
            result = await self._session.execute(stmt)
        return [activity_to_entity(model) for model in result.scalars().all()]


# ========== In-memory ==========
# Entities are copied on the way in and out so callers never hold a
# reference into the dataset.

class InMemoryTicketRepository(ITicketRepository):

    def __init__(self, dataset):
        self._data = dataset

    async def get_by_id(self, ticket_id: int) -> Optional[Ticket]:
        ticket = self._data.tickets.get(ticket_id)
        return copy.copy(ticket) if ticket else None

    async def get_by_number(self, ticket_number: str) -> Optional[Ticket]:
        for ticket in self._data.tickets.values():
            if ticket.ticket_number == ticket_number:
                return copy.copy(ticket)
        return None

    async def exists_by_number(self, ticket_number: str) -> bool:
        return any(t.ticket_number == ticket_number for t in self._data.tickets.values())

    async def create(self, ticket: Ticket) -> Ticket:
        if await self.exists_by_number(ticket.ticket_number):
            raise ConflictException(f"Ticket number {ticket.ticket_number} is already taken")
        stored = copy.copy(ticket)
        stored.id = self._data.next_id("tickets")
        self._data.tickets[stored.id] = stored
        return copy.copy(stored)

    async def update(self, ticket: Ticket) -> Ticket:
        stored = self._data.tickets.get(ticket.id)
        if stored is None:
            raise RepositoryException(f"Ticket {ticket.id} not found")
        stored.status = ticket.status
        stored.assigned_to_id = ticket.assigned_to_id
        stored.updated_at = ticket.updated_at
        return copy.copy(stored)

    async def list(self, filters: Optional[TicketFilter] = None) -> List[Ticket]:
        filters = filters or TicketFilter()
        matching = [t for t in self._data.tickets.values() if filters.matches(t)]
        matching.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        return [copy.copy(t) for t in matching]

    async def count_by_status(self) -> Dict[TicketStatus, int]:
        counts: Dict[TicketStatus, int] = {}
        for ticket in self._data.tickets.values():
            counts[ticket.status] = counts.get(ticket.status, 0) + 1
        return counts


class InMemoryCommentRepository(ICommentRepository):

    def __init__(self, dataset):
        self._data = dataset

    async def create(self, comment: Comment) -> Comment:
        stored = copy.copy(comment)
        stored.id = self._data.next_id("comments")
        self._data.comments.append(stored)
        return copy.copy(stored)

    async def list_by_ticket(self, ticket_id: int) -> List[Comment]:
        matching = [c for c in self._data.comments if c.ticket_id == ticket_id]
        matching.sort(key=lambda c: (c.created_at, c.id), reverse=True)
        return [copy.copy(c) for c in matching]


class InMemoryActivityRepository(IActivityRepository):

    def __init__(self, dataset):
        self._data = dataset

    async def append(self, activity: Activity) -> Activity:
        stored = copy.copy(activity)
        stored.id = self._data.next_id("activities")
        self._data.activities.append(stored)
        return copy.copy(stored)

    async def list_by_ticket(self, ticket_id: int) -> List[Activity]:
        matching = [a for a in self._data.activities if a.ticket_id == ticket_id]
        matching.sort(key=lambda a: (a.created_at, a.id), reverse=True)
        return [copy.copy(a) for a in matching]
