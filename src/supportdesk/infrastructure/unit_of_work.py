"""
Unit of Work Implementations
=============================

Two interchangeable stores behind IUnitOfWork:

- SQLAlchemyUnitOfWork: one AsyncSession, one database transaction per scope
- InMemoryUnitOfWork: a process-wide InMemoryDataset, snapshot/restore per scope
"""

import asyncio
import copy
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from supportdesk.core import StoreUnavailableException
from supportdesk.identity.domain import User
from supportdesk.identity.infrastructure.repositories import (
    InMemoryUserRepository,
    SQLAlchemyUserRepository,
)
from supportdesk.shared.application import IUnitOfWork
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.tickets.domain import Activity, Comment, Ticket
from supportdesk.tickets.infrastructure.repositories import (
    InMemoryActivityRepository,
    InMemoryCommentRepository,
    InMemoryTicketRepository,
    SQLAlchemyActivityRepository,
    SQLAlchemyCommentRepository,
    SQLAlchemyTicketRepository,
)

logger = get_logger(__name__)


class SQLAlchemyUnitOfWork(IUnitOfWork):
    """
    Unit of work over a single AsyncSession.

    Repositories only flush; ``transaction()`` commits on success and rolls
    back on any exception.
    """

    def __init__(self, session: AsyncSession):
        self._session = session
        self.users = SQLAlchemyUserRepository(session)
        self.tickets = SQLAlchemyTicketRepository(session)
        self.comments = SQLAlchemyCommentRepository(session)
        self.activities = SQLAlchemyActivityRepository(session)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLAlchemyUnitOfWork"]:
        try:
            yield self
        except BaseException:
            await self._session.rollback()
            raise

        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.error("Commit failed", extra={"error": str(exc)})
            raise StoreUnavailableException("Commit failed: store unavailable") from exc


@dataclass
class InMemoryDataset:
    """All rows of the in-memory store. One instance per process."""

    users: Dict[int, User] = field(default_factory=dict)
    tickets: Dict[int, Ticket] = field(default_factory=dict)
    comments: List[Comment] = field(default_factory=list)
    activities: List[Activity] = field(default_factory=list)
    sequences: Dict[str, int] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def next_id(self, table: str) -> int:
        self.sequences[table] = self.sequences.get(table, 0) + 1
        return self.sequences[table]

    def snapshot(self) -> dict:
        return {
            "users": copy.deepcopy(self.users),
            "tickets": copy.deepcopy(self.tickets),
            "comments": copy.deepcopy(self.comments),
            "activities": copy.deepcopy(self.activities),
            "sequences": dict(self.sequences),
        }

    def restore(self, state: dict) -> None:
        self.users = state["users"]
        self.tickets = state["tickets"]
        self.comments = state["comments"]
        self.activities = state["activities"]
        self.sequences = state["sequences"]


class InMemoryUnitOfWork(IUnitOfWork):
    """
    Unit of work over an InMemoryDataset.

    Write scopes are serialised on the dataset lock. A failing scope restores
    the snapshot taken on entry, so a half-done mutation is never visible.
    """

    def __init__(self, dataset: InMemoryDataset):
        self._dataset = dataset
        self.users = InMemoryUserRepository(dataset)
        self.tickets = InMemoryTicketRepository(dataset)
        self.comments = InMemoryCommentRepository(dataset)
        self.activities = InMemoryActivityRepository(dataset)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["InMemoryUnitOfWork"]:
        async with self._dataset.lock:
            state = self._dataset.snapshot()
            try:
                yield self
            except BaseException:
                self._dataset.restore(state)
                logger.debug("In-memory transaction rolled back")
                raise
