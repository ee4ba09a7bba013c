"""
Unit of Work
============

The store capability handed to every service.

A unit of work exposes one repository per aggregate and a ``transaction()``
scope. Writes made inside the scope become visible together or not at all.
The concrete backend (SQLAlchemy or in-memory) is chosen once by the
composition root in ``supportdesk.main``.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager

from supportdesk.identity.application.interfaces import IUserRepository
from supportdesk.tickets.application.interfaces import (
    IActivityRepository,
    ICommentRepository,
    ITicketRepository,
)


class IUnitOfWork(ABC):
    """Interface for a transactional store handle."""

    users: IUserRepository
    tickets: ITicketRepository
    comments: ICommentRepository
    activities: IActivityRepository

    @abstractmethod
    def transaction(self) -> AsyncContextManager["IUnitOfWork"]:
        """
        Scope a group of writes.

        Commits on normal exit and rolls back when the block raises.
        """
