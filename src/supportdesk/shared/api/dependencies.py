"""
Shared API Dependencies
========================

Hands each request the store selected at startup.
"""

from typing import AsyncGenerator

from fastapi import Request

from supportdesk.core import ConfigurationException
from supportdesk.infrastructure.database import get_session_context
from supportdesk.infrastructure.unit_of_work import InMemoryUnitOfWork, SQLAlchemyUnitOfWork
from supportdesk.shared.application import IUnitOfWork


async def get_unit_of_work(request: Request) -> AsyncGenerator[IUnitOfWork, None]:
    """
    Yield the request's unit of work.

    ``memory``: a handle on the process-wide dataset kept in ``app.state``.
    ``database``: a fresh AsyncSession, closed when the request ends.
    """
    backend = getattr(request.app.state, "storage_backend", None)

    if backend == "memory":
        yield InMemoryUnitOfWork(request.app.state.dataset)
    elif backend == "database":
        async with get_session_context() as session:
            yield SQLAlchemyUnitOfWork(session)
    else:
        raise ConfigurationException(f"Store backend not initialised: {backend!r}")
