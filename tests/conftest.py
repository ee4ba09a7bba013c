from datetime import datetime, timedelta, timezone

import pytest

from supportdesk.config import UserRole
from supportdesk.identity.domain import AuthenticatedUser, User
from supportdesk.infrastructure.unit_of_work import InMemoryDataset, InMemoryUnitOfWork
from supportdesk.tickets.application import TicketLifecycleService, TicketQueryService

T0 = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


class FixedClock:
    """Manually advanced clock for lifecycle and SLA tests."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class SequentialNumbers:
    """Ticket number factory that hands out TK-0001, TK-0002, ..."""

    def __init__(self):
        self.issued = 0

    def __call__(self) -> str:
        self.issued += 1
        return f"TK-{self.issued:04d}"


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def dataset():
    return InMemoryDataset()


@pytest.fixture
def uow(dataset):
    return InMemoryUnitOfWork(dataset)


async def make_user(uow, username: str, role: UserRole, name: str = None) -> AuthenticatedUser:
    user = await uow.users.create(User(
        id=None,
        username=username,
        password_hash="not-a-real-hash",
        name=name or username.title(),
        email=f"{username}@example.com",
        role=role,
    ))
    return AuthenticatedUser.from_user(user)


@pytest.fixture
async def customer(uow):
    return await make_user(uow, "carlos", UserRole.USER, "Carlos Gómez")


@pytest.fixture
async def agent(uow):
    return await make_user(uow, "ana", UserRole.AGENT, "Ana Martínez")


@pytest.fixture
async def admin(uow):
    return await make_user(uow, "root", UserRole.ADMIN, "Admin User")


@pytest.fixture
def lifecycle(uow, clock):
    return TicketLifecycleService(uow, clock=clock, number_factory=SequentialNumbers())


@pytest.fixture
def queries(uow):
    return TicketQueryService(uow)
