"""
Identity Infrastructure Repositories
=====================================

Concrete IUserRepository implementations: SQLAlchemy and in-memory.
"""

import copy
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from supportdesk.config import UserRole
from supportdesk.core import ConflictException
from supportdesk.identity.application.interfaces import IUserRepository
from supportdesk.identity.domain import User
from supportdesk.identity.infrastructure.models import UserModel
from supportdesk.infrastructure.database import translate_store_errors


def _to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        username=model.username,
        password_hash=model.password_hash,
        name=model.name,
        email=model.email,
        role=UserRole(model.role),
    )


class SQLAlchemyUserRepository(IUserRepository):
    """
    SQLAlchemy implementation of the user repository.

    Flushes but never commits; the unit of work owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        with translate_store_errors("get user"):
            model = await self._session.get(UserModel, user_id)
        return _to_entity(model) if model else None

    async def get_by_username(self, username: str) -> Optional[User]:
        stmt = select(UserModel).where(UserModel.username == username)
        with translate_store_errors("get user"):
            result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def create(self, user: User) -> User:
        model = UserModel(
            username=user.username,
            password_hash=user.password_hash,
            name=user.name,
            email=user.email,
            role=UserRole(user.role).value,
        )
        with translate_store_errors("create user"):
            self._session.add(model)
            await self._session.flush()
        return _to_entity(model)

    async def list(self, role: Optional[UserRole] = None) -> List[User]:
        stmt = select(UserModel).order_by(UserModel.id)
        if role is not None:
            stmt = stmt.where(UserModel.role == UserRole(role).value)
        with translate_store_errors("list users"):
            result = await self._session.execute(stmt)
        return [_to_entity(model) for model in result.scalars().all()]

    async def count(self) -> int:
        with translate_store_errors("count users"):
            result = await self._session.execute(select(func.count(UserModel.id)))
        return int(result.scalar_one())


class InMemoryUserRepository(IUserRepository):
    """Dict-backed repository used by the in-memory store."""

    def __init__(self, dataset):
        self._data = dataset

    async def get_by_id(self, user_id: int) -> Optional[User]:
        user = self._data.users.get(user_id)
        return copy.copy(user) if user else None

    async def get_by_username(self, username: str) -> Optional[User]:
        for user in self._data.users.values():
            if user.username == username:
                return copy.copy(user)
        return None

    async def create(self, user: User) -> User:
        if await self.get_by_username(user.username) is not None:
            raise ConflictException(f"Username '{user.username}' is already taken")
        stored = copy.copy(user)
        stored.id = self._data.next_id("users")
        self._data.users[stored.id] = stored
        return copy.copy(stored)

    async def list(self, role: Optional[UserRole] = None) -> List[User]:
        users: Dict[int, User] = self._data.users
        return [
            copy.copy(user) for _, user in sorted(users.items())
            if role is None or user.role == role
        ]

    async def count(self) -> int:
        return len(self._data.users)
