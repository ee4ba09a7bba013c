"""
Identity Repository Interfaces
===============================

Abstractions the identity services depend on (Dependency Inversion).
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from supportdesk.config import UserRole
from supportdesk.identity.domain import User


class IUserRepository(ABC):
    """Interface for user data access."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by unique username."""

    @abstractmethod
    async def create(self, user: User) -> User:
        """Persist a new user and return it with its ID set."""

    @abstractmethod
    async def list(self, role: Optional[UserRole] = None) -> List[User]:
        """List users, optionally restricted to one role."""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored users."""
