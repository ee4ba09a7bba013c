"""
Identity Application Services
==============================

Account management and credential checks.
"""

from typing import TYPE_CHECKING, List, Optional

from supportdesk.config import UserRole
from supportdesk.core import (
    AuthenticationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from supportdesk.identity.domain import AuthenticatedUser, User
from supportdesk.identity.infrastructure.security import hash_password, verify_password
from supportdesk.shared.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from supportdesk.shared.application import IUnitOfWork

logger = get_logger(__name__)

# Demo accounts created on an empty store.
DEFAULT_USERS = (
    {
        "username": "admin",
        "password": "admin123",
        "name": "Admin User",
        "email": "admin@supportdesk.com",
        "role": UserRole.ADMIN,
    },
    {
        "username": "agent",
        "password": "agent123",
        "name": "Ana Martínez",
        "email": "ana@supportdesk.com",
        "role": UserRole.AGENT,
    },
    {
        "username": "user",
        "password": "user123",
        "name": "Carlos Gómez",
        "email": "carlos@example.com",
        "role": UserRole.USER,
    },
)


class UserService:
    """
    Service for accounts and authentication.

    Produces the AuthenticatedUser identities every other service trusts.
    """

    def __init__(self, unit_of_work: "IUnitOfWork"):
        self._uow = unit_of_work

    async def authenticate(self, username: str, password: str) -> AuthenticatedUser:
        """
        Check a username/password pair.

        Raises:
            AuthenticationException: unknown user or wrong password
        """
        user = await self._uow.users.get_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login rejected", extra={"username": username})
            raise AuthenticationException("Incorrect username or password")
        return AuthenticatedUser.from_user(user)

    async def resolve_identity(self, user_id: int) -> AuthenticatedUser:
        """Turn the subject of a verified token back into an identity."""
        user = await self._uow.users.get_by_id(user_id)
        if user is None:
            raise AuthenticationException("Account no longer exists")
        return AuthenticatedUser.from_user(user)

    async def create_user(
        self,
        username: str,
        password: str,
        name: str,
        email: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """
        Create an account.

        Raises:
            ValidationException: empty field or unknown role
            ConflictException: username already taken
        """
        for field_name, value in (("username", username), ("password", password),
                                  ("name", name), ("email", email)):
            if not value or not value.strip():
                raise ValidationException(f"{field_name} must not be empty", {"field": field_name})
        try:
            role = UserRole(role)
        except ValueError:
            raise ValidationException(f"Invalid role: {role}", {"field": "role"})

        async with self._uow.transaction() as uow:
            if await uow.users.get_by_username(username) is not None:
                raise ConflictException(f"Username '{username}' is already taken", {"field": "username"})
            user = await uow.users.create(User(
                id=None,
                username=username,
                password_hash=hash_password(password),
                name=name,
                email=email,
                role=role,
            ))

        logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
        return user

    async def get_user(self, user_id: int) -> User:
        user = await self._uow.users.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("User", user_id)
        return user

    async def list_users(self, role: Optional[UserRole] = None) -> List[User]:
        return await self._uow.users.list(role)

    async def seed_default_users(self) -> int:
        """Create the demo accounts if the store has none. Returns how many were created."""
        if await self._uow.users.count() > 0:
            return 0

        for account in DEFAULT_USERS:
            await self.create_user(**account)

        logger.info("Default users seeded", extra={"count": len(DEFAULT_USERS)})
        return len(DEFAULT_USERS)
