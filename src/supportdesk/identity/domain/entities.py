"""
Identity Domain Entities
=========================

Pure Python domain entities for accounts and verified identities.
"""

from dataclasses import dataclass
from typing import Optional

from supportdesk.config import UserRole, STAFF_ROLES


@dataclass
class User:
    """
    Account record.

    Role is fixed per record; accounts are created by an administrative
    action and never edited.
    """

    id: Optional[int]
    username: str
    password_hash: str
    name: str
    email: str
    role: UserRole = UserRole.USER

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


@dataclass(frozen=True)
class AuthenticatedUser:
    """
    Verified identity of the acting user.

    Only the identity layer builds these (from a checked password or a
    decoded access token). Lifecycle operations take this instead of a raw
    user id so an unauthenticated id cannot be passed in by accident.
    """

    id: int
    username: str
    name: str
    role: UserRole

    @property
    def is_staff(self) -> bool:
        """Agents and admins may see and triage every ticket."""
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "AuthenticatedUser":
        return cls(id=user.id, username=user.username, name=user.name, role=user.role)
