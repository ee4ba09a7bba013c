"""
Identity Application Layer
===========================

Contains:
- Services: UserService (accounts, credential checks, demo seeding)
- DTOs: request/response models for the auth and user endpoints
- Interfaces: IUserRepository
"""

from supportdesk.identity.application.interfaces import IUserRepository
from supportdesk.identity.application.services import UserService, DEFAULT_USERS
from supportdesk.identity.application.dto import (
    LoginRequest,
    LoginResponse,
    UserCreateRequest,
    UserResponse,
    IdentityResponse,
    MessageResponse,
)

__all__ = [
    "IUserRepository",
    "UserService",
    "DEFAULT_USERS",
    "LoginRequest",
    "LoginResponse",
    "UserCreateRequest",
    "UserResponse",
    "IdentityResponse",
    "MessageResponse",
]
