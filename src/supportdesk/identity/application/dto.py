"""
Identity Application DTOs
==========================

Pydantic models for the authentication and user endpoints.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from supportdesk.config import UserRole

UserRoleStr = Literal["user", "agent", "admin"]


class LoginRequest(BaseModel):
    """Credentials for ``POST /api/auth/login``."""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserCreateRequest(BaseModel):
    """Request model for creating an account (admin only)."""
    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    role: UserRoleStr = Field(default="user")


class UserResponse(BaseModel):
    """Public view of an account. Never includes the password hash."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    email: str
    role: UserRole


class IdentityResponse(BaseModel):
    """The caller's verified identity."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    role: UserRole


class LoginResponse(BaseModel):
    user: IdentityResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")


class MessageResponse(BaseModel):
    message: str
