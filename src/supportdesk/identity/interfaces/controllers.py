"""
Identity Controllers (API Routes)
==================================

Login, logout, current identity and account management.

Controllers are thin - they delegate to application services.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from supportdesk.config import UserRole, settings
from supportdesk.identity.application import (
    IdentityResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    UserCreateRequest,
    UserResponse,
    UserService,
)
from supportdesk.identity.domain import AuthenticatedUser
from supportdesk.identity.infrastructure.security import create_access_token
from supportdesk.identity.interfaces.dependencies import (
    get_current_user,
    get_user_service,
    require_admin,
    require_staff,
)
from supportdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

auth_router = APIRouter(prefix="/api/auth", tags=["Authentication"])
users_router = APIRouter(prefix="/api/users", tags=["Users"])


# ========== Auth ==========

@auth_router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="Exchange a username and password for a bearer access token.",
)
async def login(
    request: LoginRequest,
    user_service: UserService = Depends(get_user_service),
):
    identity = await user_service.authenticate(request.username, request.password)
    token = create_access_token(identity)

    logger.info("User logged in", extra={"user_id": identity.id, "role": identity.role.value})

    return LoginResponse(
        user=IdentityResponse.model_validate(identity),
        access_token=token,
        expires_in=settings.access_token_expire_minutes * 60,
    )


@auth_router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Tokens are stateless; the client discards its token.",
)
async def logout(current_user: AuthenticatedUser = Depends(get_current_user)):
    logger.info("User logged out", extra={"user_id": current_user.id})
    return MessageResponse(message="Logged out successfully")


@auth_router.get("/me", response_model=IdentityResponse, summary="Current identity")
async def me(current_user: AuthenticatedUser = Depends(get_current_user)):
    return IdentityResponse.model_validate(current_user)


# ========== Users ==========

@users_router.get(
    "",
    response_model=List[UserResponse],
    summary="List accounts",
    description="Agents and admins only. Optionally filter by `role`.",
)
async def list_users(
    role: UserRole | None = None,
    current_user: AuthenticatedUser = Depends(require_staff),
    user_service: UserService = Depends(get_user_service),
):
    users = await user_service.list_users(role)
    return [UserResponse.model_validate(user) for user in users]


@users_router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    description="Admins only. Usernames are unique (409 on duplicate).",
)
async def create_user(
    request: UserCreateRequest,
    current_user: AuthenticatedUser = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.create_user(
        username=request.username,
        password=request.password,
        name=request.name,
        email=request.email,
        role=UserRole(request.role),
    )
    return UserResponse.model_validate(user)
