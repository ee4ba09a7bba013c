"""
Identity Dependencies
======================

FastAPI dependencies that turn a bearer token into an AuthenticatedUser and
gate routes by role.
"""

from typing import Callable

from fastapi import Depends, Request

from supportdesk.config import UserRole
from supportdesk.core import AuthenticationException, AuthorizationException
from supportdesk.identity.application import UserService
from supportdesk.identity.domain import AuthenticatedUser
from supportdesk.identity.infrastructure.security import decode_access_token
from supportdesk.shared.api.dependencies import get_unit_of_work
from supportdesk.shared.application import IUnitOfWork


def get_user_service(uow: IUnitOfWork = Depends(get_unit_of_work)) -> UserService:
    return UserService(uow)


def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise AuthenticationException("Not authenticated")

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationException("No token provided")
    return token.strip()


async def get_current_user(
    request: Request,
    user_service: UserService = Depends(get_user_service),
) -> AuthenticatedUser:
    """
    Validate the access token and reload the account it names.

    The role comes from the stored account rather than the token claim.
    """
    payload = decode_access_token(_bearer_token(request))
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthenticationException("Token claims are incomplete")

    identity = await user_service.resolve_identity(user_id)
    request.state.user_id = identity.id
    return identity


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that admits only the given roles.

    Usage:
        STAFF_DEP = Depends(require_roles(UserRole.AGENT, UserRole.ADMIN))
    """
    allowed = {UserRole(role) for role in roles}

    async def _checker(current_user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if current_user.role not in allowed:
            raise AuthorizationException(
                "You do not have permission to perform this action",
                {"required_roles": sorted(role.value for role in allowed)}
            )
        return current_user

    return _checker


require_staff = require_roles(UserRole.AGENT, UserRole.ADMIN)
require_admin = require_roles(UserRole.ADMIN)
