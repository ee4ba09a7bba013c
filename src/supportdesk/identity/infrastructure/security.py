"""
Identity Security
==================

Password hashing (passlib) and access-token signing (PyJWT).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from passlib.context import CryptContext

from supportdesk.config import settings
from supportdesk.core import AuthenticationException
from supportdesk.identity.domain import AuthenticatedUser

ACCESS_TOKEN_TYPE = "access"

# PBKDF2-HMAC-SHA512
pwd_context = CryptContext(
    schemes=["pbkdf2_sha512"],
    deprecated="auto",
    pbkdf2_sha512__default_rounds=100_000,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plain password against a stored hash.

    A malformed or unknown hash counts as a mismatch.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(
    identity: AuthenticatedUser,
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> str:
    """Sign an access token carrying the user id and role."""
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    payload = {
        "sub": str(identity.id),
        "role": identity.role.value,
        "token_type": ACCESS_TOKEN_TYPE,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an access token.

    Raises:
        AuthenticationException: expired, tampered or non-access token
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationException("Access token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationException("Invalid access token")

    if payload.get("token_type") != ACCESS_TOKEN_TYPE:
        raise AuthenticationException("Provided token is not an access token")
    if not payload.get("sub"):
        raise AuthenticationException("Token claims are incomplete")
    return payload
