from datetime import datetime, timedelta, timezone

import jwt
import pytest

from supportdesk.config import UserRole, settings
from supportdesk.core import (
    AuthenticationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from supportdesk.identity.application import DEFAULT_USERS, UserService
from supportdesk.identity.domain import AuthenticatedUser
from supportdesk.identity.infrastructure.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from supportdesk.shared.infrastructure.logging import CustomJsonFormatter


def test_password_hashing():
    hashed = hash_password("s3cret")

    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret", "not-a-hash")


def test_access_token_carries_identity():
    identity = AuthenticatedUser(id=7, username="ana", name="Ana", role=UserRole.AGENT)

    payload = decode_access_token(create_access_token(identity))

    assert payload["sub"] == "7"
    assert payload["role"] == "agent"
    assert payload["token_type"] == "access"


def test_expired_token_is_rejected():
    identity = AuthenticatedUser(id=7, username="ana", name="Ana", role=UserRole.AGENT)
    issued = datetime.now(timezone.utc) - timedelta(hours=2)
    token = create_access_token(identity, expires_delta=timedelta(minutes=5), now=issued)

    with pytest.raises(AuthenticationException, match="expired"):
        decode_access_token(token)


def test_foreign_and_wrong_type_tokens_are_rejected():
    forged = jwt.encode({"sub": "1", "token_type": "access"}, "other-secret", algorithm="HS512")
    refresh = jwt.encode(
        {"sub": "1", "token_type": "refresh"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )

    with pytest.raises(AuthenticationException):
        decode_access_token(forged)
    with pytest.raises(AuthenticationException, match="not an access token"):
        decode_access_token(refresh)


@pytest.mark.asyncio
async def test_create_and_authenticate(uow):
    service = UserService(uow)
    user = await service.create_user("maria", "pw123", "María", "maria@example.com", UserRole.AGENT)

    identity = await service.authenticate("maria", "pw123")
    assert identity.id == user.id
    assert identity.is_staff
    assert not identity.is_admin

    with pytest.raises(AuthenticationException):
        await service.authenticate("maria", "nope")
    with pytest.raises(AuthenticationException):
        await service.authenticate("ghost", "pw123")


@pytest.mark.asyncio
async def test_duplicate_username_conflicts(uow):
    service = UserService(uow)
    await service.create_user("maria", "pw", "María", "maria@example.com")

    with pytest.raises(ConflictException):
        await service.create_user("maria", "pw2", "Other", "other@example.com")
    assert await uow.users.count() == 1


@pytest.mark.asyncio
async def test_create_user_validates_fields(uow):
    service = UserService(uow)

    with pytest.raises(ValidationException):
        await service.create_user("", "pw", "Name", "x@example.com")
    with pytest.raises(ValidationException):
        await service.create_user("bob", "pw", "Bob", "bob@example.com", role="superuser")


@pytest.mark.asyncio
async def test_seed_default_users_only_on_empty_store(uow):
    service = UserService(uow)

    assert await service.seed_default_users() == len(DEFAULT_USERS)
    assert await service.seed_default_users() == 0

    roles = {user.username: user.role for user in await service.list_users()}
    assert roles == {"admin": UserRole.ADMIN, "agent": UserRole.AGENT, "user": UserRole.USER}
    assert [u.username for u in await service.list_users(UserRole.AGENT)] == ["agent"]


def test_log_formatter_redacts_secrets():
    import logging

    formatter = CustomJsonFormatter("%(message)s", environment="testing")
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "login", None, None)
    record.password = "hunter2"
    record.access_token = "abc"
    record.token_type = "bearer"

    output = formatter.format(record)

    assert "hunter2" not in output
    assert '"access_token": "***REDACTED***"' in output
    assert '"token_type": "bearer"' in output
    assert '"environment": "testing"' in output


@pytest.mark.asyncio
async def test_get_user(uow):
    service = UserService(uow)
    created = await service.create_user("maria", "pw", "María", "maria@example.com")

    assert (await service.get_user(created.id)).username == "maria"
    with pytest.raises(ResourceNotFoundException):
        await service.get_user(999)
