"""
Unit tests for LoginUseCase and TwoFactorLoginUseCase
"""
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from src.api.utils.jwt import verify_jwt
from src.app.errors import ErrorCode
from src.app.services.email_service import EmailTemplate
from src.app.services.token_service import hash_token
from src.app.use_cases.auth import LoginUseCase, TwoFactorLoginUseCase
from src.domain.entities import OneTimeToken, TokenPurpose, User, UserStatus


@pytest.fixture
def user(hasher):
    return User(
        id=uuid4(),
        email="jane.doe@example.com",
        password_hash=hasher.hash("OldPass123!"),
        is_verified=True,
    )


@pytest.mark.asyncio
async def test_login_creates_session_and_tokens(mock_uow, hasher, email_service, user):
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, hasher, email_service).execute(
        "  Jane.Doe@Example.com ", "OldPass123!"
    )

    assert result.is_ok()
    login = result.value
    assert login.tokens is not None
    assert login.requires_two_factor is False

    mock_uow.users.get_by_email.assert_awaited_once_with("jane.doe@example.com")
    mock_uow.sessions.create.assert_awaited_once()
    mock_uow.commit.assert_awaited_once()

    payload = verify_jwt(login.tokens.access_token)
    assert payload["sub"] == str(user.id)
    assert payload["sid"] == login.tokens.session_id
    assert user.last_login_at is not None


@pytest.mark.asyncio
async def test_login_unknown_email(mock_uow, hasher, email_service):
    result = await LoginUseCase(mock_uow, hasher, email_service).execute(
        "nobody@example.com", "OldPass123!"
    )

    assert result.error.code == ErrorCode.INVALID_CREDENTIAL
    mock_uow.sessions.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_login_wrong_password_same_error_as_unknown_email(mock_uow, hasher, email_service, user):
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, hasher, email_service).execute(user.email, "WrongPass!")

    assert result.error.code == ErrorCode.INVALID_CREDENTIAL
    assert result.error.message == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_disabled_account(mock_uow, hasher, email_service, user):
    user.status = UserStatus.disabled
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, hasher, email_service).execute(user.email, "OldPass123!")

    assert result.error.code == ErrorCode.ACCOUNT_DISABLED


@pytest.mark.asyncio
async def test_login_unverified_resends_verification(mock_uow, hasher, email_service, user):
    user.is_verified = False
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, hasher, email_service).execute(user.email, "OldPass123!")

    assert result.is_ok()
    assert result.value.requires_verification is True
    assert result.value.tokens is None
    mock_uow.sessions.create.assert_not_awaited()
    assert "token" in email_service.last(EmailTemplate.EMAIL_VERIFICATION).variables


@pytest.mark.asyncio
async def test_login_with_two_factor_sends_code(mock_uow, hasher, email_service, user):
    user.two_factor_enabled = True
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, hasher, email_service).execute(user.email, "OldPass123!")

    assert result.is_ok()
    assert result.value.requires_two_factor is True
    assert result.value.tokens is None
    mock_uow.sessions.create.assert_not_awaited()

    stored = mock_uow.one_time_tokens.create.call_args.args[0]
    assert stored.purpose == TokenPurpose.two_factor_login
    code = email_service.last(EmailTemplate.TWO_FACTOR_CODE).variables["code"]
    assert stored.token_hash == hash_token(code)


@pytest.mark.asyncio
async def test_two_factor_login_creates_session(mock_uow, user):
    user.two_factor_enabled = True
    mock_uow.users.get_by_id.return_value = user
    mock_uow.one_time_tokens.get_by_hash.return_value = OneTimeToken(
        user_id=user.id,
        purpose=TokenPurpose.two_factor_login,
        token_hash=hash_token("123456"),
        expires_at=datetime.utcnow() + timedelta(minutes=10),
    )

    result = await TwoFactorLoginUseCase(mock_uow).execute(user.id, "123456")

    assert result.is_ok()
    assert result.value.tokens is not None
    mock_uow.one_time_tokens.get_by_hash.assert_awaited_once_with(
        hash_token("123456"), TokenPurpose.two_factor_login, user.id
    )
    mock_uow.sessions.create.assert_awaited_once()
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_two_factor_login_wrong_code(mock_uow, user):
    user.two_factor_enabled = True
    mock_uow.users.get_by_id.return_value = user

    result = await TwoFactorLoginUseCase(mock_uow).execute(user.id, "000000")

    assert result.error.code == ErrorCode.INVALID_TWO_FACTOR_CODE
    mock_uow.sessions.create.assert_not_awaited()
