"""
Unit tests for RequestPasswordResetUseCase
"""
from uuid import uuid4

import pytest

from src.app.services.email_service import EmailTemplate
from src.app.services.token_service import hash_token
from src.app.use_cases.auth import RequestPasswordResetUseCase
from src.domain.entities import TokenPurpose, User
from tests.fixtures.fakes import FakeEmailService


@pytest.mark.asyncio
async def test_known_email_gets_token_and_email(mock_uow, email_service):
    user = User(id=uuid4(), email="jane.doe@example.com", password_hash="x", is_verified=True)
    mock_uow.users.get_by_email.return_value = user

    result = await RequestPasswordResetUseCase(mock_uow, email_service).execute(user.email)

    assert result.is_ok()
    assert result.value.status == "sent"
    stored = mock_uow.one_time_tokens.create.call_args.args[0]
    assert stored.purpose == TokenPurpose.password_reset
    email = email_service.last(EmailTemplate.PASSWORD_RESET)
    assert email.to_address == user.email
    assert stored.token_hash == hash_token(email.variables["token"])
    mock_uow.one_time_tokens.invalidate_outstanding.assert_awaited_once()


@pytest.mark.asyncio
async def test_unknown_email_gets_identical_response_and_nothing_else(mock_uow, email_service):
    user = User(id=uuid4(), email="jane.doe@example.com", password_hash="x")
    mock_uow.users.get_by_email.return_value = user
    known = await RequestPasswordResetUseCase(mock_uow, email_service).execute(user.email)

    mock_uow.users.get_by_email.return_value = None
    mock_uow.one_time_tokens.create.reset_mock()
    unknown = await RequestPasswordResetUseCase(mock_uow, email_service).execute("nobody@example.com")

    assert unknown.value == known.value
    mock_uow.one_time_tokens.create.assert_not_awaited()
    assert len(email_service.sent) == 1


@pytest.mark.asyncio
async def test_email_failure_is_not_surfaced(mock_uow):
    mock_uow.users.get_by_email.return_value = User(
        id=uuid4(), email="jane.doe@example.com", password_hash="x"
    )

    result = await RequestPasswordResetUseCase(mock_uow, FakeEmailService(fail=True)).execute(
        "jane.doe@example.com"
    )

    assert result.is_ok()
    mock_uow.commit.assert_awaited_once()
