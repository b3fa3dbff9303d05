import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.services.credential_store import PasswordHasher
from tests.fixtures.fakes import FakeEmailService, FakeNotifier


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)

    uow.one_time_tokens = MagicMock()
    uow.one_time_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.one_time_tokens.get_by_hash = AsyncMock(return_value=None)
    uow.one_time_tokens.mark_used = AsyncMock(return_value=True)
    uow.one_time_tokens.invalidate_outstanding = AsyncMock(return_value=0)
    uow.one_time_tokens.purge_expired = AsyncMock(return_value=0)

    uow.sessions = MagicMock()
    uow.sessions.get_by_id = AsyncMock(return_value=None)
    uow.sessions.get_by_refresh_token_hash = AsyncMock(return_value=None)
    uow.sessions.get_active_by_user_id = AsyncMock(return_value=[])
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.rotate_refresh_token = AsyncMock(return_value=True)
    uow.sessions.revoke_all_by_user_id = AsyncMock(return_value=0)
    uow.sessions.revoke_all_except_session = AsyncMock(return_value=0)
    uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    uow.sessions.deactivate_expired = AsyncMock(return_value=0)

    uow.pending_email_changes = MagicMock()
    uow.pending_email_changes.get_by_user_id = AsyncMock(return_value=None)
    uow.pending_email_changes.get_by_token_hash = AsyncMock(return_value=None)
    uow.pending_email_changes.replace = AsyncMock(side_effect=lambda change: change)
    uow.pending_email_changes.delete = AsyncMock()

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()
    return uow


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def notifier():
    return FakeNotifier()
