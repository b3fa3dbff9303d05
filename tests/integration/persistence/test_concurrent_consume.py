"""
Concurrent consumption of one token through separate database sessions.

Each caller gets its own AsyncSession on the file-backed SQLite engine, so
the conditional UPDATE in the token repository decides the winner.
"""
import asyncio

import bcrypt
import pytest
from sqlalchemy.orm import sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.errors import ErrorCode
from src.app.services.credential_store import PasswordHasher
from src.app.services.security_alerts import SecurityAlertDispatcher
from src.app.use_cases.auth import VerifyEmailUseCase
from src.app.use_cases.security import SecurityOrchestrator
from src.domain.entities import AuditEvent, TokenPurpose, User
from tests.fixtures.factories import create_session, create_token, create_user, fetch_all, fetch_one
from tests.fixtures.fakes import FakeEmailService, FakeNotifier


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.mark.asyncio
async def test_concurrent_email_verification_has_one_winner(db_session, session_factory):
    user = await create_user(db_session, email="new.user@example.com", is_verified=False)
    user_id = user.id
    raw = await create_token(db_session, user, TokenPurpose.email_verification)

    async def verify():
        async with session_factory() as session:
            return await VerifyEmailUseCase(SqlAlchemyUnitOfWork(session)).execute(raw)

    results = await asyncio.gather(*(verify() for _ in range(5)))

    assert sum(r.is_ok() for r in results) == 1
    assert sorted(r.error.code for r in results if r.is_err()) == [
        ErrorCode.TOKEN_ALREADY_USED
    ] * 4

    audit = await fetch_all(
        db_session,
        select(AuditEvent).where(
            AuditEvent.user_id == user_id, AuditEvent.action == "email_verified"
        ),
    )
    assert len(audit) == 1
    verified = await fetch_one(db_session, select(User).where(User.id == user_id))
    assert verified.is_verified is True


@pytest.mark.asyncio
async def test_concurrent_password_resets_apply_once(db_session, session_factory):
    user = await create_user(db_session)
    user_id = user.id
    await create_session(db_session, user)
    raw = await create_token(db_session, user, TokenPurpose.password_reset)
    notifier = FakeNotifier()
    candidates = ["FirstNewPass123!", "SecondNewPass123!"]

    async def reset(password):
        async with session_factory() as session:
            orchestrator = SecurityOrchestrator(
                SqlAlchemyUnitOfWork(session),
                PasswordHasher(rounds=4),
                SecurityAlertDispatcher(FakeEmailService(), notifier),
            )
            return await orchestrator.reset_password(raw, password)

    results = await asyncio.gather(*(reset(p) for p in candidates))

    winners = [p for p, r in zip(candidates, results) if r.is_ok()]
    losers = [r.error.code for r in results if r.is_err()]
    assert len(winners) == 1
    assert losers == [ErrorCode.TOKEN_ALREADY_USED]
    assert len(notifier.events) == 1

    stored = await fetch_one(db_session, select(User).where(User.id == user_id))
    assert bcrypt.checkpw(winners[0].encode(), stored.password_hash.encode())

    audit = await fetch_all(
        db_session,
        select(AuditEvent).where(
            AuditEvent.user_id == user_id, AuditEvent.action == "password_reset"
        ),
    )
    assert len(audit) == 1
