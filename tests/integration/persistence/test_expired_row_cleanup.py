from contextlib import asynccontextmanager
from datetime import timedelta

import pytest
from sqlmodel import select

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.cleanup import ExpiredRowCleaner
from src.domain.base import utcnow
from src.domain.entities import OneTimeToken, RefreshSession, TokenPurpose
from tests.fixtures.factories import create_session, create_user, fetch_all, sha256


def opener(db_session):
    @asynccontextmanager
    async def open_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    return open_unit_of_work


async def add_token(db_session, user_id, label, expires_at, used_at=None):
    db_session.add(
        OneTimeToken(
            user_id=user_id,
            purpose=TokenPurpose.two_factor_login,
            token_hash=sha256(label),
            expires_at=expires_at,
            used_at=used_at,
        )
    )
    await db_session.commit()


@pytest.mark.asyncio
async def test_cleanup_removes_dead_tokens_and_expires_sessions(db_session):
    now = utcnow()
    user = await create_user(db_session)
    user_id = user.id

    await add_token(db_session, user_id, "expired-long-ago", now - timedelta(days=3))
    await add_token(
        db_session, user_id, "used-long-ago", now + timedelta(days=1), used_at=now - timedelta(days=2)
    )
    await add_token(db_session, user_id, "live", now + timedelta(minutes=10))
    await add_token(
        db_session, user_id, "used-recently", now + timedelta(minutes=10), used_at=now - timedelta(minutes=1)
    )
    expired, _ = await create_session(db_session, user, expires_in=timedelta(minutes=-5))
    valid, _ = await create_session(db_session, user)
    expired_id, valid_id = expired.id, valid.id

    stats = await ExpiredRowCleaner(opener(db_session), retention=timedelta(hours=24)).run_once(now)

    assert stats.purged_tokens == 2
    assert stats.expired_sessions == 1

    remaining = await fetch_all(db_session, select(OneTimeToken))
    assert {t.token_hash for t in remaining} == {sha256("live"), sha256("used-recently")}

    sessions = {
        s.id: s
        for s in await fetch_all(
            db_session, select(RefreshSession).where(RefreshSession.user_id == user_id)
        )
    }
    assert sessions[expired_id].is_active is False
    assert sessions[expired_id].revoked_at is not None
    assert sessions[valid_id].is_active is True


@pytest.mark.asyncio
async def test_cleanup_on_empty_tables(db_session):
    stats = await ExpiredRowCleaner(opener(db_session)).run_once()

    assert stats.purged_tokens == 0
    assert stats.expired_sessions == 0
