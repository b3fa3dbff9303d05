"""Helpers that seed the integration database directly"""

import hashlib
import secrets
from datetime import timedelta
from typing import Optional, Tuple

import bcrypt
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.utils.jwt import generate_jwt
from src.domain.base import utcnow
from src.domain.entities import OneTimeToken, RefreshSession, TokenPurpose, User, UserStatus


def sha256(raw: str) -> str:
    return hashlib.sha256(raw.encode()).hexdigest()


async def create_user(
    db_session: AsyncSession,
    email: str = "jane.doe@example.com",
    password: str = "OldPass123!",
    is_verified: bool = True,
    two_factor_enabled: bool = False,
    status: UserStatus = UserStatus.active,
) -> User:
    user = User(
        email=email,
        password_hash=bcrypt.hashpw(password.encode(), bcrypt.gensalt(4)).decode(),
        is_verified=is_verified,
        two_factor_enabled=two_factor_enabled,
        status=status,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def create_session(
    db_session: AsyncSession,
    user: User,
    is_active: bool = True,
    expires_in: timedelta = timedelta(days=30),
) -> Tuple[RefreshSession, str]:
    refresh_token = secrets.token_urlsafe(32)
    session = RefreshSession(
        user_id=user.id,
        refresh_token_hash=sha256(refresh_token),
        is_active=is_active,
        expires_at=utcnow() + expires_in,
        device_type="desktop",
    )
    db_session.add(session)
    await db_session.commit()
    await db_session.refresh(session)
    return session, refresh_token


async def create_token(
    db_session: AsyncSession,
    user: User,
    purpose: TokenPurpose,
    raw_token: Optional[str] = None,
    expires_in: timedelta = timedelta(minutes=30),
    used: bool = False,
) -> str:
    raw_token = raw_token or secrets.token_urlsafe(32)
    token = OneTimeToken(
        user_id=user.id,
        purpose=purpose,
        token_hash=sha256(raw_token),
        expires_at=utcnow() + expires_in,
        used_at=utcnow() if used else None,
    )
    db_session.add(token)
    await db_session.commit()
    return raw_token


def auth_headers(user: User, session: RefreshSession) -> dict:
    return {"Authorization": f"Bearer {generate_jwt(user.id, session.id, user.roles)}"}


async def fetch_all(db_session: AsyncSession, statement) -> list:
    """Run a select, overwriting anything stale in the identity map"""
    result = await db_session.exec(statement.execution_options(populate_existing=True))
    return result.all()


async def fetch_one(db_session: AsyncSession, statement):
    rows = await fetch_all(db_session, statement)
    return rows[0] if rows else None
