from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import RefreshSession


class SessionRepository(ISessionRepository):
    """RefreshSession repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[RefreshSession]:
        """Get session by ID"""
        stmt = select(RefreshSession).where(RefreshSession.id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_refresh_token_hash(self, token_hash: str) -> Optional[RefreshSession]:
        """
        Get session by refresh token hash.

        Revoked and expired sessions are returned too; the use case decides
        which error to report.
        """
        stmt = select(RefreshSession).where(RefreshSession.refresh_token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_active_by_user_id(self, user_id: UUID) -> List[RefreshSession]:
        """Get all active sessions for a user"""
        stmt = (
            select(RefreshSession)
            .where(RefreshSession.user_id == user_id, RefreshSession.is_active == True)  # noqa: E712
            .order_by(RefreshSession.last_active_at.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, session_obj: RefreshSession) -> RefreshSession:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def rotate_refresh_token(
        self, session_id: UUID, token_hash: str, now: datetime, expires_at: datetime
    ) -> bool:
        """Replace the refresh token hash only while the session is active"""
        stmt = (
            update(RefreshSession)
            .where(RefreshSession.id == session_id, RefreshSession.is_active == True)  # noqa: E712
            .values(refresh_token_hash=token_hash, last_active_at=now, expires_at=expires_at)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def revoke_all_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Deactivate all active sessions for a user in a single UPDATE"""
        stmt = (
            update(RefreshSession)
            .where(RefreshSession.user_id == user_id, RefreshSession.is_active == True)  # noqa: E712
            .values(is_active=False, revoked_at=now)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_all_except_session(
        self, user_id: UUID, session_id: UUID, now: datetime
    ) -> int:
        """Deactivate all sessions for a user except the specified session"""
        stmt = (
            update(RefreshSession)
            .where(
                RefreshSession.user_id == user_id,
                RefreshSession.id != session_id,
                RefreshSession.is_active == True,  # noqa: E712
            )
            .values(is_active=False, revoked_at=now)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Deactivate a specific session by ID"""
        stmt = (
            update(RefreshSession)
            .where(RefreshSession.id == session_id, RefreshSession.is_active == True)  # noqa: E712
            .values(is_active=False, revoked_at=now)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def deactivate_expired(self, now: datetime) -> int:
        """Deactivate sessions whose expiry has passed, in a single UPDATE"""
        stmt = (
            update(RefreshSession)
            .where(RefreshSession.is_active == True, RefreshSession.expires_at <= now)  # noqa: E712
            .values(is_active=False, revoked_at=now)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
