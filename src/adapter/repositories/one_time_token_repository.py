from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, or_
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.one_time_token_repository import IOneTimeTokenRepository
from src.domain.entities import OneTimeToken, TokenPurpose


class OneTimeTokenRepository(IOneTimeTokenRepository):
    """OneTimeToken repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, token: OneTimeToken) -> OneTimeToken:
        """Create a new one-time token"""
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def get_by_hash(
        self,
        token_hash: str,
        purpose: TokenPurpose,
        user_id: Optional[UUID] = None,
    ) -> Optional[OneTimeToken]:
        """Get the most recent token matching hash and purpose (and owner, if given)"""
        stmt = select(OneTimeToken).where(
            OneTimeToken.token_hash == token_hash,
            OneTimeToken.purpose == purpose,
        )
        if user_id is not None:
            stmt = stmt.where(OneTimeToken.user_id == user_id)
        stmt = stmt.order_by(OneTimeToken.created_at.desc()).limit(1)
        result = await self.session.exec(stmt)
        return result.first()

    async def mark_used(self, token_id: UUID, now: datetime) -> bool:
        """Mark token used only if still unused and unexpired"""
        stmt = (
            update(OneTimeToken)
            .where(
                OneTimeToken.id == token_id,
                OneTimeToken.used_at.is_(None),
                OneTimeToken.expires_at > now,
            )
            .values(used_at=now)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def invalidate_outstanding(
        self, user_id: UUID, purpose: TokenPurpose, now: datetime
    ) -> int:
        """Supersede every unused token of a purpose for a user"""
        stmt = (
            update(OneTimeToken)
            .where(
                OneTimeToken.user_id == user_id,
                OneTimeToken.purpose == purpose,
                OneTimeToken.used_at.is_(None),
            )
            .values(used_at=now)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def purge_expired(self, cutoff: datetime) -> int:
        """Delete tokens that expired or were consumed before cutoff"""
        stmt = delete(OneTimeToken).where(
            or_(OneTimeToken.expires_at < cutoff, OneTimeToken.used_at < cutoff)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
