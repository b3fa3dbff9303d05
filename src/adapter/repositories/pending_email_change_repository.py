from typing import Optional
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.pending_email_change_repository import (
    IPendingEmailChangeRepository,
)
from src.domain.entities import PendingEmailChange


class PendingEmailChangeRepository(IPendingEmailChangeRepository):
    """PendingEmailChange repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: UUID) -> Optional[PendingEmailChange]:
        stmt = select(PendingEmailChange).where(PendingEmailChange.user_id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_token_hash(self, token_hash: str) -> Optional[PendingEmailChange]:
        stmt = select(PendingEmailChange).where(PendingEmailChange.token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def replace(self, change: PendingEmailChange) -> PendingEmailChange:
        """Supersede the user's previous request, if any"""
        await self.session.execute(
            delete(PendingEmailChange).where(PendingEmailChange.user_id == change.user_id)
        )
        self.session.add(change)
        await self.session.flush()
        await self.session.refresh(change)
        return change

    async def delete(self, change: PendingEmailChange) -> None:
        await self.session.delete(change)
        await self.session.flush()
