from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import PendingEmailChange


class IPendingEmailChangeRepository(ABC):
    """PendingEmailChange repository interface - application layer"""

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> Optional[PendingEmailChange]:
        """Get the live email change request for a user"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[PendingEmailChange]:
        """Get email change request by confirmation token hash"""
        pass

    @abstractmethod
    async def replace(self, change: PendingEmailChange) -> PendingEmailChange:
        """Delete any existing request for the user and store this one"""
        pass

    @abstractmethod
    async def delete(self, change: PendingEmailChange) -> None:
        """Delete an email change request"""
        pass
