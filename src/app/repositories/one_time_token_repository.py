from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import OneTimeToken, TokenPurpose


class IOneTimeTokenRepository(ABC):
    """OneTimeToken repository interface - application layer"""

    @abstractmethod
    async def create(self, token: OneTimeToken) -> OneTimeToken:
        """Create a new one-time token"""
        pass

    @abstractmethod
    async def get_by_hash(
        self,
        token_hash: str,
        purpose: TokenPurpose,
        user_id: Optional[UUID] = None,
    ) -> Optional[OneTimeToken]:
        """Get the most recent token matching hash and purpose (and owner, if given)"""
        pass

    @abstractmethod
    async def mark_used(self, token_id: UUID, now: datetime) -> bool:
        """
        Conditionally mark a token as used.

        Only succeeds while the token is unused and unexpired. Returns False
        when another transaction consumed it first.
        """
        pass

    @abstractmethod
    async def invalidate_outstanding(
        self, user_id: UUID, purpose: TokenPurpose, now: datetime
    ) -> int:
        """Mark every unused token of a purpose for a user as used. Returns count."""
        pass

    @abstractmethod
    async def purge_expired(self, cutoff: datetime) -> int:
        """
        Delete tokens that expired or were used before cutoff.

        Returns the number of rows removed.
        """
        pass
