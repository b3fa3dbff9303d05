from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import RefreshSession


class ISessionRepository(ABC):
    """RefreshSession repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[RefreshSession]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_by_refresh_token_hash(self, token_hash: str) -> Optional[RefreshSession]:
        """Get session by SHA-256 hash of its refresh token"""
        pass

    @abstractmethod
    async def get_active_by_user_id(self, user_id: UUID) -> List[RefreshSession]:
        """Get all active sessions for a user, newest activity first"""
        pass

    @abstractmethod
    async def create(self, session: RefreshSession) -> RefreshSession:
        """Create a new session"""
        pass

    @abstractmethod
    async def rotate_refresh_token(
        self, session_id: UUID, token_hash: str, now: datetime, expires_at: datetime
    ) -> bool:
        """
        Swap the refresh token hash of a still-active session.

        Returns False when the session was revoked in the meantime.
        """
        pass

    @abstractmethod
    async def revoke_all_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Deactivate all sessions for a user in one statement. Returns count."""
        pass

    @abstractmethod
    async def revoke_all_except_session(
        self, user_id: UUID, session_id: UUID, now: datetime
    ) -> int:
        """Deactivate all sessions for a user except one. Returns count."""
        pass

    @abstractmethod
    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Deactivate one session. Returns True if it was active."""
        pass

    @abstractmethod
    async def deactivate_expired(self, now: datetime) -> int:
        """Deactivate every active session past expires_at. Returns count."""
        pass
