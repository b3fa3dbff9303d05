"""
User Use Case DTOs

Response classes for the signed-in account's self-service operations.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from src.domain.entities import RefreshSession


class SessionInfo(BaseModel):
    """One active device session"""

    id: str
    device_type: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
    last_active_at: datetime
    is_current: bool = False

    @classmethod
    def from_session(cls, session: RefreshSession, current_session_id=None) -> "SessionInfo":
        return cls(
            id=str(session.id),
            device_type=session.device_type,
            browser=session.browser,
            os=session.os,
            ip_address=session.ip_address,
            created_at=session.created_at,
            last_active_at=session.last_active_at,
            is_current=current_session_id is not None and session.id == current_session_id,
        )


class SessionListResponse(BaseModel):
    sessions: List[SessionInfo]


class RevokeSessionsResponse(BaseModel):
    revoked_count: int


class TwoFactorStatusResponse(BaseModel):
    status: str
    two_factor_enabled: bool


class RequestEmailChangeResponse(BaseModel):
    status: str
    message: str
