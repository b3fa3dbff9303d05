"""
Session Registry

Tracks one refresh session per authenticated device and gates refresh
token exchange on the session's active flag.
"""

import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from src.app.services.token_service import hash_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import RefreshSession


@dataclass(frozen=True)
class DeviceInfo:
    """Opaque device metadata captured at login"""

    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    device_type: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None

    @classmethod
    def from_headers(cls, user_agent: Optional[str], ip_address: Optional[str]) -> "DeviceInfo":
        ua = (user_agent or "").lower()

        if "mobile" in ua or "android" in ua or "iphone" in ua:
            device_type = "mobile"
        elif "ipad" in ua or "tablet" in ua:
            device_type = "tablet"
        else:
            device_type = "desktop"

        browser = None
        for marker, name in (
            ("edg/", "Edge"),
            ("chrome/", "Chrome"),
            ("firefox/", "Firefox"),
            ("safari/", "Safari"),
        ):
            if marker in ua:
                browser = name
                break

        os_name = None
        for marker, name in (
            ("windows", "Windows"),
            ("android", "Android"),
            ("iphone", "iOS"),
            ("ipad", "iOS"),
            ("mac os", "macOS"),
            ("linux", "Linux"),
        ):
            if marker in ua:
                os_name = name
                break

        return cls(
            user_agent=user_agent[:512] if user_agent else None,
            ip_address=ip_address,
            device_type=device_type,
            browser=browser,
            os=os_name,
        )


class SessionRegistry:
    """
    Refresh session lifecycle.

    Business Rules:
    - One session per login (password-only or post-2FA)
    - Refresh tokens are random, stored as SHA-256, rotated on every exchange
    - Inactive sessions never yield new access credentials
    - Revocation is a single bulk UPDATE, never a loop of single-row updates
    - Nothing is committed here; the caller commits
    """

    def __init__(self, uow: UnitOfWork, refresh_ttl: timedelta = timedelta(days=30)):
        self.uow = uow
        self.refresh_ttl = refresh_ttl

    async def create(
        self, user_id: UUID, device: Optional[DeviceInfo] = None
    ) -> Tuple[RefreshSession, str]:
        device = device or DeviceInfo()
        refresh_token = secrets.token_urlsafe(32)
        now = utcnow()
        session = RefreshSession(
            user_id=user_id,
            refresh_token_hash=hash_token(refresh_token),
            user_agent=device.user_agent,
            ip_address=device.ip_address,
            device_type=device.device_type,
            browser=device.browser,
            os=device.os,
            created_at=now,
            last_active_at=now,
            expires_at=now + self.refresh_ttl,
        )
        session = await self.uow.sessions.create(session)
        return session, refresh_token

    async def is_active(self, session_id: UUID) -> bool:
        session = await self.uow.sessions.get_by_id(session_id)
        return session is not None and session.is_active

    async def find_by_refresh_token(self, refresh_token: str) -> Optional[RefreshSession]:
        return await self.uow.sessions.get_by_refresh_token_hash(
            hash_token(refresh_token)
        )

    async def rotate(self, session: RefreshSession) -> Optional[str]:
        """
        Replace the session's refresh token and extend its expiry.

        Returns None when the session was revoked after it was read.
        """
        refresh_token = secrets.token_urlsafe(32)
        now = utcnow()
        rotated = await self.uow.sessions.rotate_refresh_token(
            session.id, hash_token(refresh_token), now, now + self.refresh_ttl
        )
        if not rotated:
            return None

        session.refresh_token_hash = hash_token(refresh_token)
        session.last_active_at = now
        session.expires_at = now + self.refresh_ttl
        return refresh_token

    async def list_active(self, user_id: UUID) -> List[RefreshSession]:
        return await self.uow.sessions.get_active_by_user_id(user_id)

    async def revoke(self, session_id: UUID) -> bool:
        return await self.uow.sessions.revoke_by_id(session_id, utcnow())

    async def revoke_all(self, user_id: UUID) -> int:
        return await self.uow.sessions.revoke_all_by_user_id(user_id, utcnow())

    async def revoke_all_except(self, user_id: UUID, session_id: UUID) -> int:
        return await self.uow.sessions.revoke_all_except_session(user_id, session_id, utcnow())
