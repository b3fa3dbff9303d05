"""
RefreshSession Entity

One row per authenticated device/login.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class RefreshSession(SQLModel, table=True):
    """
    RefreshSession entity - gates refresh token exchange for one device.

    Business Rules:
    - Refresh tokens are stored as SHA-256 hashes (indexed lookup)
    - Tokens rotate on each refresh
    - An access token is honored only while its session is active
    - Never deleted: revocation flips is_active and stamps revoked_at
    - Expires after 30 days
    """

    __tablename__ = "refresh_sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    refresh_token_hash: str = Field(unique=True, index=True, max_length=64)

    is_active: bool = Field(default=True)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Device metadata
    user_agent: Optional[str] = Field(default=None, max_length=512)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    device_type: Optional[str] = Field(default=None, max_length=32)
    browser: Optional[str] = Field(default=None, max_length=64)
    os: Optional[str] = Field(default=None, max_length=64)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_active_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_refresh_session_user_active", "user_id", "is_active"),
        Index("idx_refresh_session_expires_at", "expires_at"),
    )
