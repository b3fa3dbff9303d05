"""
OneTimeToken Entity

Purpose-scoped, single-use, expiring tokens.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import TokenPurpose


class OneTimeToken(SQLModel, table=True):
    """
    OneTimeToken entity - email verification, password reset, email change
    and second-factor login codes.

    Business Rules:
    - Only the SHA-256 hash of the raw token is stored
    - Valid iff used_at is null, now < expires_at and the purpose matches
    - Consumed exactly once; never updated after used_at is set
    - Issuing a new token supersedes outstanding ones of the same purpose
    """

    __tablename__ = "one_time_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    purpose: TokenPurpose = Field(nullable=False)
    token_hash: str = Field(max_length=64)  # SHA-256 output

    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_one_time_token_hash_purpose", "token_hash", "purpose"),
        Index("idx_one_time_token_user_purpose", "user_id", "purpose"),
        Index("idx_one_time_token_expires_at", "expires_at"),
    )

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    @property
    def is_used(self) -> bool:
        return self.used_at is not None
