"""
PendingEmailChange Entity

Unconfirmed request to move an account to a new email address.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class PendingEmailChange(SQLModel, table=True):
    """
    PendingEmailChange entity.

    Business Rules:
    - At most one row per user; a new request replaces the old one
    - token_hash mirrors the email_change OneTimeToken sent to new_email
    - Confirmation updates User.email and deletes the row in one transaction
    """

    __tablename__ = "pending_email_changes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, unique=True)
    new_email: str = Field(max_length=255)
    token_hash: str = Field(max_length=64, index=True)

    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_pending_email_change_expires_at", "expires_at"),)
