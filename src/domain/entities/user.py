"""
User Entity

Represents a customer or staff account.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import TwoFactorState, UserRole, UserStatus


class User(SQLModel, table=True):
    """
    User entity - a customer or staff account.

    Business Rules:
    - Email is unique and stored normalized (stripped, lower-cased)
    - Password stored as bcrypt hash
    - Email verification required before login
    - two_factor_enabled changes only through the two-factor controller
    - Password and 2FA changes revoke every refresh session
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    status: UserStatus = Field(default=UserStatus.active)
    roles: List[str] = Field(
        default_factory=lambda: [UserRole.customer.value], sa_column=Column(JSON)
    )

    is_verified: bool = Field(default=False)
    two_factor_enabled: bool = Field(default=False)
    recovery_email: Optional[str] = Field(default=None, max_length=255)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_is_verified", "is_verified"),)

    @property
    def two_factor_state(self) -> TwoFactorState:
        if self.two_factor_enabled:
            return TwoFactorState.enabled
        return TwoFactorState.disabled
