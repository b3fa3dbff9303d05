"""
Account Service Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    UserStatus,
    UserRole,
    TokenPurpose,
    TwoFactorState,
)

# Export all entities
from .user import User
from .one_time_token import OneTimeToken
from .refresh_session import RefreshSession
from .pending_email_change import PendingEmailChange
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "UserStatus",
    "UserRole",
    "TokenPurpose",
    "TwoFactorState",
    # Entities
    "User",
    "OneTimeToken",
    "RefreshSession",
    "PendingEmailChange",
    "AuditEvent",
]
