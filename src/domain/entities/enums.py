"""
Account Service Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """User account status"""

    active = "active"
    disabled = "disabled"


class UserRole(str, Enum):
    """Roles an account can hold"""

    customer = "customer"
    admin = "admin"
    superadmin = "superadmin"


class TokenPurpose(str, Enum):
    """Operation a one-time token authorizes"""

    email_verification = "email_verification"
    password_reset = "password_reset"
    email_change = "email_change"
    two_factor_login = "two_factor_login"


class TwoFactorState(str, Enum):
    """Second-factor lifecycle states"""

    disabled = "disabled"
    enabling = "enabling"
    enabled = "enabled"
    disabling = "disabling"
