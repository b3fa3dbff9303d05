"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import List, Optional
from pydantic import BaseModel

from src.domain.entities import User


# ============================================================================
# Nested Models
# ============================================================================


class UserInfo(BaseModel):
    """Account information safe to return to the client"""

    id: str
    email: str
    is_verified: bool
    two_factor_enabled: bool
    roles: List[str]

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(
            id=str(user.id),
            email=user.email,
            is_verified=user.is_verified,
            two_factor_enabled=user.two_factor_enabled,
            roles=list(user.roles or []),
        )


class AuthTokens(BaseModel):
    """Credentials minted for a session (transported as cookies)"""

    access_token: str
    refresh_token: str
    session_id: str


# ============================================================================
# Response DTOs
# ============================================================================


class RegisterResponse(BaseModel):
    """Response for account registration use case"""

    message: str
    user: UserInfo


class LoginResult(BaseModel):
    """
    Result of a login attempt.

    Exactly one of: tokens (session created), requires_two_factor or
    requires_verification.
    """

    user: UserInfo
    tokens: Optional[AuthTokens] = None
    requires_two_factor: bool = False
    requires_verification: bool = False


class VerifyEmailResponse(BaseModel):
    """Response for email verification use case"""

    status: str
    message: str


class ResendVerificationResponse(BaseModel):
    """Response for resend verification email use case"""

    status: str
    message: str


class RequestPasswordResetResponse(BaseModel):
    """Response for request password reset use case"""

    status: str
    message: str


class ConfirmEmailChangeResponse(BaseModel):
    """Response for email change confirmation use case"""

    status: str
    message: str
    email: str
