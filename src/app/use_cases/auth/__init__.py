"""
Authentication Use Cases

All authentication-related business logic.
"""

from .register_use_case import RegisterUseCase
from .login_use_case import LoginUseCase, start_session
from .two_factor_login_use_case import TwoFactorLoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .resend_verification_use_case import ResendVerificationUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .confirm_email_change_use_case import ConfirmEmailChangeUseCase
from .dtos import (
    AuthTokens,
    ConfirmEmailChangeResponse,
    LoginResult,
    RegisterResponse,
    RequestPasswordResetResponse,
    ResendVerificationResponse,
    UserInfo,
    VerifyEmailResponse,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "LoginUseCase",
    "TwoFactorLoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "VerifyEmailUseCase",
    "ResendVerificationUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmEmailChangeUseCase",
    "start_session",
    # DTOs - Responses
    "RegisterResponse",
    "LoginResult",
    "VerifyEmailResponse",
    "ResendVerificationResponse",
    "RequestPasswordResetResponse",
    "ConfirmEmailChangeResponse",
    # DTOs - Nested Models
    "AuthTokens",
    "UserInfo",
]
