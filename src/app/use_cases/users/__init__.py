"""
User Management Use Cases

Self-service operations of the signed-in account.
"""

from .get_profile_use_case import GetProfileUseCase
from .enable_two_factor_use_case import EnableTwoFactorUseCase
from .request_email_change_use_case import RequestEmailChangeUseCase
from .manage_sessions_use_case import ManageSessionsUseCase
from .dtos import (
    RequestEmailChangeResponse,
    RevokeSessionsResponse,
    SessionInfo,
    SessionListResponse,
    TwoFactorStatusResponse,
)

__all__ = [
    "GetProfileUseCase",
    "EnableTwoFactorUseCase",
    "RequestEmailChangeUseCase",
    "ManageSessionsUseCase",
    "RequestEmailChangeResponse",
    "RevokeSessionsResponse",
    "SessionInfo",
    "SessionListResponse",
    "TwoFactorStatusResponse",
]
