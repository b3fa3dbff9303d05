"""
Refresh Token Use Case

Handles access token refresh with refresh token rotation.
"""

from datetime import timedelta

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.api.utils.jwt import generate_jwt
from src.domain.base import utcnow
from src.domain.entities import UserStatus
from .dtos import AuthTokens


class RefreshTokenUseCase:
    """
    Use case for refreshing JWT access tokens.

    Business Rules:
    - Refresh token rotation: old token invalidated, new token issued
    - Session must be active (revoked sessions never refresh)
    - Session must not be expired
    - Account must still exist and be enabled
    """

    def __init__(self, uow: UnitOfWork, refresh_ttl: timedelta = timedelta(days=30)):
        self.uow = uow
        self.refresh_ttl = refresh_ttl

    async def execute(self, refresh_token: str) -> Result[AuthTokens]:
        """
        Execute refresh token use case.

        Errors:
            - INVALID_REFRESH_TOKEN: No session holds this token
            - SESSION_REVOKED: Session has been revoked
            - SESSION_EXPIRED: Session has expired
        """
        async with self.uow:
            registry = SessionRegistry(self.uow, self.refresh_ttl)
            session = await registry.find_by_refresh_token(refresh_token)

            if session is None:
                return Return.err(
                    Error(ErrorCode.INVALID_REFRESH_TOKEN, "Invalid refresh token")
                )

            if not session.is_active:
                return Return.err(Error(ErrorCode.SESSION_REVOKED, "Session has been revoked"))

            if session.expires_at <= utcnow():
                return Return.err(Error(ErrorCode.SESSION_EXPIRED, "Session has expired"))

            user = await self.uow.users.get_by_id(session.user_id)
            if user is None or user.status != UserStatus.active:
                return Return.err(Error(ErrorCode.SESSION_REVOKED, "Session has been revoked"))

            new_refresh_token = await registry.rotate(session)
            if new_refresh_token is None:
                return Return.err(Error(ErrorCode.SESSION_REVOKED, "Session has been revoked"))

            await self.uow.commit()

            return Return.ok(
                AuthTokens(
                    access_token=generate_jwt(user.id, session.id, user.roles or []),
                    refresh_token=new_refresh_token,
                    session_id=str(session.id),
                )
            )
