"""
Two-Factor Login Use Case

Second step of login for accounts with two-factor enabled: exchanges the
emailed code for a session.
"""

from datetime import timedelta
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.session_registry import DeviceInfo
from src.app.services.token_service import OneTimeTokenService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import TokenPurpose, UserStatus
from .dtos import LoginResult, UserInfo
from .login_use_case import start_session


class TwoFactorLoginUseCase:
    """
    Use case for completing a two-factor login.

    Business Rules:
    - The code is single-use and scoped to the account it was sent to
    - Any code failure (unknown, used, expired) reads as one error
    - Consuming the code and creating the session commit together
    """

    def __init__(self, uow: UnitOfWork, refresh_ttl: timedelta = timedelta(days=30)):
        self.uow = uow
        self.refresh_ttl = refresh_ttl

    async def execute(
        self, user_id: UUID, code: str, device: Optional[DeviceInfo] = None
    ) -> Result[LoginResult]:
        invalid_code = Error(
            ErrorCode.INVALID_TWO_FACTOR_CODE, "Invalid or expired verification code"
        )

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None or not user.two_factor_enabled:
                return Return.err(invalid_code)

            if user.status == UserStatus.disabled:
                return Return.err(Error(ErrorCode.ACCOUNT_DISABLED, "User account is disabled"))

            consumed = await OneTimeTokenService(self.uow).consume(
                code.strip(), TokenPurpose.two_factor_login, user_id=user.id
            )
            if consumed.is_err():
                return Return.err(invalid_code)

            tokens = await start_session(self.uow, user, device, self.refresh_ttl)
            await self.uow.commit()

            return Return.ok(LoginResult(user=UserInfo.from_user(user), tokens=tokens))
