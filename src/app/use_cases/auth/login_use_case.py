"""
Login Use Case

Password authentication. Accounts with two-factor enabled receive an
emailed code instead of a session.
"""

from datetime import timedelta
from typing import Optional

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.credential_store import PasswordHasher
from src.app.services.email_service import EmailService, EmailTemplate, send_quietly
from src.app.services.session_registry import DeviceInfo, SessionRegistry
from src.app.services.token_service import OneTimeTokenService
from src.app.services.unit_of_work import UnitOfWork
from src.api.utils.jwt import generate_jwt
from src.domain.base import normalize_email, utcnow
from src.domain.entities import AuditEvent, TokenPurpose, User, UserStatus
from .dtos import AuthTokens, LoginResult, UserInfo


async def start_session(
    uow: UnitOfWork,
    user: User,
    device: Optional[DeviceInfo],
    refresh_ttl: timedelta,
) -> AuthTokens:
    """Create a refresh session and mint its credentials (caller commits)"""
    session, refresh_token = await SessionRegistry(uow, refresh_ttl).create(user.id, device)

    user.last_login_at = utcnow()
    await uow.users.update(user)

    await uow.audit_events.create(
        AuditEvent(
            user_id=user.id,
            action="login",
            event_metadata={"session_id": str(session.id), "device_type": session.device_type},
        )
    )

    return AuthTokens(
        access_token=generate_jwt(user.id, session.id, user.roles or []),
        refresh_token=refresh_token,
        session_id=str(session.id),
    )


class LoginUseCase:
    """
    Use case for user login.

    Business Rules:
    - Unknown email and wrong password are indistinguishable (same error,
      comparable bcrypt work)
    - Disabled accounts cannot log in
    - Unverified accounts get a fresh verification email, no session
    - Two-factor accounts get an emailed code, no session
    - Otherwise one new refresh session per login
    """

    def __init__(
        self,
        uow: UnitOfWork,
        hasher: PasswordHasher,
        email_service: EmailService,
        refresh_ttl: timedelta = timedelta(days=30),
        verification_ttl: timedelta = timedelta(minutes=30),
        two_factor_code_ttl: timedelta = timedelta(minutes=10),
    ):
        self.uow = uow
        self.hasher = hasher
        self.email_service = email_service
        self.refresh_ttl = refresh_ttl
        self.verification_ttl = verification_ttl
        self.two_factor_code_ttl = two_factor_code_ttl

    async def execute(
        self, email: str, password: str, device: Optional[DeviceInfo] = None
    ) -> Result[LoginResult]:
        """
        Execute login use case.

        Errors:
            - INVALID_CREDENTIAL: Unknown email or wrong password
            - ACCOUNT_DISABLED: Account is disabled
        """
        email = normalize_email(email)

        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            if user is None:
                await self.hasher.dummy_verify_async(password)
                return Return.err(
                    Error(ErrorCode.INVALID_CREDENTIAL, "Invalid email or password")
                )

            if not await self.hasher.verify_async(user.password_hash, password):
                return Return.err(
                    Error(ErrorCode.INVALID_CREDENTIAL, "Invalid email or password")
                )

            if user.status == UserStatus.disabled:
                return Return.err(Error(ErrorCode.ACCOUNT_DISABLED, "User account is disabled"))

            if not user.is_verified:
                verification_token = await OneTimeTokenService(self.uow).issue(
                    TokenPurpose.email_verification, user.id, self.verification_ttl
                )
                await self.uow.commit()
                await send_quietly(
                    self.email_service,
                    EmailTemplate.EMAIL_VERIFICATION,
                    user.email,
                    {"token": verification_token},
                )
                return Return.ok(
                    LoginResult(user=UserInfo.from_user(user), requires_verification=True)
                )

            if user.two_factor_enabled:
                code = await OneTimeTokenService(self.uow).issue_code(
                    TokenPurpose.two_factor_login, user.id, self.two_factor_code_ttl
                )
                await self.uow.commit()
                await send_quietly(
                    self.email_service,
                    EmailTemplate.TWO_FACTOR_CODE,
                    user.email,
                    {"code": code},
                )
                return Return.ok(
                    LoginResult(user=UserInfo.from_user(user), requires_two_factor=True)
                )

            tokens = await start_session(self.uow, user, device, self.refresh_ttl)
            await self.uow.commit()

            return Return.ok(LoginResult(user=UserInfo.from_user(user), tokens=tokens))
