"""
Register Use Case

Creates an unverified account and sends the email verification link.
"""

from datetime import timedelta

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.credential_store import PasswordHasher, validate_new_password
from src.app.services.email_service import EmailService, EmailTemplate, send_quietly
from src.app.services.token_service import OneTimeTokenService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email
from src.domain.entities import AuditEvent, TokenPurpose, User
from .dtos import RegisterResponse, UserInfo


class RegisterUseCase:
    """
    Use case for account registration.

    Business Rules:
    - Email is normalized and must be unique
    - Password hashed with bcrypt off the event loop
    - Account starts unverified with 2FA disabled
    - An email_verification token is issued and emailed after commit
    - Email delivery failure does not fail registration
    """

    def __init__(
        self,
        uow: UnitOfWork,
        hasher: PasswordHasher,
        email_service: EmailService,
        verification_ttl: timedelta = timedelta(minutes=30),
    ):
        self.uow = uow
        self.hasher = hasher
        self.email_service = email_service
        self.verification_ttl = verification_ttl

    async def execute(self, email: str, password: str) -> Result[RegisterResponse]:
        """
        Execute registration use case.

        Errors:
            - EMAIL_ALREADY_EXISTS: Email already registered
            - INVALID_PASSWORD: Password does not meet complexity requirements
        """
        email = normalize_email(email)

        password_validation = validate_new_password(password)
        if password_validation.is_err():
            return Return.err(password_validation.error)

        async with self.uow:
            existing_user = await self.uow.users.get_by_email(email)
            if existing_user:
                return Return.err(
                    Error(ErrorCode.EMAIL_ALREADY_EXISTS, "Email already registered")
                )

            password_hash = await self.hasher.hash_async(password)
            user = await self.uow.users.create(
                User(email=email, password_hash=password_hash, is_verified=False)
            )

            verification_token = await OneTimeTokenService(self.uow).issue(
                TokenPurpose.email_verification, user.id, self.verification_ttl
            )

            await self.uow.audit_events.create(
                AuditEvent(user_id=user.id, action="register", event_metadata={"email": email})
            )

            await self.uow.commit()

        await send_quietly(
            self.email_service,
            EmailTemplate.EMAIL_VERIFICATION,
            user.email,
            {"token": verification_token},
        )

        return Return.ok(
            RegisterResponse(
                message="User registered successfully. Please check your email to verify your account.",
                user=UserInfo.from_user(user),
            )
        )
