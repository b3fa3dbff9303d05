"""
Request Password Reset Use Case

Handles generating and sending password reset tokens.
"""

from datetime import timedelta

from libs.result import Result, Return
from src.app.services.email_service import EmailService, EmailTemplate, send_quietly
from src.app.services.token_service import OneTimeTokenService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email
from src.domain.entities import AuditEvent, TokenPurpose
from .dtos import RequestPasswordResetResponse


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - Token has 256 bits of entropy, stored as SHA-256 hash
    - Token expires after the configured TTL (1 hour by default)
    - A new request supersedes any outstanding reset token
    - No email enumeration (same response for valid/invalid emails)
    - Email failures are logged, never surfaced
    - Audit event created for security tracking
    """

    def __init__(
        self,
        uow: UnitOfWork,
        email_service: EmailService,
        reset_ttl: timedelta = timedelta(hours=1),
    ):
        self.uow = uow
        self.email_service = email_service
        self.reset_ttl = reset_ttl

    async def execute(self, email: str) -> Result[RequestPasswordResetResponse]:
        """
        Execute request password reset use case.

        Args:
            email: User's email address

        Returns:
            Result with reset status

        Note:
            Always returns the same success payload. Only an existing
            account gets a token and an email.
        """
        response = RequestPasswordResetResponse(
            status="sent",
            message="If an account with this email exists, a password reset link has been sent.",
        )
        email = normalize_email(email)

        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            if user is None:
                return Return.ok(response)

            reset_token = await OneTimeTokenService(self.uow).issue(
                TokenPurpose.password_reset, user.id, self.reset_ttl
            )

            await self.uow.audit_events.create(
                AuditEvent(user_id=user.id, action="password_reset_requested")
            )

            await self.uow.commit()

        await send_quietly(
            self.email_service,
            EmailTemplate.PASSWORD_RESET,
            user.email,
            {"token": reset_token},
        )

        return Return.ok(response)
