"""
Resend Verification Use Case

Issues a fresh email verification token for unverified accounts.
"""

from datetime import timedelta

from libs.result import Result, Return
from src.app.services.email_service import EmailService, EmailTemplate, send_quietly
from src.app.services.token_service import OneTimeTokenService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email
from src.domain.entities import AuditEvent, TokenPurpose
from .dtos import ResendVerificationResponse

_RESPONSE = ResendVerificationResponse(
    status="sent",
    message="If the email exists and is not verified, a verification email has been sent",
)


class ResendVerificationUseCase:
    """
    Use case for resending the verification email.

    Business Rules:
    - No email enumeration (same response for unknown, verified and
      unverified emails)
    - The new token supersedes any outstanding verification token
    """

    def __init__(
        self,
        uow: UnitOfWork,
        email_service: EmailService,
        verification_ttl: timedelta = timedelta(minutes=30),
    ):
        self.uow = uow
        self.email_service = email_service
        self.verification_ttl = verification_ttl

    async def execute(self, email: str) -> Result[ResendVerificationResponse]:
        email = normalize_email(email)

        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            if user is None or user.is_verified:
                return Return.ok(_RESPONSE)

            verification_token = await OneTimeTokenService(self.uow).issue(
                TokenPurpose.email_verification, user.id, self.verification_ttl
            )

            await self.uow.audit_events.create(
                AuditEvent(user_id=user.id, action="verification_resent")
            )

            await self.uow.commit()

        await send_quietly(
            self.email_service,
            EmailTemplate.EMAIL_VERIFICATION,
            user.email,
            {"token": verification_token},
        )

        return Return.ok(_RESPONSE)
