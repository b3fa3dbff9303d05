"""
Verify Email Use Case

Handles email verification via a one-time token.
"""

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.token_service import OneTimeTokenService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, TokenPurpose
from .dtos import VerifyEmailResponse


class VerifyEmailUseCase:
    """
    Use case for email verification.

    Business Rules:
    - Token must be an unused, unexpired email_verification token
    - Marking the token used and setting is_verified commit together
    - A replayed token fails even though the account is already verified
    - Records audit event
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, token: str) -> Result[VerifyEmailResponse]:
        """
        Execute email verification use case.

        Args:
            token: Verification token from email link

        Returns:
            Result with verification status, or Error

        Errors:
            - TOKEN_NOT_FOUND / TOKEN_EXPIRED / TOKEN_ALREADY_USED
        """
        async with self.uow:
            consumed = await OneTimeTokenService(self.uow).consume(
                token, TokenPurpose.email_verification
            )
            if consumed.is_err():
                return Return.err(consumed.error)

            user = await self.uow.users.get_by_id(consumed.value.user_id)
            if user is None:
                # Leaving the block without commit rolls the consumption back
                return Return.err(Error(ErrorCode.ACCOUNT_NOT_FOUND, "Account not found"))

            user.is_verified = True
            await self.uow.users.update(user)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="email_verified",
                    event_metadata={"token_id": str(consumed.value.id)},
                )
            )

            await self.uow.commit()

        return Return.ok(
            VerifyEmailResponse(status="verified", message="Email verified successfully")
        )
