"""
Request Email Change Use Case

Starts moving an account to a new address: the change only happens once
the link sent to the new address is followed.
"""

from datetime import timedelta
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.credential_store import PasswordHasher
from src.app.services.email_service import EmailService, EmailTemplate, send_quietly
from src.app.services.token_service import OneTimeTokenService, hash_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email, utcnow
from src.domain.entities import AuditEvent, PendingEmailChange, TokenPurpose
from .dtos import RequestEmailChangeResponse


class RequestEmailChangeUseCase:
    """
    Use case for requesting an email change.

    Business Rules:
    - Current password must be re-entered
    - New address must differ from the current one and be unused
    - At most one pending change per account; a new request replaces it
      and supersedes the previous confirmation token
    - Confirmation link goes to the new address after commit (best-effort)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        hasher: PasswordHasher,
        email_service: EmailService,
        change_ttl: timedelta = timedelta(hours=1),
    ):
        self.uow = uow
        self.hasher = hasher
        self.email_service = email_service
        self.change_ttl = change_ttl

    async def execute(
        self, user_id: UUID, new_email: str, current_password: str
    ) -> Result[RequestEmailChangeResponse]:
        """
        Errors:
            - INVALID_CREDENTIAL: Current password is incorrect
            - EMAIL_ALREADY_EXISTS: New address belongs to an account
        """
        new_email = normalize_email(new_email)

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error(ErrorCode.ACCOUNT_NOT_FOUND, "Account not found"))

            if not await self.hasher.verify_async(user.password_hash, current_password):
                return Return.err(
                    Error(ErrorCode.INVALID_CREDENTIAL, "Current password is incorrect")
                )

            if new_email == user.email or await self.uow.users.get_by_email(new_email):
                return Return.err(
                    Error(ErrorCode.EMAIL_ALREADY_EXISTS, "Email already registered")
                )

            raw_token = await OneTimeTokenService(self.uow).issue(
                TokenPurpose.email_change, user.id, self.change_ttl
            )
            await self.uow.pending_email_changes.replace(
                PendingEmailChange(
                    user_id=user.id,
                    new_email=new_email,
                    token_hash=hash_token(raw_token),
                    expires_at=utcnow() + self.change_ttl,
                )
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="email_change_requested",
                    event_metadata={"new_email": new_email},
                )
            )

            await self.uow.commit()

        await send_quietly(
            self.email_service,
            EmailTemplate.EMAIL_CHANGE,
            new_email,
            {"token": raw_token},
        )

        return Return.ok(
            RequestEmailChangeResponse(
                status="pending",
                message="A confirmation link has been sent to the new email address.",
            )
        )
