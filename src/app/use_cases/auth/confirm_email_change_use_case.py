"""
Confirm Email Change Use Case

Moves an account to the address that received the confirmation link.
"""

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.security_alerts import SecurityAlertDispatcher, SecurityReason
from src.app.services.token_service import OneTimeTokenService, hash_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, TokenPurpose
from .dtos import ConfirmEmailChangeResponse


class ConfirmEmailChangeUseCase:
    """
    Use case for confirming an email change.

    Business Rules:
    - Token must be an unused, unexpired email_change token
    - The new address must still be free at confirmation time
    - Email update, pending row removal and token consumption commit together
    - The previous address is alerted after commit (best-effort)
    """

    def __init__(self, uow: UnitOfWork, alerts: SecurityAlertDispatcher):
        self.uow = uow
        self.alerts = alerts

    async def execute(self, token: str) -> Result[ConfirmEmailChangeResponse]:
        """
        Errors:
            - TOKEN_NOT_FOUND / TOKEN_EXPIRED / TOKEN_ALREADY_USED
            - EMAIL_ALREADY_EXISTS: Address was taken after the request
        """
        async with self.uow:
            consumed = await OneTimeTokenService(self.uow).consume(
                token, TokenPurpose.email_change
            )
            if consumed.is_err():
                return Return.err(consumed.error)

            pending = await self.uow.pending_email_changes.get_by_token_hash(hash_token(token))
            if pending is None or pending.user_id != consumed.value.user_id:
                return Return.err(Error(ErrorCode.TOKEN_NOT_FOUND, "Token not found"))

            user = await self.uow.users.get_by_id(pending.user_id)
            if user is None:
                return Return.err(Error(ErrorCode.ACCOUNT_NOT_FOUND, "Account not found"))

            owner = await self.uow.users.get_by_email(pending.new_email)
            if owner is not None and owner.id != user.id:
                return Return.err(
                    Error(ErrorCode.EMAIL_ALREADY_EXISTS, "Email already registered")
                )

            previous_email = user.email
            user.email = pending.new_email
            user.is_verified = True
            await self.uow.users.update(user)
            await self.uow.pending_email_changes.delete(pending)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="email_changed",
                    event_metadata={"previous_email": previous_email},
                )
            )

            await self.uow.commit()

        await self.alerts.send_email_alert(user.id, previous_email, SecurityReason.EMAIL_CHANGED)

        return Return.ok(
            ConfirmEmailChangeResponse(
                status="changed",
                message="Email address updated successfully",
                email=user.email,
            )
        )
