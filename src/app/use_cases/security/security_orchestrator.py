"""
Security Orchestrator

Sequences security-sensitive account changes: verify, mutate, revoke every
session, commit, then alert the owner by email and realtime push.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.credential_store import PasswordHasher, validate_new_password
from src.app.services.security_alerts import SecurityAlertDispatcher, SecurityReason
from src.app.services.session_registry import SessionRegistry
from src.app.services.token_service import OneTimeTokenService
from src.app.services.two_factor import TwoFactorController
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, TokenPurpose
from .dtos import ForceLogoutResponse

logger = logging.getLogger(__name__)


class SecurityOrchestrator:
    """
    Password change, password reset and two-factor disable.

    Business Rules:
    - A wrong current password fails with no side effect at all
    - The credential/2FA mutation, revocation of every session and the
      audit event commit in one transaction; if revocation fails nothing
      is committed
    - The alert email and force-logout push run only after commit and can
      never turn a committed change into a failure
    - The calling session is revoked too; the response tells the client
      to log out
    """

    def __init__(
        self,
        uow: UnitOfWork,
        hasher: PasswordHasher,
        alerts: SecurityAlertDispatcher,
        two_factor: Optional[TwoFactorController] = None,
    ):
        self.uow = uow
        self.hasher = hasher
        self.alerts = alerts
        self.two_factor = two_factor or TwoFactorController(uow, hasher)

    async def change_password(
        self, user_id: UUID, current_password: str, new_password: str
    ) -> Result[ForceLogoutResponse]:
        """
        Change the password of a signed-in account.

        Errors:
            - ACCOUNT_NOT_FOUND: Account disappeared
            - INVALID_CREDENTIAL: Current password is incorrect
            - INVALID_PASSWORD: New password fails the password policy
        """
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error(ErrorCode.ACCOUNT_NOT_FOUND, "Account not found"))

            if not await self.hasher.verify_async(user.password_hash, current_password):
                return Return.err(
                    Error(ErrorCode.INVALID_CREDENTIAL, "Current password is incorrect")
                )

            password_validation = validate_new_password(new_password)
            if password_validation.is_err():
                return Return.err(password_validation.error)

            user.password_hash = await self.hasher.hash_async(new_password)
            await self.uow.users.update(user)

            revoked = await SessionRegistry(self.uow).revoke_all(user.id)
            await self._audit(user.id, "password_changed", revoked)

            await self.uow.commit()

        await self.alerts.force_logout(user.id, user.email, SecurityReason.PASSWORD_CHANGED)

        return Return.ok(
            ForceLogoutResponse(
                message="Password changed successfully",
                message_key="account.loginSecurity.password.success",
            )
        )

    async def disable_two_factor(
        self, user_id: UUID, current_password: str
    ) -> Result[ForceLogoutResponse]:
        """
        Errors:
            - TWO_FACTOR_NOT_ENABLED
            - INVALID_CREDENTIAL: Current password is incorrect
        """
        async with self.uow:
            disabled = await self.two_factor.disable(user_id, current_password)
            if disabled.is_err():
                return Return.err(disabled.error)

            user = disabled.value
            revoked = await SessionRegistry(self.uow).revoke_all(user.id)
            await self._audit(user.id, "two_factor_disabled", revoked)

            await self.uow.commit()

        await self.alerts.force_logout(user.id, user.email, SecurityReason.TWO_FACTOR_DISABLED)

        return Return.ok(
            ForceLogoutResponse(
                message="Two-factor authentication disabled successfully",
                message_key="account.loginSecurity.twoFactor.disabled",
            )
        )

    async def reset_password(self, raw_token: str, new_password: str) -> Result[ForceLogoutResponse]:
        """
        Complete a password reset started by email.

        Errors:
            - INVALID_PASSWORD: New password fails the password policy
            - TOKEN_NOT_FOUND / TOKEN_EXPIRED / TOKEN_ALREADY_USED
        """
        password_validation = validate_new_password(new_password)
        if password_validation.is_err():
            return Return.err(password_validation.error)

        async with self.uow:
            consumed = await OneTimeTokenService(self.uow).consume(
                raw_token, TokenPurpose.password_reset
            )
            if consumed.is_err():
                return Return.err(consumed.error)

            user = await self.uow.users.get_by_id(consumed.value.user_id)
            if user is None:
                return Return.err(Error(ErrorCode.ACCOUNT_NOT_FOUND, "Account not found"))

            user.password_hash = await self.hasher.hash_async(new_password)
            await self.uow.users.update(user)

            revoked = await SessionRegistry(self.uow).revoke_all(user.id)
            await self._audit(user.id, "password_reset", revoked)

            await self.uow.commit()

        logger.info("Password reset completed", extra={"user_id": str(user.id)})
        await self.alerts.force_logout(user.id, user.email, SecurityReason.PASSWORD_RESET)

        return Return.ok(
            ForceLogoutResponse(
                message="Password has been reset successfully. Please log in with your new password.",
                message_key="auth.resetPassword.success",
            )
        )

    async def _audit(self, user_id: UUID, action: str, revoked_sessions: int) -> None:
        await self.uow.audit_events.create(
            AuditEvent(
                user_id=user_id,
                action=action,
                event_metadata={"revoked_sessions": revoked_sessions},
            )
        )
