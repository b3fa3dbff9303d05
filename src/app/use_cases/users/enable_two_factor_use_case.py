"""
Enable Two-Factor Use Case

Turns on the emailed second factor for future logins.
"""

from uuid import UUID

from libs.result import Result, Return
from src.app.services.credential_store import PasswordHasher
from src.app.services.two_factor import TwoFactorController
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent
from .dtos import TwoFactorStatusResponse


class EnableTwoFactorUseCase:
    """
    Use case for enabling two-factor authentication.

    Business Rules:
    - Only from the disabled state
    - Existing sessions stay valid; the next login asks for a code
    """

    def __init__(self, uow: UnitOfWork, hasher: PasswordHasher):
        self.uow = uow
        self.hasher = hasher

    async def execute(self, user_id: UUID) -> Result[TwoFactorStatusResponse]:
        async with self.uow:
            enabled = await TwoFactorController(self.uow, self.hasher).enable(user_id)
            if enabled.is_err():
                return Return.err(enabled.error)

            await self.uow.audit_events.create(
                AuditEvent(user_id=user_id, action="two_factor_enabled")
            )
            await self.uow.commit()

        return Return.ok(TwoFactorStatusResponse(status="enabled", two_factor_enabled=True))
