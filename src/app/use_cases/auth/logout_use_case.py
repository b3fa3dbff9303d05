"""
Logout Use Case

Ends the calling device's session.
"""

from uuid import UUID

from libs.result import Result, Return
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent


class LogoutUseCase:
    """
    Use case for logging out the current session.

    Business Rules:
    - Idempotent: logging out an already revoked session succeeds
    - Other sessions of the account are untouched
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, session_id: UUID) -> Result[None]:
        async with self.uow:
            revoked = await SessionRegistry(self.uow).revoke(session_id)
            if revoked:
                await self.uow.audit_events.create(
                    AuditEvent(
                        user_id=user_id,
                        action="logout",
                        event_metadata={"session_id": str(session_id)},
                    )
                )
            await self.uow.commit()

        return Return.ok(None)
