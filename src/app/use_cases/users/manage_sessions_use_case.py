"""
Manage Sessions Use Case

Lists and revokes the signed-in account's device sessions.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent
from .dtos import RevokeSessionsResponse, SessionInfo, SessionListResponse


class ManageSessionsUseCase:
    """
    Use case for session self-service.

    Business Rules:
    - Users only see and revoke their own sessions
    - Revoking an already inactive session is reported as not found
    - "Revoke others" keeps the calling session alive
    - Revocation is audit-logged
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_sessions(
        self, user_id: UUID, current_session_id: UUID
    ) -> Result[SessionListResponse]:
        async with self.uow:
            sessions = await SessionRegistry(self.uow).list_active(user_id)

            return Return.ok(
                SessionListResponse(
                    sessions=[SessionInfo.from_session(s, current_session_id) for s in sessions]
                )
            )

    async def revoke_session(self, user_id: UUID, session_id: UUID) -> Result[RevokeSessionsResponse]:
        """
        Errors:
            - SESSION_NOT_FOUND: No active session with this id
            - FORBIDDEN: Session belongs to another account
        """
        async with self.uow:
            session = await self.uow.sessions.get_by_id(session_id)
            if session is None or not session.is_active:
                return Return.err(Error(ErrorCode.SESSION_NOT_FOUND, "Session not found"))

            if session.user_id != user_id:
                return Return.err(
                    Error(ErrorCode.FORBIDDEN, "Session does not belong to current user")
                )

            revoked = await SessionRegistry(self.uow).revoke(session_id)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user_id,
                    action="revoke_session",
                    event_metadata={"session_id": str(session_id)},
                )
            )
            await self.uow.commit()

            return Return.ok(RevokeSessionsResponse(revoked_count=1 if revoked else 0))

    async def revoke_other_sessions(
        self, user_id: UUID, current_session_id: UUID
    ) -> Result[RevokeSessionsResponse]:
        async with self.uow:
            count = await SessionRegistry(self.uow).revoke_all_except(user_id, current_session_id)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user_id,
                    action="revoke_other_sessions",
                    event_metadata={
                        "kept_session_id": str(current_session_id),
                        "revoked_count": count,
                    },
                )
            )
            await self.uow.commit()

            return Return.ok(RevokeSessionsResponse(revoked_count=count))
