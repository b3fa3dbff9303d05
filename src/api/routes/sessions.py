from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.error import ClientError, ServerError
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users import (
    ManageSessionsUseCase,
    RevokeSessionsResponse,
    SessionListResponse,
)
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=SessionListResponse)
async def list_sessions(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Active sessions of the signed-in account, most recent first"""
    use_case = ManageSessionsUseCase(uow)
    result = await use_case.list_sessions(
        UUID(current_user["user_id"]), UUID(current_user["session_id"])
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.delete(
    "/{session_id}", status_code=status.HTTP_200_OK, response_model=RevokeSessionsResponse
)
async def revoke_session(
    session_id: UUID,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Revoke One Session

    Raises:
        - 403 Forbidden: Session belongs to another account
        - 404 Not Found: No active session with this id
    """
    use_case = ManageSessionsUseCase(uow)
    result = await use_case.revoke_session(UUID(current_user["user_id"]), session_id)

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.FORBIDDEN:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == ErrorCode.SESSION_NOT_FOUND:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.post(
    "/revoke-others", status_code=status.HTTP_200_OK, response_model=RevokeSessionsResponse
)
async def revoke_other_sessions(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Log out every other device, keeping the calling session"""
    use_case = ManageSessionsUseCase(uow)
    result = await use_case.revoke_other_sessions(
        UUID(current_user["user_id"]), UUID(current_user["session_id"])
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value
