from datetime import timedelta
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, EmailStr, Field

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError, ServerError
from src.api.utils.cookies import clear_auth_cookies
from src.app.errors import ErrorCode
from src.app.services.credential_store import PasswordHasher
from src.app.services.email_service import EmailService
from src.app.services.security_alerts import SecurityAlertDispatcher
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import UserInfo
from src.app.use_cases.security import ForceLogoutResponse, SecurityOrchestrator
from src.app.use_cases.users import (
    EnableTwoFactorUseCase,
    GetProfileUseCase,
    RequestEmailChangeResponse,
    RequestEmailChangeUseCase,
    TwoFactorStatusResponse,
)
from src.depends import (
    get_current_user,
    get_email_service,
    get_password_hasher,
    get_security_alerts,
    get_unit_of_work,
)

router = APIRouter(prefix="/users/me", tags=["User"])


def _session_without_account() -> HTTPException:
    """A live session whose account row is gone reads as an invalid token"""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
    )


@router.get("", status_code=status.HTTP_200_OK, response_model=UserInfo)
async def get_me(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Load Current Account

    Raises:
        - 401 Unauthorized: Invalid or expired token, revoked session, account gone
    """
    use_case = GetProfileUseCase(uow)
    result = await use_case.execute(UUID(current_user["user_id"]))

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.ACCOUNT_NOT_FOUND:
            raise _session_without_account()
        raise ServerError(error)

    return result.value


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., description="New password, checked against the password policy")
    confirm_new_password: str = Field(..., description="New password, repeated")


@router.post(
    "/change-password", status_code=status.HTTP_200_OK, response_model=ForceLogoutResponse
)
async def change_password(
    request: ChangePasswordRequest,
    response: Response,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: PasswordHasher = Depends(get_password_hasher),
    alerts: SecurityAlertDispatcher = Depends(get_security_alerts),
):
    """
    Change Password

    Replaces the password and ends every session of the account, this one
    included. Other devices get a realtime force-logout event.

    Raises:
        - 400 Bad Request: Passwords do not match, password rejected by policy
        - 401 Unauthorized: Current password is incorrect
    """
    if request.new_password != request.confirm_new_password:
        raise ClientError(
            Error(ErrorCode.PASSWORD_MISMATCH, "Passwords do not match"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    orchestrator = SecurityOrchestrator(uow, hasher, alerts)
    result = await orchestrator.change_password(
        UUID(current_user["user_id"]), request.current_password, request.new_password
    )

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.INVALID_CREDENTIAL:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == ErrorCode.INVALID_PASSWORD:
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == ErrorCode.ACCOUNT_NOT_FOUND:
            raise _session_without_account()
        raise ServerError(error)

    clear_auth_cookies(response)
    return result.value


@router.post(
    "/2fa/enable", status_code=status.HTTP_200_OK, response_model=TwoFactorStatusResponse
)
async def enable_two_factor(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """
    Enable Two-Factor Authentication

    Raises:
        - 409 Conflict: Already enabled
    """
    use_case = EnableTwoFactorUseCase(uow, hasher)
    result = await use_case.execute(UUID(current_user["user_id"]))

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.TWO_FACTOR_ALREADY_ENABLED:
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        elif error.code == ErrorCode.ACCOUNT_NOT_FOUND:
            raise _session_without_account()
        raise ServerError(error)

    return result.value


class DisableTwoFactorRequest(BaseModel):
    current_password: str = Field(..., description="Current password")


@router.post(
    "/2fa/disable", status_code=status.HTTP_200_OK, response_model=ForceLogoutResponse
)
async def disable_two_factor(
    request: DisableTwoFactorRequest,
    response: Response,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: PasswordHasher = Depends(get_password_hasher),
    alerts: SecurityAlertDispatcher = Depends(get_security_alerts),
):
    """
    Disable Two-Factor Authentication

    Ends every session of the account once the password is confirmed.

    Raises:
        - 401 Unauthorized: Current password is incorrect
        - 409 Conflict: Two-factor is not enabled
    """
    orchestrator = SecurityOrchestrator(uow, hasher, alerts)
    result = await orchestrator.disable_two_factor(
        UUID(current_user["user_id"]), request.current_password
    )

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.INVALID_CREDENTIAL:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == ErrorCode.TWO_FACTOR_NOT_ENABLED:
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        elif error.code == ErrorCode.ACCOUNT_NOT_FOUND:
            raise _session_without_account()
        raise ServerError(error)

    clear_auth_cookies(response)
    return result.value


class EmailChangeRequest(BaseModel):
    new_email: EmailStr = Field(..., description="Address to move the account to")
    current_password: str = Field(..., description="Current password")


@router.post(
    "/email-change", status_code=status.HTTP_200_OK, response_model=RequestEmailChangeResponse
)
async def request_email_change(
    request: EmailChangeRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: PasswordHasher = Depends(get_password_hasher),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Request Email Change

    Sends a confirmation link to the new address.

    Raises:
        - 401 Unauthorized: Current password is incorrect
        - 409 Conflict: Address already registered
    """
    use_case = RequestEmailChangeUseCase(
        uow,
        hasher,
        email_service,
        change_ttl=timedelta(minutes=ApplicationConfig.EMAIL_CHANGE_TTL_MINUTES),
    )
    result = await use_case.execute(
        UUID(current_user["user_id"]), request.new_email, request.current_password
    )

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.INVALID_CREDENTIAL:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == ErrorCode.EMAIL_ALREADY_EXISTS:
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        elif error.code == ErrorCode.ACCOUNT_NOT_FOUND:
            raise _session_without_account()
        raise ServerError(error)

    return result.value
