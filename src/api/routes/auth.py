from datetime import timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, EmailStr, Field

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError, ServerError
from src.api.utils.cookies import REFRESH_TOKEN_COOKIE, clear_auth_cookies, set_auth_cookies
from src.app.errors import TOKEN_FAILURE_CODES, ErrorCode
from src.app.services.credential_store import PasswordHasher
from src.app.services.email_service import EmailService
from src.app.services.security_alerts import SecurityAlertDispatcher
from src.app.services.session_registry import DeviceInfo
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    ConfirmEmailChangeResponse,
    ConfirmEmailChangeUseCase,
    LoginUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
    RegisterResponse,
    RegisterUseCase,
    RequestPasswordResetResponse,
    RequestPasswordResetUseCase,
    ResendVerificationResponse,
    ResendVerificationUseCase,
    TwoFactorLoginUseCase,
    UserInfo,
    VerifyEmailResponse,
    VerifyEmailUseCase,
)
from src.app.use_cases.security import ForceLogoutResponse, SecurityOrchestrator
from src.depends import (
    get_current_user,
    get_device_info,
    get_email_service,
    get_password_hasher,
    get_security_alerts,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])

REFRESH_TTL = timedelta(days=ApplicationConfig.REFRESH_TOKEN_TTL_DAYS)


def _raise_token_error(error: Error, message: str):
    """One generic answer for unknown, used and expired tokens"""
    if error.code in TOKEN_FAILURE_CODES or error.code == ErrorCode.ACCOUNT_NOT_FOUND:
        raise ClientError(
            Error(ErrorCode.INVALID_TOKEN, message), status_code=status.HTTP_400_BAD_REQUEST
        )
    raise ServerError(error)


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before it reaches the use case.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse)
async def register(
    request: RegisterRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: PasswordHasher = Depends(get_password_hasher),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Account Registration

    Creates an unverified account and emails a verification link.

    Raises:
        - 409 Conflict: Email already exists
        - 400 Bad Request: Password rejected by policy
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    use_case = RegisterUseCase(
        uow,
        hasher,
        email_service,
        verification_ttl=timedelta(minutes=ApplicationConfig.EMAIL_VERIFICATION_TTL_MINUTES),
    )
    result = await use_case.execute(request.email, request.password)

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.EMAIL_ALREADY_EXISTS:
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        elif error.code == ErrorCode.INVALID_PASSWORD:
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class LoginResponse(BaseModel):
    """
    Login outcome.

    Session credentials travel as http-only cookies and are repeated in
    the body for non-browser clients.
    """

    user: UserInfo
    requires_two_factor: bool = False
    requires_verification: bool = False
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    session_id: Optional[str] = None


def _login_response(result_value, response: Response) -> LoginResponse:
    tokens = result_value.tokens
    if tokens is None:
        return LoginResponse(
            user=result_value.user,
            requires_two_factor=result_value.requires_two_factor,
            requires_verification=result_value.requires_verification,
        )

    set_auth_cookies(response, tokens.access_token, tokens.refresh_token)
    return LoginResponse(
        user=result_value.user,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        session_id=tokens.session_id,
    )


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: PasswordHasher = Depends(get_password_hasher),
    email_service: EmailService = Depends(get_email_service),
    device: DeviceInfo = Depends(get_device_info),
):
    """
    User Login

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: Account disabled
    """
    use_case = LoginUseCase(
        uow,
        hasher,
        email_service,
        refresh_ttl=REFRESH_TTL,
        verification_ttl=timedelta(minutes=ApplicationConfig.EMAIL_VERIFICATION_TTL_MINUTES),
        two_factor_code_ttl=timedelta(minutes=ApplicationConfig.TWO_FACTOR_CODE_TTL_MINUTES),
    )
    result = await use_case.execute(request.email, request.password, device)

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.INVALID_CREDENTIAL:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == ErrorCode.ACCOUNT_DISABLED:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return _login_response(result.value, response)


class TwoFactorLoginRequest(BaseModel):
    user_id: UUID = Field(..., description="Account that received the code")
    code: str = Field(..., min_length=6, max_length=6, description="Emailed 6-digit code")


@router.post("/2fa/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def two_factor_login(
    request: TwoFactorLoginRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    device: DeviceInfo = Depends(get_device_info),
):
    """
    Second Login Step

    Raises:
        - 401 Unauthorized: Unknown, used or expired code
        - 403 Forbidden: Account disabled
    """
    use_case = TwoFactorLoginUseCase(uow, refresh_ttl=REFRESH_TTL)
    result = await use_case.execute(request.user_id, request.code, device)

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.INVALID_TWO_FACTOR_CODE:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == ErrorCode.ACCOUNT_DISABLED:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return _login_response(result.value, response)


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = Field(None, description="Refresh token (defaults to cookie)")


class RefreshResponse(BaseModel):
    access_token: str
    refresh_token: str
    session_id: str


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshResponse)
async def refresh(
    http_request: Request,
    response: Response,
    request: Optional[RefreshRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Refresh Access Token

    Rotates the refresh token. Only an active session can refresh.

    Raises:
        - 401 Unauthorized: Unknown token, revoked or expired session
    """
    refresh_token = (request.refresh_token if request else None) or http_request.cookies.get(
        REFRESH_TOKEN_COOKIE
    )
    if not refresh_token:
        raise ClientError(
            Error(ErrorCode.INVALID_REFRESH_TOKEN, "Refresh token is required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    use_case = RefreshTokenUseCase(uow, refresh_ttl=REFRESH_TTL)
    result = await use_case.execute(refresh_token)

    if result.is_err():
        error = result.error
        if error.code in (
            ErrorCode.INVALID_REFRESH_TOKEN,
            ErrorCode.SESSION_REVOKED,
            ErrorCode.SESSION_EXPIRED,
        ):
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    tokens = result.value
    set_auth_cookies(response, tokens.access_token, tokens.refresh_token)
    return RefreshResponse(**tokens.model_dump())


class MessageResponse(BaseModel):
    message: str


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    response: Response,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Ends the calling session and clears auth cookies"""
    use_case = LogoutUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["user_id"]), UUID(current_user["session_id"])
    )

    if result.is_err():
        raise ServerError(result.error)

    clear_auth_cookies(response)
    return MessageResponse(message="Logged out successfully")


class RequestPasswordResetRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address")


@router.post(
    "/request-password-reset",
    status_code=status.HTTP_200_OK,
    response_model=RequestPasswordResetResponse,
)
async def request_password_reset(
    request: RequestPasswordResetRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Request Password Reset

    Always answers 200 with the same body, whether or not the email
    belongs to an account.
    """
    use_case = RequestPasswordResetUseCase(
        uow,
        email_service,
        reset_ttl=timedelta(minutes=ApplicationConfig.PASSWORD_RESET_TTL_MINUTES),
    )
    result = await use_case.execute(request.email)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., description="Password reset token from email")
    new_password: str = Field(..., description="New password, checked against the password policy")
    confirm_new_password: str = Field(..., description="New password, repeated")


@router.post("/reset-password", status_code=status.HTTP_200_OK, response_model=ForceLogoutResponse)
async def reset_password(
    request: ResetPasswordRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: PasswordHasher = Depends(get_password_hasher),
    alerts: SecurityAlertDispatcher = Depends(get_security_alerts),
):
    """
    Reset Password

    Consumes the reset token, replaces the password and revokes every
    session of the account.

    Raises:
        - 400 Bad Request: Invalid or expired reset token, passwords do not
          match, password rejected by policy
    """
    if request.new_password != request.confirm_new_password:
        raise ClientError(
            Error(ErrorCode.PASSWORD_MISMATCH, "Passwords do not match"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    orchestrator = SecurityOrchestrator(uow, hasher, alerts)
    result = await orchestrator.reset_password(request.token, request.new_password)

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.INVALID_PASSWORD:
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        _raise_token_error(error, "Invalid or expired reset token")

    clear_auth_cookies(response)
    return result.value


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., description="Email verification token")


@router.post("/verify-email", status_code=status.HTTP_200_OK, response_model=VerifyEmailResponse)
async def verify_email(request: VerifyEmailRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Email Verification

    Raises:
        - 400 Bad Request: Invalid, used or expired token
    """
    use_case = VerifyEmailUseCase(uow)
    result = await use_case.execute(request.token)

    if result.is_err():
        _raise_token_error(result.error, "Invalid or expired verification token")

    return result.value


class ResendVerificationRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address")


@router.post(
    "/resend-verification",
    status_code=status.HTTP_200_OK,
    response_model=ResendVerificationResponse,
)
async def resend_verification(
    request: ResendVerificationRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_service: EmailService = Depends(get_email_service),
):
    """Resend Verification Email (same answer for any address)"""
    use_case = ResendVerificationUseCase(
        uow,
        email_service,
        verification_ttl=timedelta(minutes=ApplicationConfig.EMAIL_VERIFICATION_TTL_MINUTES),
    )
    result = await use_case.execute(request.email)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


class ConfirmEmailChangeRequest(BaseModel):
    token: str = Field(..., description="Email change token from the new address")


@router.post(
    "/confirm-email-change",
    status_code=status.HTTP_200_OK,
    response_model=ConfirmEmailChangeResponse,
)
async def confirm_email_change(
    request: ConfirmEmailChangeRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    alerts: SecurityAlertDispatcher = Depends(get_security_alerts),
):
    """
    Confirm Email Change

    Raises:
        - 400 Bad Request: Invalid, used or expired token
        - 409 Conflict: Address taken since the change was requested
    """
    use_case = ConfirmEmailChangeUseCase(uow, alerts)
    result = await use_case.execute(request.token)

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.EMAIL_ALREADY_EXISTS:
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        _raise_token_error(error, "Invalid or expired email change token")

    return result.value
