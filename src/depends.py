from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.requests import HTTPConnection

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.cookies import ACCESS_TOKEN_COOKIE
from src.api.utils.jwt import verify_jwt
from src.app.services.credential_store import PasswordHasher
from src.app.services.email_service import EmailService
from src.app.services.notifier import RealtimeNotifier
from src.app.services.security_alerts import SecurityAlertDispatcher
from src.app.services.session_registry import DeviceInfo, SessionRegistry
from src.app.services.unit_of_work import UnitOfWork

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

password_hasher = PasswordHasher(rounds=ApplicationConfig.BCRYPT_ROUNDS)


@asynccontextmanager
async def open_unit_of_work():
    """Unit of work on a fresh session, for work outside a request"""
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_unit_of_work():
    async with open_unit_of_work() as uow:
        yield uow


def get_password_hasher() -> PasswordHasher:
    return password_hasher


def get_email_service(connection: HTTPConnection) -> EmailService:
    return connection.app.state.email_service


def get_notifier(connection: HTTPConnection) -> RealtimeNotifier:
    return connection.app.state.notifier


def get_security_alerts(
    email_service: EmailService = Depends(get_email_service),
    notifier: RealtimeNotifier = Depends(get_notifier),
) -> SecurityAlertDispatcher:
    return SecurityAlertDispatcher(email_service, notifier)


def get_device_info(connection: HTTPConnection) -> DeviceInfo:
    ip_address = connection.client.host if connection.client else None
    return DeviceInfo.from_headers(connection.headers.get("user-agent"), ip_address)


async def authenticate_access_token(token: Optional[str], uow: UnitOfWork) -> Optional[dict]:
    """
    Resolve an access token to the caller's identity.

    The token must verify and its session must still be active, so a
    revoked session is locked out before the token itself expires.

    Returns:
        dict with user_id, session_id and roles, or None
    """
    if not token:
        return None

    payload = verify_jwt(token)
    if payload is None:
        return None

    try:
        session_id = UUID(payload["sid"])
    except ValueError:
        return None

    async with uow:
        if not await SessionRegistry(uow).is_active(session_id):
            return None

    return {
        "user_id": payload["sub"],
        "session_id": payload["sid"],
        "roles": payload.get("roles", []),
    }


async def get_current_user(
    connection: HTTPConnection,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> dict:
    """
    Dependency to authenticate the caller from the access token.

    The token is read from the Authorization bearer header, falling back
    to the access_token cookie.

    Returns:
        dict containing user_id, session_id, roles

    Raises:
        HTTPException: 401 if token is missing, invalid, expired or its
        session has been revoked
    """
    token = credentials.credentials if credentials else connection.cookies.get(ACCESS_TOKEN_COOKIE)
    current_user = await authenticate_access_token(token, uow)

    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return current_user
