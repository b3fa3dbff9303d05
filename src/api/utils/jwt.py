from datetime import UTC, datetime, timedelta
from typing import List, Optional
from uuid import UUID

from jose import JWTError, jwt

from config import ApplicationConfig


def generate_jwt(user_id: UUID, session_id: UUID, roles: List[str]) -> str:
    """
    Generate JWT access token

    Args:
        user_id: User UUID
        session_id: RefreshSession the token belongs to
        roles: Account roles

    Returns:
        JWT token string (HS256, ACCESS_TOKEN_TTL_MINUTES expiry)
    """
    return create_access_token(
        str(user_id),
        str(session_id),
        roles,
        timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES),
    )


def create_access_token(
    user_id: str, session_id: str, roles: List[str], expires_delta: timedelta
) -> str:
    """
    Create JWT access token with custom expiry

    Args:
        user_id: User UUID as string
        session_id: Session UUID as string
        roles: Account roles
        expires_delta: Token expiration duration

    Returns:
        JWT token string
    """
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "sid": session_id,
        "roles": list(roles),
        "type": "access",
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(
        payload, ApplicationConfig.JWT_SECRET, algorithm=ApplicationConfig.JWT_ALGORITHM
    )


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(
            token, ApplicationConfig.JWT_SECRET, algorithms=[ApplicationConfig.JWT_ALGORITHM]
        )
    except JWTError:
        return None

    if payload.get("type") != "access" or "sub" not in payload or "sid" not in payload:
        return None
    return payload
