"""
Token Issuer/Validator

Purpose-scoped, single-use, expiring tokens. Runs inside the caller's unit
of work so that consuming a token and the state change it authorizes commit
together or not at all.
"""

import hashlib
import secrets
from datetime import timedelta
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import OneTimeToken, TokenPurpose


def hash_token(raw_token: str) -> str:
    """SHA-256 hex digest used to store and look up tokens"""
    return hashlib.sha256(raw_token.encode()).hexdigest()


class OneTimeTokenService:
    """
    Issues and consumes one-time tokens.

    Business Rules:
    - Raw tokens carry 256 bits of entropy and are returned exactly once
    - Only the SHA-256 hash is persisted
    - A new token supersedes every outstanding token of the same purpose
      for the same user
    - Consumption is a conditional update; the loser of a race sees
      TOKEN_ALREADY_USED
    - Nothing is committed here; the caller commits
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def issue(self, purpose: TokenPurpose, user_id: UUID, ttl: timedelta) -> str:
        raw_token = secrets.token_urlsafe(32)
        await self._store(purpose, user_id, raw_token, ttl)
        return raw_token

    async def issue_code(self, purpose: TokenPurpose, user_id: UUID, ttl: timedelta) -> str:
        """Six-digit numeric variant for codes typed in by the user"""
        code = f"{secrets.randbelow(900000) + 100000}"
        await self._store(purpose, user_id, code, ttl)
        return code

    async def _store(
        self, purpose: TokenPurpose, user_id: UUID, raw_token: str, ttl: timedelta
    ) -> OneTimeToken:
        now = utcnow()
        await self.uow.one_time_tokens.invalidate_outstanding(user_id, purpose, now)
        token = OneTimeToken(
            user_id=user_id,
            purpose=purpose,
            token_hash=hash_token(raw_token),
            expires_at=now + ttl,
        )
        return await self.uow.one_time_tokens.create(token)

    async def consume(
        self,
        raw_token: str,
        purpose: TokenPurpose,
        user_id: Optional[UUID] = None,
    ) -> Result[OneTimeToken]:
        """
        Validate and mark a token as used.

        Args:
            raw_token: Token as delivered to the user
            purpose: Operation the caller is about to perform
            user_id: Restrict the lookup to one owner (short numeric codes)

        Returns:
            Result with the consumed token, or Error

        Errors:
            - TOKEN_NOT_FOUND: No token with this hash and purpose
            - TOKEN_ALREADY_USED: Token consumed or superseded earlier
            - TOKEN_EXPIRED: Token is past expires_at
        """
        token = await self.uow.one_time_tokens.get_by_hash(
            hash_token(raw_token), purpose, user_id
        )
        if token is None:
            return Return.err(Error(ErrorCode.TOKEN_NOT_FOUND, "Token not found"))

        if token.is_used:
            return Return.err(Error(ErrorCode.TOKEN_ALREADY_USED, "Token has already been used"))

        now = utcnow()
        if token.is_expired(now):
            return Return.err(Error(ErrorCode.TOKEN_EXPIRED, "Token has expired"))

        marked = await self.uow.one_time_tokens.mark_used(token.id, now)
        if not marked:
            return Return.err(Error(ErrorCode.TOKEN_ALREADY_USED, "Token has already been used"))

        token.used_at = now
        return Return.ok(token)
