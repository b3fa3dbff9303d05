"""
Credential Store

bcrypt password hashing. Async variants run on a worker thread so hashing
never blocks the event loop.
"""

import asyncio
import logging

import bcrypt
from libs.result import Error, Result, Return

from src.app.errors import ErrorCode

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    One-way, salted password hashing.

    Business Rules:
    - Every hash call uses a fresh salt (embedded in the output)
    - verify() never raises: a malformed or unsupported stored hash is a
      mismatch, not an unknown credential
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(rounds))

    def hash(self, plaintext: str) -> str:
        password_hash = bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(self.rounds))
        return password_hash.decode("utf-8")

    def verify(self, stored_hash: str, plaintext: str) -> bool:
        if not stored_hash or not stored_hash.startswith("$2"):
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), stored_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False

    async def hash_async(self, plaintext: str) -> str:
        return await asyncio.to_thread(self.hash, plaintext)

    async def verify_async(self, stored_hash: str, plaintext: str) -> bool:
        return await asyncio.to_thread(self.verify, stored_hash, plaintext)

    async def dummy_verify_async(self, plaintext: str) -> None:
        """Spend the same work as a real check when the account does not exist"""
        await asyncio.to_thread(self.verify, self._dummy_hash.decode("utf-8"), plaintext)


def validate_new_password(password: str) -> Result[None]:
    """Password complexity rules applied before hashing a new password"""
    if len(password) < 8:
        return Return.err(
            Error(ErrorCode.INVALID_PASSWORD, "Password must be at least 8 characters long")
        )
    if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        return Return.err(
            Error(ErrorCode.INVALID_PASSWORD, "Password must be at most 72 bytes long")
        )
    return Return.ok(None)
