"""
Expired Row Cleanup

Removes dead one-time tokens and deactivates refresh sessions that ran past
their expiry, so neither table grows without bound.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import AsyncContextManager, Callable, Optional

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanupStats:
    purged_tokens: int
    expired_sessions: int


class ExpiredRowCleaner:
    """
    One cleanup pass over security rows.

    Business Rules:
    - Tokens used or expired more than ``retention`` ago are deleted
    - Active sessions past expires_at are deactivated, never deleted
    - Each pass runs and commits in its own unit of work
    """

    def __init__(
        self,
        open_unit_of_work: Callable[[], AsyncContextManager[UnitOfWork]],
        retention: timedelta = timedelta(hours=24),
    ):
        self.open_unit_of_work = open_unit_of_work
        self.retention = retention

    async def run_once(self, now: Optional[datetime] = None) -> CleanupStats:
        now = now or utcnow()

        async with self.open_unit_of_work() as uow:
            async with uow:
                purged = await uow.one_time_tokens.purge_expired(now - self.retention)
                expired = await uow.sessions.deactivate_expired(now)
                await uow.commit()

        if purged or expired:
            logger.info(
                "Expired row cleanup finished",
                extra={"purged_tokens": purged, "expired_sessions": expired},
            )
        return CleanupStats(purged_tokens=purged, expired_sessions=expired)
