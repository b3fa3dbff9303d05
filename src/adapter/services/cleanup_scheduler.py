"""
Cleanup Scheduler

Background task that runs ExpiredRowCleaner on a fixed interval for the
lifetime of the application.
"""

import asyncio
import logging
from typing import Optional

from src.app.services.cleanup import ExpiredRowCleaner

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """Periodic cleanup; a failed pass is logged and the next one still runs"""

    def __init__(self, cleaner: ExpiredRowCleaner, interval_seconds: float = 300.0):
        self.cleaner = cleaner
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _loop(self) -> None:
        while True:
            try:
                await self.cleaner.run_once()
            except Exception:
                logger.exception("Expired row cleanup failed")
            await asyncio.sleep(self.interval_seconds)
