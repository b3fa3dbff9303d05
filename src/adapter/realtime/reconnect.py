"""
Reconnect Policy

Bounded exponential backoff with jitter for clients of the realtime channel.
After max_attempts consecutive failures the scheduler waits out a cooldown,
resets the counter and starts over.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconnectPolicy:
    """Reconnect timing configuration (seconds)"""

    max_attempts: int = 5
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 30.0
    jitter: float = 0.2
    cooldown: float = 30.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if not 0 <= self.jitter < 1:
            raise ValueError("jitter must be in [0, 1)")

    @classmethod
    def from_config(cls, config) -> "ReconnectPolicy":
        return cls(
            max_attempts=config.RECONNECT_MAX_ATTEMPTS,
            base_delay=config.RECONNECT_BASE_DELAY,
            max_delay=config.RECONNECT_MAX_DELAY,
            cooldown=config.RECONNECT_COOLDOWN,
        )

    def backoff(self, attempt: int, rng: Callable[[], float] = random.random) -> float:
        """
        Delay before the given attempt (1-based).

        Exponential growth capped at max_delay, then scaled by a random
        factor in [1 - jitter, 1 + jitter] and capped again.
        """
        if attempt <= 0:
            return 0.0

        delay = min(self.base_delay * (self.multiplier ** (attempt - 1)), self.max_delay)
        if self.jitter:
            delay *= 1 - self.jitter + 2 * self.jitter * rng()
        return min(max(delay, 0.0), self.max_delay)

    def exhausted(self, attempt: int) -> bool:
        return attempt > self.max_attempts


class ReconnectScheduler:
    """
    Keeps a connection alive by re-running ``connect``.

    ``connect`` opens the connection and returns when it closes normally;
    it raises when the connection cannot be established or drops with an
    error. A normal close resets the attempt counter.
    """

    def __init__(
        self,
        connect: Callable[[], Awaitable[None]],
        policy: Optional[ReconnectPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ):
        self.connect = connect
        self.policy = policy or ReconnectPolicy()
        self.sleep = sleep
        self.rng = rng
        self.attempt = 0

    async def run(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            try:
                await self.connect()
                self.attempt = 0
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("Realtime connection failed: %s", e)

            if stop.is_set():
                return

            self.attempt += 1
            if self.policy.exhausted(self.attempt):
                logger.warning(
                    "Giving up reconnecting for %.0fs after %d attempts",
                    self.policy.cooldown,
                    self.policy.max_attempts,
                )
                await self.sleep(self.policy.cooldown)
                self.attempt = 0
                continue

            await self.sleep(self.policy.backoff(self.attempt, self.rng))
