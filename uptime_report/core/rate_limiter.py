"""Process-wide pacing gate for outbound provider requests."""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from uptime_report.utils.logger import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Enforces a minimum spacing between successive dispatches.

    One instance is shared by every worker of the pool. The last dispatch
    timestamp is read and updated inside a single critical section, so at
    most one slot is granted per interval no matter which worker asks.
    """

    def __init__(
        self,
        interval: float = 0.2,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize rate limiter.

        Args:
            interval: Minimum seconds between two granted slots
            clock: Monotonic clock returning seconds
            sleep: Coroutine function used to wait
        """
        if interval < 0:
            raise ValueError("interval must be non-negative")

        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_dispatch: Optional[float] = None
        self.granted = 0
        self.total_wait = 0.0

    async def acquire(self) -> float:
        """
        Wait for a dispatch slot.

        Returns:
            float: Clock value at which the slot was granted
        """
        async with self._lock:
            now = self._clock()
            waited = 0.0

            if self._last_dispatch is not None:
                remaining = self._last_dispatch + self.interval - now
                # Timers can fire slightly early; re-check against the clock
                while remaining > 0:
                    await self._sleep(remaining)
                    waited += remaining
                    now = self._clock()
                    remaining = self._last_dispatch + self.interval - now

            self._last_dispatch = now
            self.granted += 1
            self.total_wait += waited

        if waited:
            logger.debug(
                "Rate limiter delayed dispatch",
                extra={"waited": round(waited, 4), "granted": self.granted}
            )

        return now
