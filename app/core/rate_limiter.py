"""Minimum-spacing rate limiter for quota-limited APIs.

The speech-synthesis provider allows a fixed number of requests per minute.
A single sequential caller invokes ``wait_if_needed()`` before each request.
"""

import asyncio
import math
import time

from app.core.logging import get_logger
from app.core.types import Clock, SleepFunc

logger = get_logger(__name__)


class RateLimiter:
    """Enforce a minimum delay between consecutive calls.

    ``min_delay = ceil(60000 / requests_per_minute) ms + safety_buffer``, so the
    spacing is never shorter than the exact per-request interval.
    The first call never waits. Not safe for concurrent callers.

    Attributes:
        requests_per_minute: Provider ceiling
        min_delay: Minimum seconds between two calls

    Example:
        >>> limiter = RateLimiter(requests_per_minute=10, safety_buffer=1.0)
        >>> limiter.min_delay
        7.0
        >>> await limiter.wait_if_needed()  # returns immediately the first time
    """

    def __init__(
        self,
        requests_per_minute: int = 10,
        safety_buffer: float = 1.0,
        *,
        clock: Clock = time.monotonic,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize RateLimiter.

        Args:
            requests_per_minute: Maximum requests allowed per minute
            safety_buffer: Extra seconds added to the computed spacing
            clock: Monotonic clock returning seconds
            sleep: Awaitable sleep function

        Raises:
            ValueError: If requests_per_minute is not positive
        """
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")

        self.requests_per_minute = requests_per_minute
        self.min_delay = math.ceil(60_000 / requests_per_minute) / 1000 + safety_buffer
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None

        logger.info(
            "Rate limiter initialized",
            requests_per_minute=requests_per_minute,
            min_delay_seconds=self.min_delay,
            safety_buffer_seconds=safety_buffer,
        )

    async def wait_if_needed(self) -> float:
        """Block until the minimum spacing since the previous call has elapsed.

        Returns:
            Seconds actually waited (0.0 when no wait was needed)
        """
        waited = 0.0
        if self._last_call is not None:
            elapsed = self._clock() - self._last_call
            if elapsed < self.min_delay:
                waited = self.min_delay - elapsed
                logger.info(
                    "Rate limiting: waiting before next call",
                    wait_seconds=round(waited, 3),
                    since_last_call_seconds=round(elapsed, 3),
                )
                await self._sleep(waited)

        self._last_call = self._clock()
        return waited

    def time_since_last_call(self) -> float:
        """Seconds since the previous call (infinity before the first call)."""
        if self._last_call is None:
            return math.inf
        return self._clock() - self._last_call


__all__ = ["RateLimiter"]
