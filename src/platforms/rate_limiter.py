"""
Per-provider request pacing.

Each upstream provider gets its own RateLimiter. Callers that reach ``wait_for_next``
while another caller is waiting are serialized by a single lock, so consecutive requests
to one provider are always at least ``delay`` seconds apart.
"""
import asyncio
import time
from typing import Callable, Optional

from src.logger.logger import Logger


class RateLimiter:
    """Minimum-delay gate for one upstream provider."""

    def __init__(
        self,
        name: str,
        delay: float,
        logger: Optional[Logger] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if delay < 0:
            raise ValueError(f"Rate limit delay for {name} must be non-negative, got {delay}")
        self.name = name
        self.delay = float(delay)
        self.logger = logger
        self._clock = clock
        self._last_request_at: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def last_request_at(self) -> Optional[float]:
        return self._last_request_at

    def _elapsed(self) -> float:
        if self._last_request_at is None:
            return float("inf")
        return self._clock() - self._last_request_at

    def can_make_request(self) -> bool:
        """True when the configured delay has elapsed since the previous request."""
        return self._elapsed() >= self.delay

    def get_wait_time(self) -> float:
        """Seconds remaining until the next request is allowed (0 when allowed now)."""
        return max(0.0, self.delay - self._elapsed())

    async def wait_for_next(self) -> None:
        """Suspend until the delay has elapsed, then record now as the latest request."""
        async with self._lock:
            wait_time = self.get_wait_time()
            if wait_time > 0 and self.logger:
                self.logger.debug(f"{self.name} rate limiter: waiting {wait_time:.2f}s")
            # Event loop timers may fire marginally early
            while wait_time > 0:
                await asyncio.sleep(wait_time)
                wait_time = self.get_wait_time()
            self._last_request_at = self._clock()
