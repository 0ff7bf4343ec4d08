"""Token-bucket rate limiter shared by concurrent CLOB requests."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable


class TokenBucket:
    """Async token bucket: refill rate per second, max burst.

    One bucket is shared by every worker in a scan, so it bounds request cadence
    independently of how many requests are in flight.
    """

    def __init__(
        self,
        rate: float = 10.0,
        capacity: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        self.rate = rate
        self.capacity = capacity or max(1, int(rate * 2))
        self.tokens = float(self.capacity)
        self._clock = clock
        self.last = clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        self.tokens = min(self.capacity, self.tokens + (now - self.last) * self.rate)
        self.last = now

    def consume(self, n: int = 1) -> bool:
        """Consume n tokens. Return True if allowed, False if not enough."""
        self._refill()
        if self.tokens >= n:
            self.tokens -= n
            return True
        return False

    async def acquire(self, n: int = 1) -> None:
        """Wait until n tokens are available, then take them."""
        async with self._lock:
            while not self.consume(n):
                await asyncio.sleep((n - self.tokens) / self.rate)
