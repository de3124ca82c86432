"""Sliding-window rate limiter shared by every branch of a crawl."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import Awaitable, Callable

from gdocs_source.config import DEFAULT_RATE_LIMIT_CALLS, DEFAULT_RATE_LIMIT_PERIOD


class RateLimiter:
    """Allow at most ``calls`` acquisitions in any window of ``period`` seconds.

    The first ``calls`` acquisitions in a window return immediately; later
    ones wait until the oldest grant leaves the window. One instance must be
    shared by all concurrent callers so that the total outbound rate stays
    bounded whatever the fan-out.
    """

    def __init__(
        self,
        calls: int = DEFAULT_RATE_LIMIT_CALLS,
        period: float = DEFAULT_RATE_LIMIT_PERIOD,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialise the limiter.

        Args:
            calls: Grants allowed per window.
            period: Window length in seconds.
            clock: Monotonic time source, in seconds.
            sleep: Coroutine used to wait; paired with ``clock`` in tests.
        """
        if calls < 1:
            raise ValueError(f"calls must be at least 1, got {calls}")
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.calls = calls
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._grants: deque[float] = deque()
        self._lock = asyncio.Lock()

    def _expire(self, now: float) -> None:
        while self._grants and now - self._grants[0] >= self.period:
            self._grants.popleft()

    async def acquire(self) -> float:
        """Wait for a free slot.

        Returns:
            Seconds from the call until the slot was granted, including time
            queued behind other waiting callers; 0.0 when a slot was free.
        """
        start = self._clock()
        async with self._lock:
            now = self._clock()
            self._expire(now)
            while len(self._grants) >= self.calls:
                await self._sleep(self._grants[0] + self.period - now)
                now = self._clock()
                self._expire(now)
            self._grants.append(now)
            return now - start
