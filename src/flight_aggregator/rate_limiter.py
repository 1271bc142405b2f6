"""In-process token bucket rate limiter, one per source."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Token bucket bounding calls to one source.

    Sustains *refill_rate* calls per second with bursts of up to *capacity*.
    The refill-check-consume sequence runs under an :class:`asyncio.Lock`, so
    concurrent acquirers sharing a bucket are served one at a time and can
    never overdraw it.
    """

    def __init__(
        self,
        capacity: float,
        refill_rate: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if capacity < 1:
            msg = f"capacity must be at least 1, got {capacity}"
            raise ValueError(msg)
        if refill_rate <= 0:
            msg = f"refill_rate must be positive, got {refill_rate}"
            raise ValueError(msg)
        self._capacity = float(capacity)
        self._refill_rate = float(refill_rate)
        self._clock = clock
        self._sleep = sleep
        self._tokens = self._capacity
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    @property
    def capacity(self) -> float:
        return self._capacity

    @property
    def refill_rate(self) -> float:
        return self._refill_rate

    @property
    def tokens(self) -> float:
        """Current balance, as of the last refill."""
        return self._tokens

    async def acquire(self) -> None:
        """Wait until a token is available, then consume exactly one."""
        async with self._lock:
            self._refill()
            if self._tokens >= 1:
                self._tokens -= 1
                return

            wait = (1 - self._tokens) / self._refill_rate
            logger.debug("Rate limited, waiting %.3fs for a token", wait)
            await self._sleep(wait)
            self._refill()
            self._tokens = max(0.0, self._tokens - 1)

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(self._capacity, self._tokens + elapsed * self._refill_rate)
        self._last_refill = now
