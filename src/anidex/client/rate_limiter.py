"""Minimum-spacing rate limiter shared by every outbound API request.

The Jikan API throttles aggressively, so all endpoints funnel through one
:class:`RateLimiter` per process scope. The limiter guarantees a floor on the
spacing between request *starts*: a slot is granted at least
``minimum_interval`` seconds after the previous grant, regardless of how
long the previous request took to complete.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_INTERVAL = 0.5


class RateLimiter:
    """Grants request slots no closer together than ``minimum_interval``.

    The read-compute-write of the last grant time happens under an
    :class:`asyncio.Lock`, and the slot is reserved before the caller sleeps.
    Concurrent callers therefore queue up behind each other in distinct
    slots while the event loop stays free for other work.

    Args:
        minimum_interval: Seconds between consecutive grants.
        clock: Monotonic clock returning seconds. Injectable for tests.
        sleep: Coroutine used to wait. Injectable for tests.

    Example::

        limiter = RateLimiter(minimum_interval=0.5)
        await limiter.await_slot()   # returns immediately
        await limiter.await_slot()   # returns ~0.5 s later
    """

    def __init__(
        self,
        minimum_interval: float = DEFAULT_MINIMUM_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if minimum_interval < 0:
            raise ValueError(f"minimum_interval must be >= 0, got: {minimum_interval}")
        self.minimum_interval = minimum_interval
        self.last_request_time: Optional[float] = None
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def await_slot(self) -> None:
        """Suspend the calling task until the next slot, then claim it."""
        async with self._lock:
            now = self._clock()
            wait = 0.0
            if self.last_request_time is not None:
                elapsed = now - self.last_request_time
                if elapsed < self.minimum_interval:
                    wait = self.minimum_interval - elapsed
            self.last_request_time = now + wait

        if wait > 0:
            logger.debug("Rate limiter delaying request by %.3fs", wait)
            await self._sleep(wait)
