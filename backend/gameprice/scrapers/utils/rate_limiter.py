"""Request spacing for politeness towards the scraped shops."""

import asyncio
import time
from typing import Awaitable, Callable, Dict


class DomainThrottle:
    """Per-domain and global minimum spacing between request starts.

    Each acquire() reserves the earliest start slot that honours both the
    global request delay and the domain's delay, then waits for it. Slots
    are reserved under a lock, so concurrent workers never share one.
    """

    def __init__(
        self,
        request_delay: float = 0.0,
        domain_delay: float = 0.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize throttle.

        Args:
            request_delay: Seconds between any two request starts
            domain_delay: Seconds between two request starts on one domain
            sleep: Awaitable sleep, replaceable in tests
            clock: Monotonic clock in seconds
        """
        self.request_delay = max(0.0, request_delay)
        self.domain_delay = max(0.0, domain_delay)
        self._sleep = sleep
        self._clock = clock
        self._lock = asyncio.Lock()
        self._next_global = 0.0
        self._last_request: Dict[str, float] = {}
        self._next_available: Dict[str, float] = {}

    async def acquire(self, domain: str, min_interval: float = 0.0) -> float:
        """Wait until a request to domain may start.

        Args:
            domain: Domain about to be requested
            min_interval: Domain spacing floor from the site profile, seconds

        Returns:
            Seconds waited
        """
        async with self._lock:
            now = self._clock()
            start = max(now, self._next_global, self._next_available.get(domain, 0.0))
            self._next_global = start + self.request_delay
            self._next_available[domain] = start + max(self.domain_delay, min_interval)
            self._last_request[domain] = start

        wait = start - now
        if wait > 0:
            await self._sleep(wait)
        return wait

    def get_domain_status(self) -> Dict[str, Dict[str, float]]:
        """Seconds since the last request and until the next slot, per domain."""
        now = self._clock()
        return {
            domain: {
                "last_request_ago": round(now - last, 3),
                "next_available_in": round(max(0.0, self._next_available[domain] - now), 3),
            }
            for domain, last in self._last_request.items()
        }

    def reset(self) -> None:
        self._next_global = 0.0
        self._last_request.clear()
        self._next_available.clear()
