"""
Per-host rate limiter using a fixed one-minute window.

Ensures respectful request rates against municipal servers, which are
often small and quick to block aggressive clients.

Responsibility: Throttle outbound requests per external host
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


@dataclass
class _HostWindow:
    count: int
    window_start: float


class HostRateLimiter:
    """
    Window-based rate limiter keyed by host.

    The first request to a host opens a window. Each further request in the
    window increments the count; once the count reaches the cap, the next
    request waits out the rest of the window and opens a fresh one.

    State lives in memory for the life of the process and is not locked:
    callers share a single event loop.

    Example:
        limiter = HostRateLimiter(max_requests_per_minute=10)
        await limiter.acquire("https://www.austintexas.gov/page")
    """

    def __init__(
        self,
        max_requests_per_minute: int = 10,
        window_seconds: float = WINDOW_SECONDS,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if max_requests_per_minute < 1:
            raise ValueError("max_requests_per_minute must be at least 1")

        self.max_requests_per_minute = max_requests_per_minute
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._hosts: Dict[str, _HostWindow] = {}

    @staticmethod
    def host_for(url: str) -> str:
        return urlparse(url).netloc.lower() or url

    async def acquire(self, url: str) -> float:
        """
        Wait until a request to the URL's host is allowed.

        Returns:
            Seconds spent waiting (0.0 when no wait was needed)
        """
        host = self.host_for(url)
        now = self._clock()
        state = self._hosts.get(host)

        if state is None or now - state.window_start >= self.window_seconds:
            self._hosts[host] = _HostWindow(count=1, window_start=now)
            return 0.0

        if state.count >= self.max_requests_per_minute:
            wait_time = self.window_seconds - (now - state.window_start)
            logger.info(f"Rate limit reached for {host}, waiting {wait_time:.1f}s")
            await self._sleep(wait_time)
            self._hosts[host] = _HostWindow(count=1, window_start=self._clock())
            return wait_time

        state.count += 1
        return 0.0

    def request_count(self, url: str) -> int:
        """Requests counted in the current window (for monitoring)"""
        state = self._hosts.get(self.host_for(url))
        return state.count if state else 0

    def reset(self) -> None:
        self._hosts.clear()


_shared_limiter: Optional[HostRateLimiter] = None


def get_host_rate_limiter(max_requests_per_minute: int = 10) -> HostRateLimiter:
    """Return the process-wide limiter, creating it on first use"""
    global _shared_limiter
    if _shared_limiter is None:
        _shared_limiter = HostRateLimiter(max_requests_per_minute=max_requests_per_minute)
    return _shared_limiter
