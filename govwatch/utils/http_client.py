"""
Polite HTTP fetcher for government websites.

Wraps httpx.AsyncClient with a custom user agent, per-host rate limiting,
robots.txt checks, and a tenacity-driven retry loop with a fixed backoff
schedule.

Responsibility: Single entry point for all outbound scraping requests
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt

from ..config import FetchConfig, settings
from ..exceptions import FetchError, RobotsDisallowedError
from .rate_limiter import HostRateLimiter, get_host_rate_limiter
from .retry import RetryableStatusError, fixed_schedule, is_retryable_error, is_retryable_status
from .robots import RobotsCache, get_robots_cache

logger = logging.getLogger(__name__)


class PoliteFetcher:
    """
    Rate-limited, retrying, robots-aware HTTP client.

    Retries HTTP 429, HTTP 5xx and transport errors with the configured
    delays (1s, 2s, 4s by default). Other 4xx responses are returned
    unchanged. When retries run out a FetchError is raised.

    Example:
        async with PoliteFetcher() as fetcher:
            response = await fetcher.fetch("https://www.austintexas.gov/")
    """

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        rate_limiter: Optional[HostRateLimiter] = None,
        robots: Optional[RobotsCache] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.config = config or settings.fetch
        self._client = client
        self._owns_client = client is None
        self.rate_limiter = rate_limiter or get_host_rate_limiter(self.config.max_requests_per_minute)
        self.robots = robots or get_robots_cache()
        self._sleep = sleep or asyncio.sleep
        self.requests_made = 0

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PoliteFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _build_headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        merged = {"User-Agent": self.config.user_agent}
        if headers:
            merged.update(headers)
        return merged

    async def _send_once(
        self,
        url: str,
        method: str,
        headers: Dict[str, str],
        timeout: float,
    ) -> httpx.Response:
        await self.rate_limiter.acquire(url)
        self.requests_made += 1
        response = await self.client.request(method, url, headers=headers, timeout=timeout)
        if is_retryable_status(response.status_code):
            raise RetryableStatusError(response)
        return response

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
    ) -> httpx.Response:
        """
        Fetch a URL politely.

        Args:
            url: Absolute URL to request
            method: HTTP method (GET or HEAD in practice)
            headers: Extra headers; override the default user agent if given
            timeout: Per-request timeout in seconds
            retries: Retries after the first attempt

        Returns:
            The response (2xx, 3xx or a non-retryable 4xx)

        Raises:
            RobotsDisallowedError: robots.txt forbids the URL
            FetchError: all attempts failed
        """
        merged_headers = self._build_headers(headers)
        request_timeout = timeout if timeout is not None else self.config.timeout_seconds
        max_retries = self.config.max_retries if retries is None else retries

        if self.config.respect_robots_txt:
            allowed = await self.robots.allowed(url, self.client, merged_headers["User-Agent"])
            if not allowed:
                raise RobotsDisallowedError(url)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_retries + 1),
            wait=fixed_schedule(self.config.retry_delays),
            retry=retry_if_exception(is_retryable_error),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await self._send_once(url, method, merged_headers, request_timeout)
        except RetryableStatusError as e:
            logger.error(f"Giving up on {url} after {max_retries + 1} attempts: {e}")
            raise FetchError(url, str(e), last_exception=e) from e
        except httpx.HTTPError as e:
            logger.error(f"Giving up on {url}: {e}")
            raise FetchError(url, f"{type(e).__name__}: {e}", last_exception=e) from e

    async def get_text(self, url: str, **kwargs) -> str:
        """GET a page and return its body, raising FetchError on 4xx"""
        response = await self.fetch(url, **kwargs)
        if response.status_code >= 400:
            raise FetchError(url, f"HTTP {response.status_code}")
        return response.text

    async def get_bytes(self, url: str, **kwargs) -> bytes:
        response = await self.fetch(url, **kwargs)
        if response.status_code >= 400:
            raise FetchError(url, f"HTTP {response.status_code}")
        return response.content

    @staticmethod
    def _log_retry(retry_state) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"Attempt {retry_state.attempt_number} failed: {exception}. "
            f"Retrying in {retry_state.next_action.sleep:.1f}s..."
        )
