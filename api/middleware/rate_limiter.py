"""
Guest Rate Limiting Middleware
==============================
Per-session limiter for unauthenticated calendar requests.

Features:
    - Applies to requests without an Authorization bearer header that
      carry a session_id query parameter
    - 20 requests per minute per session (APP_GUEST_REQUESTS_PER_MINUTE)
    - 429 Too Many Requests with Retry-After header
    - Redis backend when APP_REDIS_URL is set, in-memory otherwise
"""

from typing import Dict, Optional, Sequence, Tuple
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import redis.asyncio as aioredis
from redis.exceptions import RedisError
import time
import logging

logger = logging.getLogger(__name__)


class RateLimitConfig:
    """Guest rate limit defaults"""

    GUEST_PER_MINUTE = 20
    MINUTE_WINDOW = 60
    LIMITED_PATHS = ("/api/v1/calendar",)


class InMemoryRateLimiter:
    """
    Fixed-window counters kept in process memory.

    Not shared between workers; use Redis for that.
    """

    def __init__(self, clock=time.time):
        self.storage: Dict[str, Dict[str, float]] = {}
        self.clock = clock
        self.cleanup_interval = 300
        self.last_cleanup = clock()

    async def increment(self, key: str, window: int) -> Tuple[int, int]:
        """Increment counter for key; returns (count, seconds until reset)"""
        now = self.clock()

        if now - self.last_cleanup > self.cleanup_interval:
            self._cleanup(now)

        entry = self.storage.get(key)
        if entry is None or now > entry["expires_at"]:
            entry = {"count": 0, "expires_at": now + window}
            self.storage[key] = entry

        entry["count"] += 1
        return int(entry["count"]), max(0, int(entry["expires_at"] - now))

    def _cleanup(self, now: float):
        """Remove expired entries"""
        expired_keys = [key for key, entry in self.storage.items() if now > entry["expires_at"]]
        for key in expired_keys:
            del self.storage[key]
        self.last_cleanup = now
        logger.debug(f"In-memory rate limiter cleanup: removed {len(expired_keys)} expired entries")


class RedisRateLimiter:
    """Redis-backed fixed-window counters"""

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self.redis: Optional[aioredis.Redis] = None

    async def connect(self):
        self.redis = aioredis.from_url(
            self.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5
        )
        await self.redis.ping()
        logger.info("Connected to Redis for rate limiting")

    async def increment(self, key: str, window: int) -> Tuple[int, int]:
        if not self.redis:
            raise RuntimeError("Redis not connected")

        pipe = self.redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, window, nx=True)
        pipe.ttl(key)
        count, _, ttl = await pipe.execute()
        return int(count), max(0, int(ttl))


class GuestRateLimiterMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware for guest calendar access.

    Authenticated requests (Authorization: Bearer ...) and requests
    without a session_id are not limited.
    """

    def __init__(
        self,
        app,
        limit: int = RateLimitConfig.GUEST_PER_MINUTE,
        window: int = RateLimitConfig.MINUTE_WINDOW,
        paths: Sequence[str] = RateLimitConfig.LIMITED_PATHS,
        redis_url: Optional[str] = None,
        memory_limiter: Optional[InMemoryRateLimiter] = None,
    ):
        super().__init__(app)
        self.limit = limit
        self.window = window
        self.paths = tuple(paths)
        self.redis_url = redis_url
        self.redis_limiter: Optional[RedisRateLimiter] = None
        self.memory_limiter = memory_limiter or InMemoryRateLimiter()
        self.use_redis = False
        self._redis_checked = False

    async def _ensure_backend(self):
        """Connect to Redis once; stay in memory if it is unreachable"""
        if self._redis_checked:
            return
        self._redis_checked = True

        if not self.redis_url:
            logger.info("Guest rate limiter using in-memory backend")
            return

        self.redis_limiter = RedisRateLimiter(self.redis_url)
        try:
            await self.redis_limiter.connect()
            self.use_redis = True
        except (RedisError, OSError) as e:
            logger.warning(f"Redis connection failed, using in-memory backend: {e}")

    def _is_guest(self, request: Request) -> bool:
        auth_header = request.headers.get("Authorization") or ""
        return "Bearer" not in auth_header

    async def _increment(self, key: str) -> Tuple[int, int]:
        if self.use_redis and self.redis_limiter:
            try:
                return await self.redis_limiter.increment(key, self.window)
            except RedisError as e:
                logger.error(f"Redis rate limit check failed, using in-memory backend: {e}")
                self.use_redis = False
        return await self.memory_limiter.increment(key, self.window)

    async def dispatch(self, request: Request, call_next):
        """Process request with guest rate limiting"""
        if not request.url.path.startswith(self.paths):
            return await call_next(request)

        session_id = request.query_params.get("session_id")
        if not session_id or not self._is_guest(request):
            return await call_next(request)

        await self._ensure_backend()
        count, ttl = await self._increment(f"rl:guest:{session_id}")

        if count > self.limit:
            logger.info(f"Guest session {session_id} exceeded {self.limit} requests/minute")
            return self._rate_limit_response(ttl or self.window)

        return await call_next(request)

    def _rate_limit_response(self, retry_after: int) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={"error": "Rate limit exceeded. Please try again in a minute."},
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(self.limit),
                "X-RateLimit-Remaining": "0",
            }
        )
