"""
API Middleware Package
======================
Middleware components for FastAPI application.
"""

from .rate_limiter import GuestRateLimiterMiddleware, RateLimitConfig, InMemoryRateLimiter

__all__ = ["GuestRateLimiterMiddleware", "RateLimitConfig", "InMemoryRateLimiter"]
