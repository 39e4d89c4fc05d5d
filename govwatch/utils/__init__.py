"""
Utilities package for Local Gov Watch.

This package contains reusable helpers for:
- Polite HTTP fetching (rate limiting, retries, robots.txt)
- HTML and text normalization
- Content hashing and deduplication
"""

from .rate_limiter import HostRateLimiter, get_host_rate_limiter
from .retry import RETRY_DELAYS, is_retryable_error, fixed_schedule
from .hash_utils import calculate_hash, compute_record_hash, short_hash
from .dedupe import dedupe_by_key
from .text import safe_text, normalize_date, parse_day, create_external_id, absolute_url
from .html import load_html, select_first_matching, first_text, find_link
from .http_client import PoliteFetcher

__all__ = [
    "HostRateLimiter",
    "get_host_rate_limiter",
    "RETRY_DELAYS",
    "is_retryable_error",
    "fixed_schedule",
    "calculate_hash",
    "compute_record_hash",
    "short_hash",
    "dedupe_by_key",
    "safe_text",
    "normalize_date",
    "parse_day",
    "create_external_id",
    "absolute_url",
    "load_html",
    "select_first_matching",
    "first_text",
    "find_link",
    "PoliteFetcher",
]
