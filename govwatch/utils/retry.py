"""
Retry policy for outbound HTTP requests.

Handles transient failures with a fixed backoff schedule. The retry loop
itself is driven by tenacity; this module decides what is retryable and
how long to wait.

Responsibility: Classify retryable failures and provide the wait schedule
"""

from typing import Sequence

import httpx
from tenacity import RetryCallState

RETRY_DELAYS: tuple = (1.0, 2.0, 4.0)


class RetryableStatusError(Exception):
    """Raised internally for responses that should be retried (429 and 5xx)"""

    def __init__(self, response: httpx.Response):
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


def is_retryable_status(status_code: int) -> bool:
    """Retry on server errors (5xx) and rate limits (429)"""
    return status_code == 429 or status_code >= 500


def is_retryable_error(exception: BaseException) -> bool:
    """
    Determine if an exception should trigger a retry.

    Retryable conditions:
        - Timeouts and other transport errors
        - HTTP 5xx and HTTP 429 responses
    """
    if isinstance(exception, RetryableStatusError):
        return True

    if isinstance(exception, httpx.TransportError):
        return True

    if isinstance(exception, httpx.HTTPStatusError):
        return is_retryable_status(exception.response.status_code)

    return False


def fixed_schedule(delays: Sequence[float] = RETRY_DELAYS):
    """
    Build a tenacity wait callable that walks a fixed delay list.

    Attempt 1 failing waits delays[0], attempt 2 waits delays[1], and so on;
    the last delay repeats if more attempts are allowed than delays given.
    """
    schedule = tuple(delays) or (0.0,)

    def wait(retry_state: RetryCallState) -> float:
        index = min(retry_state.attempt_number - 1, len(schedule) - 1)
        return schedule[index]

    return wait
