"""Pytest fixtures shared by the test suite."""

import pytest

from helpers import SleepRecorder
from govwatch.utils.rate_limiter import HostRateLimiter


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fake_clock():
    """Mutable monotonic clock: set fake_clock.now to move time."""

    class Clock:
        now = 1000.0

        def __call__(self) -> float:
            return self.now

    return Clock()


@pytest.fixture
def host_limiter(fake_clock, sleep_recorder) -> HostRateLimiter:
    return HostRateLimiter(max_requests_per_minute=3, clock=fake_clock, sleep=sleep_recorder)
