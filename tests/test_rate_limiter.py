import asyncio

import pytest

from govwatch.utils.rate_limiter import HostRateLimiter

URL = "https://www.austintexas.gov/council"


def test_requests_under_cap_do_not_wait(host_limiter, sleep_recorder) -> None:
    waits = asyncio.run(_acquire_times(host_limiter, 3))

    assert waits == [0.0, 0.0, 0.0]
    assert sleep_recorder.delays == []
    assert host_limiter.request_count(URL) == 3


def test_request_over_cap_waits_for_rest_of_window(host_limiter, fake_clock, sleep_recorder) -> None:
    async def scenario():
        await _acquire_times(host_limiter, 3)
        fake_clock.now += 15
        return await host_limiter.acquire(URL)

    waited = asyncio.run(scenario())

    assert waited == pytest.approx(45.0)
    assert sleep_recorder.delays == [pytest.approx(45.0)]
    # The waiting request opens a fresh window
    assert host_limiter.request_count(URL) == 1


def test_window_resets_after_a_minute(host_limiter, fake_clock, sleep_recorder) -> None:
    async def scenario():
        await _acquire_times(host_limiter, 3)
        fake_clock.now += 61
        return await host_limiter.acquire(URL)

    assert asyncio.run(scenario()) == 0.0
    assert sleep_recorder.delays == []
    assert host_limiter.request_count(URL) == 1


def test_hosts_are_limited_independently(host_limiter, sleep_recorder) -> None:
    async def scenario():
        await _acquire_times(host_limiter, 3)
        return await host_limiter.acquire("https://capitol.texas.gov/BillLookup")

    assert asyncio.run(scenario()) == 0.0
    assert sleep_recorder.delays == []


def test_cap_must_be_positive() -> None:
    with pytest.raises(ValueError):
        HostRateLimiter(max_requests_per_minute=0)


async def _acquire_times(limiter: HostRateLimiter, count: int) -> list:
    return [await limiter.acquire(URL) for _ in range(count)]
