"""Token bucket rate limiter tests (fake clock, no real sleeping)."""

from __future__ import annotations

import asyncio

import pytest

from flight_aggregator.rate_limiter import RateLimiter

from .conftest import FakeClock


def _limiter(clock: FakeClock, capacity: float = 3, rate: float = 2) -> RateLimiter:
    return RateLimiter(capacity, rate, clock=clock, sleep=clock.sleep)


async def test_burst_up_to_capacity_does_not_wait(clock: FakeClock):
    limiter = _limiter(clock)
    for _ in range(3):
        await limiter.acquire()
    assert clock.sleeps == []
    assert limiter.tokens == pytest.approx(0.0)


async def test_waits_for_shortfall_once_bucket_is_empty(clock: FakeClock):
    limiter = _limiter(clock)
    for _ in range(3):
        await limiter.acquire()

    await limiter.acquire()

    # one token at 2 tokens/s
    assert clock.sleeps == [pytest.approx(0.5)]
    assert limiter.tokens >= 0


async def test_partial_refill_shortens_wait(clock: FakeClock):
    limiter = _limiter(clock)
    for _ in range(3):
        await limiter.acquire()
    clock.advance(0.25)  # half a token banked

    await limiter.acquire()

    assert clock.sleeps == [pytest.approx(0.25)]


async def test_idle_time_never_banks_more_than_capacity(clock: FakeClock):
    limiter = _limiter(clock)
    clock.advance(3600)

    for _ in range(3):
        await limiter.acquire()
    assert clock.sleeps == []

    await limiter.acquire()
    assert len(clock.sleeps) == 1


async def test_sequential_burst_respects_rate_bound(clock: FakeClock):
    limiter = _limiter(clock, capacity=3, rate=2)
    start = clock()

    for _ in range(10):
        await limiter.acquire()
        assert limiter.tokens >= 0

    elapsed = clock() - start
    assert 10 <= 3 + 2 * elapsed + 1e-9
    assert elapsed == pytest.approx(3.5)


async def test_concurrent_acquirers_never_overdraw(clock: FakeClock):
    limiter = _limiter(clock, capacity=2, rate=4)
    start = clock()
    observed: list[float] = []

    async def _acquire() -> None:
        await limiter.acquire()
        observed.append(limiter.tokens)

    await asyncio.gather(*(_acquire() for _ in range(10)))

    elapsed = clock() - start
    assert all(tokens >= 0 for tokens in observed)
    # 2 from the burst, 8 more at 4/s
    assert elapsed == pytest.approx(2.0)
    assert 10 <= 2 + 4 * elapsed + 1e-9


@pytest.mark.parametrize(("capacity", "rate"), [(0, 1), (1, 0), (1, -1)])
def test_rejects_invalid_configuration(capacity: float, rate: float):
    with pytest.raises(ValueError):
        RateLimiter(capacity, rate)
