"""Token bucket pacing."""

import asyncio

import pytest

from fullsetarb.ingestion.rate_limit import TokenBucket


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_burst_then_refill():
    clock = FakeClock()
    bucket = TokenBucket(rate=10.0, capacity=2, clock=clock)
    assert bucket.consume()
    assert bucket.consume()
    assert not bucket.consume()
    clock.now += 0.1
    assert bucket.consume()
    assert not bucket.consume()


def test_refill_capped_at_capacity():
    clock = FakeClock()
    bucket = TokenBucket(rate=10.0, capacity=3, clock=clock)
    clock.now += 60
    for _ in range(3):
        assert bucket.consume()
    assert not bucket.consume()


def test_default_capacity_is_two_seconds_of_rate():
    assert TokenBucket(rate=5.0).capacity == 10


def test_rate_must_be_positive():
    with pytest.raises(ValueError):
        TokenBucket(rate=0)


@pytest.mark.asyncio
async def test_acquire_waits_for_refill():
    bucket = TokenBucket(rate=50.0, capacity=1)
    loop = asyncio.get_running_loop()
    start = loop.time()
    await bucket.acquire()
    await bucket.acquire()
    await bucket.acquire()
    # two refills at 50/s
    assert loop.time() - start >= 0.03
