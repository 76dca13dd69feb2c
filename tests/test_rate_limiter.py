"""Tests for the process-wide rate limiter."""

import asyncio
import pytest

from uptime_report.core.rate_limiter import RateLimiter


@pytest.mark.unit
class TestRateLimiter:
    """Test dispatch pacing."""

    async def test_first_acquire_does_not_wait(self, fake_clock):
        limiter = RateLimiter(interval=0.2, clock=fake_clock, sleep=fake_clock.sleep)

        granted = await limiter.acquire()

        assert granted == 1000.0
        assert fake_clock.sleeps == []
        assert limiter.granted == 1

    async def test_sequential_acquires_are_spaced(self, fake_clock):
        limiter = RateLimiter(interval=0.2, clock=fake_clock, sleep=fake_clock.sleep)

        times = [await limiter.acquire() for _ in range(5)]

        gaps = [b - a for a, b in zip(times, times[1:])]
        assert all(gap >= 0.2 - 1e-9 for gap in gaps)
        assert limiter.granted == 5

    async def test_no_wait_when_interval_already_elapsed(self, fake_clock):
        limiter = RateLimiter(interval=0.2, clock=fake_clock, sleep=fake_clock.sleep)

        await limiter.acquire()
        fake_clock.now += 1.0
        await limiter.acquire()

        assert fake_clock.sleeps == []

    async def test_concurrent_acquires_share_one_gate(self, fake_clock):
        """Ten callers at once are released one interval apart, not together."""
        limiter = RateLimiter(interval=0.2, clock=fake_clock, sleep=fake_clock.sleep)

        times = await asyncio.gather(*(limiter.acquire() for _ in range(10)))

        ordered = sorted(times)
        assert ordered[-1] - ordered[0] == pytest.approx(0.2 * 9)
        assert all(b - a >= 0.2 - 1e-9 for a, b in zip(ordered, ordered[1:]))

    async def test_zero_interval_never_sleeps(self, fake_clock):
        limiter = RateLimiter(interval=0, clock=fake_clock, sleep=fake_clock.sleep)

        for _ in range(3):
            await limiter.acquire()

        assert fake_clock.sleeps == []

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError):
            RateLimiter(interval=-1)


@pytest.mark.asyncio
async def test_real_clock_spacing():
    """Wall-clock gaps between granted slots never drop below the interval."""
    limiter = RateLimiter(interval=0.02)

    stamps = sorted(await asyncio.gather(*(limiter.acquire() for _ in range(6))))

    assert all(b - a >= 0.02 - 1e-9 for a, b in zip(stamps, stamps[1:]))
    assert stamps[-1] - stamps[0] >= 0.02 * 5 - 1e-9
