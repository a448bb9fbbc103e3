"""Tests for app.core.rate_limiter module."""

import math

import pytest

from app.core.rate_limiter import RateLimiter


@pytest.fixture
def limiter(fake_clock, recording_sleep) -> RateLimiter:
    """Ten requests per minute with a one-second buffer."""
    return RateLimiter(
        requests_per_minute=10,
        safety_buffer=1.0,
        clock=fake_clock,
        sleep=recording_sleep,
    )


class TestRateLimiterInit:
    """Tests for RateLimiter construction."""

    def test_min_delay(self, limiter: RateLimiter) -> None:
        """min_delay = ceil(60000 / rpm) ms + buffer."""
        assert limiter.min_delay == 7.0

    def test_min_delay_rounds_milliseconds_up(self) -> None:
        """Fractional milliseconds are rounded up."""
        limiter = RateLimiter(requests_per_minute=7, safety_buffer=0.0)
        assert limiter.min_delay == pytest.approx(8.572)

    @pytest.mark.parametrize("rpm", [1, 7, 9, 10, 13, 60, 97])
    def test_min_delay_never_below_exact_spacing(self, rpm: int) -> None:
        """Spacing is at least 60/rpm seconds plus the buffer."""
        limiter = RateLimiter(requests_per_minute=rpm, safety_buffer=1.0)
        assert limiter.min_delay >= 60 / rpm + 1.0

    def test_rejects_non_positive_rate(self) -> None:
        """requests_per_minute must be positive."""
        with pytest.raises(ValueError):
            RateLimiter(requests_per_minute=0)


class TestRateLimiterWait:
    """Tests for wait_if_needed."""

    @pytest.mark.asyncio
    async def test_first_call_never_waits(self, limiter, recording_sleep) -> None:
        """The first call returns immediately."""
        waited = await limiter.wait_if_needed()

        assert waited == 0.0
        assert recording_sleep.calls == []

    @pytest.mark.asyncio
    async def test_waits_remaining_spacing(self, limiter, fake_clock, recording_sleep) -> None:
        """A call shortly after the previous one waits for the remainder."""
        await limiter.wait_if_needed()
        fake_clock.advance(2.0)

        waited = await limiter.wait_if_needed()

        assert waited == pytest.approx(5.0)
        assert recording_sleep.calls == [pytest.approx(5.0)]

    @pytest.mark.asyncio
    async def test_no_wait_after_enough_time(self, limiter, fake_clock, recording_sleep) -> None:
        """No wait once min_delay has elapsed."""
        await limiter.wait_if_needed()
        fake_clock.advance(7.5)

        assert await limiter.wait_if_needed() == 0.0
        assert recording_sleep.calls == []

    @pytest.mark.asyncio
    async def test_only_a_new_instance_starts_fresh(
        self, limiter, fake_clock, recording_sleep
    ) -> None:
        """Spacing state lives for the whole instance; a new limiter does not wait."""
        await limiter.wait_if_needed()
        fresh = RateLimiter(
            requests_per_minute=10, safety_buffer=1.0, clock=fake_clock, sleep=recording_sleep
        )

        assert not hasattr(limiter, "reset")
        assert await fresh.wait_if_needed() == 0.0
        assert await limiter.wait_if_needed() == pytest.approx(7.0)

    @pytest.mark.asyncio
    async def test_time_since_last_call(self, limiter, fake_clock) -> None:
        """time_since_last_call is infinite before the first call."""
        assert limiter.time_since_last_call() == math.inf

        await limiter.wait_if_needed()
        fake_clock.advance(3.0)

        assert limiter.time_since_last_call() == pytest.approx(3.0)
