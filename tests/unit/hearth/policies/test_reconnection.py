"""
Tests for ExponentialReconnectionPolicy.
"""
from datetime import timedelta
from itertools import islice

import pytest

from hearth.policies import ExponentialReconnectionPolicy


def make_policy(min_ms=1000, max_ms=60000):
    return ExponentialReconnectionPolicy(
        min_delay=timedelta(milliseconds=min_ms),
        max_delay=timedelta(milliseconds=max_ms),
    )


class TestNextDelay:
    """Backoff arithmetic."""

    def test_doubles_from_min(self):
        """Test the delay doubles per attempt."""
        policy = make_policy()

        assert [policy.next_delay(n) for n in range(4)] == [
            timedelta(seconds=1),
            timedelta(seconds=2),
            timedelta(seconds=4),
            timedelta(seconds=8),
        ]

    def test_clamped_to_max(self):
        """Test the delay stops at the ceiling."""
        policy = make_policy()

        assert policy.next_delay(6) == timedelta(seconds=60)
        assert policy.next_delay(10_000) == timedelta(seconds=60)

    @pytest.mark.parametrize("min_ms,max_ms", [(1, 1), (1000, 60000), (250, 1000), (7, 10**9)])
    def test_monotonic_within_bounds(self, min_ms, max_ms):
        """Test delays never shrink and stay within [min, max]."""
        policy = make_policy(min_ms, max_ms)

        delays = [policy.next_delay(n) for n in range(80)]

        assert delays == sorted(delays)
        assert all(policy.min_delay <= d <= policy.max_delay for d in delays)

    def test_equal_bounds(self):
        """Test min == max gives a constant delay."""
        policy = make_policy(500, 500)

        assert {policy.next_delay(n) for n in range(10)} == {timedelta(milliseconds=500)}

    def test_negative_attempt_rejected(self):
        """Test negative attempts are refused."""
        with pytest.raises(ValueError):
            make_policy().next_delay(-1)


class TestConstruction:
    """Bound validation."""

    def test_min_above_max_rejected(self):
        """Test min greater than max is refused."""
        with pytest.raises(ValueError):
            make_policy(2000, 1000)

    def test_negative_min_rejected(self):
        """Test a negative floor is refused."""
        with pytest.raises(ValueError):
            ExponentialReconnectionPolicy(
                min_delay=timedelta(seconds=-1), max_delay=timedelta(seconds=1)
            )


class TestSchedule:
    """Schedules handed to the driver."""

    def test_schedule_in_seconds(self):
        """Test the schedule yields float seconds."""
        schedule = make_policy().new_schedule()

        assert list(islice(schedule, 8)) == [1.0, 2.0, 4.0, 8.0, 16.0, 32.0, 60.0, 60.0]

    def test_new_schedule_starts_from_min(self):
        """Test each chain starts over after a successful connection."""
        policy = make_policy()
        first = policy.new_schedule()
        list(islice(first, 5))

        assert next(policy.new_schedule()) == 1.0
