"""
Exponential reconnection backoff.
"""
from datetime import timedelta
from typing import Iterator

from cassandra.policies import ReconnectionPolicy

_MICROSECOND = timedelta(microseconds=1)


class ExponentialReconnectionPolicy(ReconnectionPolicy):
    """
    Doubling delay between reconnection attempts, clamped to [min, max].

    The driver calls ``new_schedule()`` each time a connection drops and
    walks that schedule until it reconnects. A successful connection ends
    the schedule, so the next drop starts again from ``min_delay``; no state
    is shared between connections.
    """

    def __init__(self, min_delay: timedelta, max_delay: timedelta):
        if min_delay < timedelta(0):
            raise ValueError(f"min_delay must not be negative, got {min_delay}")
        if min_delay > max_delay:
            raise ValueError(
                f"min_delay ({min_delay}) must not exceed max_delay ({max_delay})"
            )
        self.min_delay = min_delay
        self.max_delay = max_delay

    def next_delay(self, attempt: int) -> timedelta:
        """
        Delay before reconnection attempt number ``attempt`` (0-based).

        Returns ``min(max_delay, min_delay * 2**attempt)``, never below
        ``min_delay``.
        """
        if attempt < 0:
            raise ValueError(f"attempt must be non-negative, got {attempt}")

        # Integer microseconds; timedelta itself overflows long before the
        # exponent gets large.
        base = self.min_delay // _MICROSECOND
        ceiling = self.max_delay // _MICROSECOND
        if base == 0:
            return self.min_delay
        if attempt >= ceiling.bit_length():
            return self.max_delay
        return timedelta(microseconds=min(ceiling, base * 2 ** attempt))

    def new_schedule(self) -> Iterator[float]:
        """Yield delays in seconds for one reconnection chain."""
        attempt = 0
        while True:
            yield self.next_delay(attempt).total_seconds()
            attempt += 1
