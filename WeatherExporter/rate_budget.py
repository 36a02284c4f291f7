"""Token bucket limiting upstream calls to a daily budget."""
import logging
import time
from typing import Callable

from weather_provider import ConfigurationError

SECONDS_PER_DAY = 86400


class RateBudget:
    """
    Token bucket with a capacity of one call.

    Tokens refill continuously at one per interval, so the budget is spread
    evenly across the day instead of resetting at midnight. The bucket starts
    full, which lets the first call through immediately.
    """

    capacity = 1.0

    def __init__(self, interval_seconds: float, clock: Callable[[], float] = time.monotonic):
        if interval_seconds <= 0:
            raise ConfigurationError(f"Invalid rate interval {interval_seconds}s")
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._tokens = self.capacity
        self._last_refill = clock()

    @classmethod
    def from_daily_limit(cls, daily_limit: int, clock: Callable[[], float] = time.monotonic) -> "RateBudget":
        if daily_limit <= 0:
            raise ConfigurationError(f"Daily call limit must be positive, got {daily_limit}")
        interval = SECONDS_PER_DAY / daily_limit
        logging.info("Allowing 1 call per %.1fs", interval)
        return cls(interval, clock=clock)

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(now - self._last_refill, 0.0)
        self._tokens = min(self.capacity, self._tokens + elapsed / self.interval_seconds)
        self._last_refill = now

    def admit(self) -> bool:
        """Consume a token if one is available. Never blocks."""
        self._refill()
        if self._tokens >= 1.0:
            self._tokens -= 1.0
            return True
        return False

    def __repr__(self):
        return f"RateBudget(interval_seconds={self.interval_seconds:.1f})"
