"""Per-location collection with a freshness window, a rate budget and stale fallback."""
import logging
import threading
import time
from typing import Callable, Dict, Iterable, Optional

from rate_budget import RateBudget
from weather_data import GeoPoint, Reading
from weather_provider import RateLimitedNoDataError, WeatherProviderBase

FRESHNESS_WINDOW_SECONDS = 10.0

COLD_START = "cold_start"
CACHED = "cached"
STALE_FALLBACK = "stale_fallback"


class CachedCollector:
    """
    Wraps a weather provider with caching and rate limiting for one location.

    Every scrape calls sample(). A reading younger than the freshness window
    is returned without consulting the rate budget. Past the window the
    budget decides between a fresh upstream call and reusing the last
    reading, however old. Failed calls never discard the last reading.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        point: GeoPoint,
        api_key: str,
        budget: RateBudget,
        freshness_window: float = FRESHNESS_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize a collector.

        Args:
            provider: Weather provider to use
            point: Location to collect
            api_key: OpenWeather API key passed through to the provider
            budget: Rate budget owned by this collector
            freshness_window: Seconds a successful reading is served without
                consulting the budget
            clock: Monotonic time source
        """
        self.provider = provider
        self.point = point
        self.api_key = api_key
        self.budget = budget
        self.freshness_window = freshness_window
        self._clock = clock

        self._lock = threading.Lock()
        self._reading: Optional[Reading] = None
        self._fetched_at: Optional[float] = None
        self.state = COLD_START

    @property
    def location(self) -> str:
        return str(self.point)

    @property
    def last_reading(self) -> Optional[Reading]:
        return self._reading

    def sample(self) -> Reading:
        """
        Get the latest reading for this location.

        Returns:
            Reading: Fresh, cached or stale reading

        Raises:
            RateLimitedNoDataError: If the budget is exhausted before any success
            WeatherProviderError: If an admitted fetch fails
        """
        with self._lock:
            now = self._clock()

            if self._reading is not None:
                age = now - self._fetched_at
                if age < self.freshness_window:
                    logging.debug(f"{self.location}: using cached reading (age: {age:.1f}s)")
                    self.state = CACHED
                    return self._reading

            if not self.budget.admit():
                if self._reading is None:
                    logging.warning(f"{self.location}: rate limited before first successful fetch")
                    raise RateLimitedNoDataError()
                logging.info(f"{self.location}: rate limited, reusing last reading "
                             f"(age: {now - self._fetched_at:.1f}s)")
                self.state = STALE_FALLBACK
                return self._reading

            logging.info(f"{self.location}: under rate limit, calling provider")
            reading = self.provider.fetch_conditions(self.point, self.api_key)
            self._reading = reading
            self._fetched_at = now
            logging.info(f"{self.location}: {reading.temperature:.1f}°C, wind {reading.describe_wind()}")
            self.state = CACHED
            return reading


def build_collectors(
    points: Iterable[GeoPoint],
    provider: WeatherProviderBase,
    api_key: str,
    daily_limit: int,
    freshness_window: float = FRESHNESS_WINDOW_SECONDS,
    clock: Callable[[], float] = time.monotonic,
) -> Dict[str, CachedCollector]:
    """Map each location's identity to its own collector and rate budget."""
    collectors: Dict[str, CachedCollector] = {}
    for point in points:
        location = str(point)
        if location in collectors:
            logging.warning("Ignoring duplicate location %s", location)
            continue
        collectors[location] = CachedCollector(
            provider=provider,
            point=point,
            api_key=api_key,
            budget=RateBudget.from_daily_limit(daily_limit, clock=clock),
            freshness_window=freshness_window,
            clock=clock,
        )
    return collectors
