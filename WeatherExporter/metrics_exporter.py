"""Prometheus collector publishing the latest reading for each location."""
import logging
import math
from typing import Dict, Iterator, List, Optional

from prometheus_client import CollectorRegistry
from prometheus_client.core import GaugeMetricFamily

from weather_data import Reading
from weather_provider import WeatherProviderError
from weather_service import CachedCollector

NAMESPACE = "weather"

# (metric name, help text, Reading attribute)
GAUGES = (
    ("temperature_celsius", "Current local temperature, in °C", "temperature"),
    ("pressure_hpa", "Current local atmospheric pressure (hectopascals)", "pressure"),
    ("humidity", "Current local humidity", "humidity"),
    ("wind_speed_meters_per_sec", "Current local wind speed, in meters/sec", "wind_speed"),
    ("wind_direction_degrees", "Current local wind direction, in degrees from 0° (North)", "wind_direction"),
    ("cloud_cover_percent", "Current local cloud cover, in percent", "cloud_cover"),
)


def _families() -> List[GaugeMetricFamily]:
    return [
        GaugeMetricFamily(f"{NAMESPACE}_{name}", help_text, labels=["location"])
        for name, help_text, _ in GAUGES
    ]


class WeatherExporter:
    """
    Custom collector sampling every location once per scrape.

    A location whose sample fails reports NaN on all of its gauges so one
    bad location never fails the whole scrape.
    """

    def __init__(self, collectors: Dict[str, CachedCollector]):
        self.collectors = collectors

    def describe(self) -> List[GaugeMetricFamily]:
        # Lets registration skip collect(), which would call upstream.
        return _families()

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families = _families()
        for location, collector in self.collectors.items():
            reading = self._sample(location, collector)
            for family, (_, _, attribute) in zip(families, GAUGES):
                value = getattr(reading, attribute) if reading is not None else math.nan
                family.add_metric([location], value)
        yield from families

    @staticmethod
    def _sample(location: str, collector: CachedCollector) -> Optional[Reading]:
        try:
            return collector.sample()
        except WeatherProviderError as err:
            logging.warning("Collection failed for %s: %s", location, err)
            return None


def build_registry(collectors: Dict[str, CachedCollector]) -> CollectorRegistry:
    registry = CollectorRegistry()
    registry.register(WeatherExporter(collectors))
    return registry
