"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass

from weather_provider import ConfigurationError

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE",
    "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW",
    "W", "WNW", "NW", "NNW",
)
COMPASS_SECTOR_DEGREES = 22.5


def compass_label(degrees: float) -> str:
    """
    Convert a wind direction to a 16-point compass label.

    Each sector spans 22.5 degrees starting at 0 (North), lower bound
    inclusive, upper bound exclusive. Anything outside [0, 360) is "unknown".
    """
    if not 0 <= degrees < 360:
        return "unknown"
    return COMPASS_POINTS[int(degrees // COMPASS_SECTOR_DEGREES)]


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair; its string form is the location identity."""
    lat: float
    lng: float

    def __post_init__(self):
        if not (-90 <= self.lat <= 90 and -180 <= self.lng <= 180):
            raise ConfigurationError(
                f"Out of range latitude or longitude {self.lat:f},{self.lng:f}"
            )

    def __str__(self) -> str:
        return f"{self.lat:f},{self.lng:f}"

    @classmethod
    def parse(cls, value: str) -> "GeoPoint":
        """Parse a "lat,lng" string."""
        parts = value.split(",")
        if len(parts) != 2:
            raise ConfigurationError(f"Unparseable location {value!r}")
        try:
            lat = float(parts[0].strip())
            lng = float(parts[1].strip())
        except ValueError as exc:
            raise ConfigurationError(f"Unparseable location {value!r}") from exc
        return cls(lat, lng)


@dataclass(frozen=True)
class Reading:
    """Normalized current conditions, independent of the upstream API version."""
    temperature: float  # °C
    pressure: float  # hPa, NaN when upstream omits it
    humidity: float  # percent
    wind_speed: float  # m/s
    wind_direction: float  # degrees from North
    cloud_cover: float  # percent

    @property
    def compass_direction(self) -> str:
        return compass_label(self.wind_direction)

    def describe_wind(self) -> str:
        return f"{self.compass_direction} at {self.wind_speed:.1f}m/s"
