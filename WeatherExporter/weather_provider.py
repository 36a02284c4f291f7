"""Weather provider abstraction and the errors shared by the collection path."""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from weather_data import GeoPoint, Reading


class WeatherProviderBase(ABC):
    """Abstract base class for one upstream API version."""

    api_version = ""

    @abstractmethod
    def fetch_conditions(self, point: "GeoPoint", api_key: str) -> "Reading":
        """
        Fetch current conditions for a single location.

        Performs exactly one upstream request and never retries; call cadence
        belongs to the caller.

        Returns:
            Reading: Normalized current conditions

        Raises:
            NetworkError: If the request fails
            DecodeError: If the response body cannot be decoded
        """
        pass


class ConfigurationError(ValueError):
    """Invalid startup configuration; fatal before any collection happens."""
    pass


class UnsupportedAPIVersionError(ConfigurationError):
    """Raised for an API version selector with no provider."""

    def __init__(self, api_version):
        super().__init__(f"unsupported API version {api_version!r}")
        self.api_version = api_version


class WeatherProviderError(Exception):
    """Exception raised when current conditions cannot be produced."""
    pass


class NetworkError(WeatherProviderError):
    """The upstream request failed."""
    pass


class DecodeError(WeatherProviderError):
    """The upstream payload did not have the expected structure."""
    pass


class RateLimitedNoDataError(WeatherProviderError):
    """The rate budget denied a call and there is no earlier reading to reuse."""

    def __init__(self, message: str = "rate limited, no previous data available"):
        super().__init__(message)
