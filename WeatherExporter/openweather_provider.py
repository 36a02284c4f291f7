"""OpenWeather API providers for the current-conditions and one-call APIs."""
import json
import logging
import math
import os
from abc import abstractmethod
from typing import Any, Dict

import requests

from weather_data import GeoPoint, Reading
from weather_provider import (
    DecodeError,
    NetworkError,
    UnsupportedAPIVersionError,
    WeatherProviderBase,
)

DEFAULT_ENDPOINT = "https://api.openweathermap.org"
ENDPOINT_ENV_VAR = "OPEN_WEATHER_ENDPOINT"
DEFAULT_TIMEOUT_SECONDS = 10.0


def openweather_endpoint() -> str:
    """Base URL for API calls; OPEN_WEATHER_ENDPOINT overrides the production host."""
    return os.getenv(ENDPOINT_ENV_VAR) or DEFAULT_ENDPOINT


def _load_object(payload: bytes) -> Dict[str, Any]:
    try:
        data = json.loads(payload)
    except (ValueError, TypeError) as exc:
        raise DecodeError(f"Failed to parse response: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError("Unexpected response shape: top level is not an object")
    return data


def _block(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    block = data.get(name)
    if not isinstance(block, dict):
        raise DecodeError(f"Response missing '{name}' block")
    return block


def _number(block: Dict[str, Any], key: str, field_name: str) -> float:
    value = block.get(key)
    # bool is an int subclass but never a valid measurement
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Invalid numeric value for {field_name}: {value!r}")
    try:
        return float(value)
    except OverflowError as exc:
        raise DecodeError(f"Numeric value out of range for {field_name}") from exc


def _optional_number(block: Dict[str, Any], key: str, field_name: str) -> float:
    if block.get(key) is None:
        return math.nan
    return _number(block, key, field_name)


def decode_current_conditions(payload: bytes) -> Reading:
    """Decode a 2.5 current weather response (top-level main/wind/clouds blocks)."""
    data = _load_object(payload)
    main = _block(data, "main")
    wind = _block(data, "wind")
    clouds = _block(data, "clouds")
    return Reading(
        temperature=_number(main, "temp", "main.temp"),
        pressure=_optional_number(main, "pressure", "main.pressure"),
        humidity=_number(main, "humidity", "main.humidity"),
        wind_speed=_number(wind, "speed", "wind.speed"),
        wind_direction=_number(wind, "deg", "wind.deg"),
        cloud_cover=_number(clouds, "all", "clouds.all"),
    )


def decode_one_call(payload: bytes) -> Reading:
    """Decode a 3.0 one-call response, where everything sits under "current"."""
    current = _block(_load_object(payload), "current")
    return Reading(
        temperature=_number(current, "temp", "current.temp"),
        pressure=_optional_number(current, "pressure", "current.pressure"),
        humidity=_number(current, "humidity", "current.humidity"),
        wind_speed=_number(current, "wind_speed", "current.wind_speed"),
        wind_direction=_number(current, "wind_deg", "current.wind_deg"),
        cloud_cover=_number(current, "clouds", "current.clouds"),
    )


class OpenWeatherProvider(WeatherProviderBase):
    """
    Shared request handling for the OpenWeather APIs.

    Subclasses name the path, the query parameters and the decoder for
    their response shape.
    """

    path = ""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        """
        Initialize OpenWeather provider.

        Args:
            timeout: HTTP request timeout in seconds, so a stalled upstream
                cannot hold a scrape forever
        """
        self.timeout = timeout

    @abstractmethod
    def build_params(self, point: GeoPoint, api_key: str) -> Dict[str, str]:
        """Query parameters for one request."""

    @abstractmethod
    def decode(self, payload: bytes) -> Reading:
        """Decode a response body in this API version's shape."""

    def fetch_conditions(self, point: GeoPoint, api_key: str) -> Reading:
        """
        Fetch current conditions with a single GET.

        Raises:
            NetworkError: If the request fails or returns a non-2xx status
            DecodeError: If the response body is malformed
        """
        url = openweather_endpoint() + self.path
        params = self.build_params(point, api_key)

        try:
            logging.info(f"Calling OpenWeather {self.api_version} API at {url} for {point}")
            response = requests.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error(f"Error calling OpenWeather: {e}")
            raise NetworkError(f"Network error: {e}") from e

        logging.debug(f"API response status: {response.status_code}")
        if not response.ok:
            logging.error(f"API request failed with status {response.status_code}")
            self._handle_error_response(response)

        try:
            reading = self.decode(response.content)
        except DecodeError as e:
            logging.error(f"Error decoding OpenWeather {self.api_version} response: {e}")
            raise

        logging.debug(f"Decoded reading for {point}: {reading}")
        return reading

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            raise NetworkError(f"HTTP {response.status_code}: {response.text[:200]}")

        if not isinstance(error_data, dict):
            raise NetworkError(f"HTTP {response.status_code}: {str(error_data)[:200]}")
        cod = error_data.get("cod", response.status_code)
        message = error_data.get("message", "Unknown error")
        raise NetworkError(f"OpenWeather API error {cod}: {message}")


class CurrentConditionsProvider(OpenWeatherProvider):
    """Current Weather API 2.5: https://openweathermap.org/current"""

    api_version = "2.5"
    path = "/data/2.5/weather"

    def build_params(self, point: GeoPoint, api_key: str) -> Dict[str, str]:
        return {
            "lat": f"{point.lat:f}",
            "lon": f"{point.lng:f}",
            "APPID": api_key,
            "units": "metric",
        }

    def decode(self, payload: bytes) -> Reading:
        return decode_current_conditions(payload)


class OneCallProvider(OpenWeatherProvider):
    """One Call API 3.0 (subscription): https://openweathermap.org/api/one-call-3"""

    api_version = "3.0"
    path = "/data/3.0/onecall"

    def build_params(self, point: GeoPoint, api_key: str) -> Dict[str, str]:
        return {
            "lat": f"{point.lat:f}",
            "lon": f"{point.lng:f}",
            "appid": api_key,
            "exclude": "minutely,daily,hourly,alerts",
            "units": "metric",
        }

    def decode(self, payload: bytes) -> Reading:
        return decode_one_call(payload)


PROVIDERS = {
    CurrentConditionsProvider.api_version: CurrentConditionsProvider,
    OneCallProvider.api_version: OneCallProvider,
}


def decode_conditions(api_version: str, payload: bytes) -> Reading:
    """Decode a payload in the wire shape of the given API version."""
    provider_class = PROVIDERS.get(api_version)
    if provider_class is None:
        raise UnsupportedAPIVersionError(api_version)
    return provider_class().decode(payload)


def create_provider(api_version: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> OpenWeatherProvider:
    provider_class = PROVIDERS.get(api_version)
    if provider_class is None:
        raise UnsupportedAPIVersionError(api_version)
    return provider_class(timeout=timeout)
