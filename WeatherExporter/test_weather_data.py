"""Tests for weather_data module."""
import dataclasses
import math

import pytest

from weather_data import COMPASS_POINTS, GeoPoint, Reading, compass_label
from weather_provider import ConfigurationError


@pytest.mark.parametrize("degrees,expected", [
    (0, "N"),
    (22.4, "N"),
    (22.5, "NNE"),
    (22.6, "NNE"),
    (44.9, "NNE"),
    (45.1, "NE"),
    (180, "S"),
    (320, "NW"),
    (337.5, "NNW"),
    (359.99, "NNW"),
])
def test_compass_label(degrees, expected):
    assert compass_label(degrees) == expected


@pytest.mark.parametrize("degrees", [-0.1, 360, 400, math.nan])
def test_compass_label_out_of_range(degrees):
    assert compass_label(degrees) == "unknown"


def test_compass_label_sectors_are_contiguous():
    """Every sector starts exactly where the previous one ends."""
    for i, label in enumerate(COMPASS_POINTS):
        start = 22.5 * i
        assert compass_label(start) == label
        assert compass_label(start + 22.49) == label


def test_geopoint_string_form():
    assert str(GeoPoint(51.5, -0.12)) == "51.500000,-0.120000"


def test_geopoint_parse():
    point = GeoPoint.parse(" 37.39 , -122.08 ")
    assert point == GeoPoint(37.39, -122.08)


@pytest.mark.parametrize("value", ["37.39", "1,2,3", "north,west", ""])
def test_geopoint_parse_unparseable(value):
    with pytest.raises(ConfigurationError) as exc_info:
        GeoPoint.parse(value)
    assert "Unparseable location" in str(exc_info.value)


@pytest.mark.parametrize("value", ["91,0", "-90.5,0", "0,180.1", "0,-181"])
def test_geopoint_out_of_range(value):
    with pytest.raises(ConfigurationError) as exc_info:
        GeoPoint.parse(value)
    assert "Out of range" in str(exc_info.value)


def test_geopoint_bounds_are_inclusive():
    assert str(GeoPoint(-90, 180)) == "-90.000000,180.000000"


def test_reading_is_immutable():
    reading = Reading(
        temperature=20.0,
        pressure=1013.0,
        humidity=60.0,
        wind_speed=5.0,
        wind_direction=90.0,
        cloud_cover=10.0,
    )
    with pytest.raises(dataclasses.FrozenInstanceError):
        reading.temperature = 25.0


def test_reading_describe_wind():
    reading = Reading(
        temperature=20.0,
        pressure=1013.0,
        humidity=60.0,
        wind_speed=4.63,
        wind_direction=320.0,
        cloud_cover=75.0,
    )
    assert reading.compass_direction == "NW"
    assert reading.describe_wind() == "NW at 4.6m/s"
