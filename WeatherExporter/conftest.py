"""Shared fixtures for the exporter tests."""
import os

import pytest

TESTDATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "testdata")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def load_testdata(name: str) -> bytes:
    with open(os.path.join(TESTDATA_DIR, name), "rb") as f:
        return f.read()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def weather_25_payload():
    return load_testdata("weather-2.5.json")


@pytest.fixture
def onecall_30_payload():
    return load_testdata("onecall-3.0.json")


@pytest.fixture(autouse=True)
def no_endpoint_override(monkeypatch):
    """Keep a developer's OPEN_WEATHER_ENDPOINT from leaking into tests."""
    monkeypatch.delenv("OPEN_WEATHER_ENDPOINT", raising=False)
