"""Tests for the daily call budget."""
import pytest

from rate_budget import RateBudget
from weather_provider import ConfigurationError


def test_interval_from_daily_limit(clock):
    assert RateBudget.from_daily_limit(1000, clock=clock).interval_seconds == pytest.approx(86.4)
    assert RateBudget.from_daily_limit(1, clock=clock).interval_seconds == 86400


def test_first_call_admitted_immediately(clock):
    budget = RateBudget(60, clock=clock)

    assert budget.admit() is True
    assert budget.admit() is False


def test_refills_after_interval(clock):
    budget = RateBudget(64, clock=clock)
    budget.admit()

    clock.advance(48)
    assert budget.admit() is False
    clock.advance(16)
    assert budget.admit() is True
    assert budget.admit() is False


def test_capacity_is_one(clock):
    """A long idle period never banks more than one call."""
    budget = RateBudget(60, clock=clock)
    budget.admit()

    clock.advance(600)
    assert budget.admit() is True
    assert budget.admit() is False


def test_refill_is_continuous(clock):
    """Denied checks do not reset progress toward the next token."""
    budget = RateBudget(64, clock=clock)
    budget.admit()

    for _ in range(3):
        clock.advance(16)
        assert budget.admit() is False
    clock.advance(16)
    assert budget.admit() is True


def test_ten_per_day_budget(clock):
    budget = RateBudget.from_daily_limit(10, clock=clock)

    admitted = sum(budget.admit() for _ in range(10))

    assert admitted == 1


@pytest.mark.parametrize("daily_limit", [0, -5])
def test_non_positive_daily_limit(daily_limit):
    with pytest.raises(ConfigurationError):
        RateBudget.from_daily_limit(daily_limit)


def test_non_positive_interval():
    with pytest.raises(ConfigurationError):
        RateBudget(0)
