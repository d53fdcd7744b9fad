"""Tests for core calculation functions."""

from decimal import Decimal

import pytest

from dormbill.core.calculations import (
    back_calculate_rate,
    calculate_cost,
    calculate_usage,
    is_ready_to_bill,
    is_rollback,
    quantize_money,
)


@pytest.mark.parametrize(
    "current, last, expected",
    [
        (150, 100, 50),
        (100, 100, 0),
        (480, 500, 0),
        (None, 100, 0),
        (0, 0, 0),
        (99999, 0, 99999),
    ],
)
def test_calculate_usage(current, last, expected):
    """Usage is the forward delta and never negative."""
    assert calculate_usage(current, last) == expected
    assert calculate_usage(current, last) >= 0


def test_water_scenario():
    usage = calculate_usage(150, 100)
    assert usage == 50
    assert calculate_cost(usage, Decimal("18")) == Decimal("900")


def test_rollback_scenario():
    usage = calculate_usage(480, 500)
    assert usage == 0
    assert calculate_cost(usage, Decimal("18")) == Decimal("0")
    assert is_rollback(480, 500)
    assert not is_rollback(None, 500)


@pytest.mark.parametrize(
    "usage, rate, expected",
    [
        (100, Decimal("10.5"), Decimal("1050")),
        (0, Decimal("10.5"), Decimal("0")),
        (100, Decimal("0"), Decimal("0")),
        (-150, Decimal("5"), Decimal("-750")),
    ],
)
def test_calculate_cost(usage, rate, expected):
    assert calculate_cost(usage, rate) == expected


@pytest.mark.parametrize(
    "cost, usage, expected",
    [
        (Decimal("4000"), 1000, Decimal("4")),
        (Decimal("4000"), 0, Decimal("0")),
        (Decimal("0"), 500, Decimal("0")),
    ],
)
def test_back_calculate_rate(cost, usage, expected):
    assert back_calculate_rate(cost, usage) == expected


@pytest.mark.parametrize(
    "water_current, electric_current, expected",
    [
        (150, 1100, True),
        (100, 1000, True),
        (None, 1100, False),
        (150, None, False),
        (90, 1100, False),
        (150, 999, False),
    ],
)
def test_is_ready_to_bill(water_current, electric_current, expected):
    assert is_ready_to_bill(water_current, 100, electric_current, 1000) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("33.333333"), Decimal("33.33")),
        (Decimal("0.005"), Decimal("0.01")),
        (None, Decimal("0.00")),
        (75, Decimal("75.00")),
    ],
)
def test_quantize_money(value, expected):
    assert quantize_money(value) == expected
