"""Core business logic for meter and money calculations."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
CENT = Decimal("0.01")
# Precision of stored rates and common-area sub-fees
FEE_PLACE = Decimal("0.0001")


def calculate_usage(current_reading: int | None, last_reading: int) -> int:
    """
    Calculates the units consumed between two meter readings.

    Args:
        current_reading: This month's reading, or None if not read yet.
        last_reading: The reading carried over from the previous bill.

    Returns:
        The consumed units. Returns 0 when there is no current reading or
        when the current reading is lower than the last one (meter reset or
        typo); callers decide whether to flag or skip such rooms.
    """
    if current_reading is None:
        return 0
    if current_reading < last_reading:
        return 0
    return current_reading - last_reading


def is_rollback(current_reading: int | None, last_reading: int) -> bool:
    """True when a reading is present but lower than the last one."""
    return current_reading is not None and current_reading < last_reading


def is_ready_to_bill(
    water_current: int | None,
    water_last: int,
    electric_current: int | None,
    electric_last: int,
) -> bool:
    """A room can be billed in bulk only with both readings present and not rolled back."""
    if water_current is None or electric_current is None:
        return False
    return water_current >= water_last and electric_current >= electric_last


def calculate_cost(usage: int | Decimal, rate: Decimal) -> Decimal:
    """
    Calculates the monetary cost based on usage and a unit rate.

    Args:
        usage: The amount of resource consumed.
        rate: The monetary rate per unit of consumption.

    Returns:
        The calculated cost.
    """
    return Decimal(usage) * rate


def back_calculate_rate(total_cost: Decimal, usage: int | Decimal) -> Decimal:
    """Derives a unit rate from a paid total; zero usage gives a zero rate."""
    if usage <= 0:
        return ZERO
    return total_cost / Decimal(usage)


def average(values: list[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return sum(values, ZERO) / len(values)


def quantize_money(value: Decimal | int | str | None) -> Decimal:
    """Rounds an amount to satang, the precision of rent and fixed fees."""
    return Decimal(value or ZERO).quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_fee(value: Decimal | int | str | None) -> Decimal:
    """Rounds a rate or common-area sub-fee to the precision it is stored with."""
    return Decimal(value or ZERO).quantize(FEE_PLACE, rounding=ROUND_HALF_UP)
