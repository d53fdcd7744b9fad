"""Monthly reconciliation of room revenue against the central meter's cost."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from dormbill.core import calculations
from dormbill.core.apportionment import CentralReading
from dormbill.core.calculations import ZERO


class BillLike(Protocol):
    """Anything shaped like a billing entry: ORM rows and composed bills both fit."""

    water_meter_last: int
    water_meter_current: int
    water_rate: Decimal
    electric_meter_last: int
    electric_meter_current: int
    electric_rate: Decimal
    trash_fee: Decimal
    internet_fee: Decimal
    other_fees: Decimal
    common_water_fee: Decimal
    common_electric_fee: Decimal
    common_internet_fee: Decimal
    common_trash_fee: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class UtilityBalance:
    """Revenue, cost and profit of one utility in one month."""

    central_usage: int
    room_usage: int
    common_usage: int
    average_rate: Decimal
    revenue: Decimal
    actual_cost: Decimal
    common_cost: Decimal

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.actual_cost

    @property
    def common_ratio(self) -> Decimal | None:
        """Common usage as a percentage of the central meter's usage."""
        if self.central_usage <= 0:
            return None
        return Decimal(self.common_usage) * 100 / self.central_usage


@dataclass(frozen=True)
class MonthlySummary:
    water: UtilityBalance
    electric: UtilityBalance
    bill_count: int

    @property
    def total_revenue(self) -> Decimal:
        return self.water.revenue + self.electric.revenue

    @property
    def total_cost(self) -> Decimal:
        return self.water.actual_cost + self.electric.actual_cost

    @property
    def total_profit(self) -> Decimal:
        return self.water.profit + self.electric.profit

    @property
    def owner_common_cost(self) -> Decimal:
        return self.water.common_cost + self.electric.common_cost

    @property
    def profit_margin(self) -> Decimal | None:
        if self.total_revenue == ZERO:
            return None
        return self.total_profit * 100 / self.total_revenue


@dataclass(frozen=True)
class IncomeBreakdown:
    """Collected income of a month split by bill component."""

    total: Decimal = ZERO
    rent: Decimal = ZERO
    water: Decimal = ZERO
    electric: Decimal = ZERO
    common: Decimal = ZERO
    trash: Decimal = ZERO
    internet: Decimal = ZERO
    other: Decimal = ZERO
    water_units: int = 0
    electric_units: int = 0


def _water_usage(bill: BillLike) -> int:
    return calculations.calculate_usage(bill.water_meter_current, bill.water_meter_last)


def _electric_usage(bill: BillLike) -> int:
    return calculations.calculate_usage(
        bill.electric_meter_current, bill.electric_meter_last
    )


def _common_total(bill: BillLike) -> Decimal:
    return (
        (bill.common_water_fee or ZERO)
        + (bill.common_electric_fee or ZERO)
        + (bill.common_internet_fee or ZERO)
        + (bill.common_trash_fee or ZERO)
    )


def reconcile(central: CentralReading, bills: Iterable[BillLike]) -> MonthlySummary:
    """
    Compares what rooms were billed for water and electricity with what the
    provider charged for the whole building.

    Revenue per utility is the rooms' total usage times the average rate
    across the month's bills, so rooms billed at different rates are
    averaged rather than summed individually.
    """
    bills = list(bills)

    room_water = sum(_water_usage(bill) for bill in bills)
    room_electric = sum(_electric_usage(bill) for bill in bills)
    avg_water_rate = calculations.average([bill.water_rate for bill in bills])
    avg_electric_rate = calculations.average([bill.electric_rate for bill in bills])

    common_water = central.water_usage - room_water
    common_electric = central.electric_usage - room_electric

    water = UtilityBalance(
        central_usage=central.water_usage,
        room_usage=room_water,
        common_usage=common_water,
        average_rate=avg_water_rate,
        revenue=calculations.calculate_cost(room_water, avg_water_rate),
        actual_cost=central.water_total_cost,
        common_cost=calculations.calculate_cost(common_water, central.water_rate),
    )
    electric = UtilityBalance(
        central_usage=central.electric_usage,
        room_usage=room_electric,
        common_usage=common_electric,
        average_rate=avg_electric_rate,
        revenue=calculations.calculate_cost(room_electric, avg_electric_rate),
        actual_cost=central.electric_total_cost,
        common_cost=calculations.calculate_cost(
            common_electric, central.electric_rate
        ),
    )
    return MonthlySummary(water=water, electric=electric, bill_count=len(bills))


def income_breakdown(bills: Iterable[BillLike]) -> IncomeBreakdown:
    """
    Splits the income of already-filtered bills into their components.

    Rent is derived as whatever remains of each total after the metered,
    common and fixed charges, so manual adjustments show up as rent.
    """
    total = rent = water = electric = common = trash = internet = other = ZERO
    water_units = electric_units = 0

    for bill in bills:
        water_usage = _water_usage(bill)
        electric_usage = _electric_usage(bill)
        water_cost = calculations.calculate_cost(water_usage, bill.water_rate)
        electric_cost = calculations.calculate_cost(electric_usage, bill.electric_rate)
        common_sum = _common_total(bill)
        fixed = (
            (bill.trash_fee or ZERO)
            + (bill.internet_fee or ZERO)
            + (bill.other_fees or ZERO)
        )

        total += bill.total_amount
        water += water_cost
        electric += electric_cost
        common += common_sum
        trash += bill.trash_fee or ZERO
        internet += bill.internet_fee or ZERO
        other += bill.other_fees or ZERO
        rent += bill.total_amount - (water_cost + electric_cost + common_sum + fixed)
        water_units += water_usage
        electric_units += electric_usage

    return IncomeBreakdown(
        total=total,
        rent=rent,
        water=water,
        electric=electric,
        common=common,
        trash=trash,
        internet=internet,
        other=other,
        water_units=water_units,
        electric_units=electric_units,
    )
