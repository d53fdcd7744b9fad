"""Apportionment of unmetered common-area utility costs across rooms."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, fields, replace
from decimal import Decimal
from uuid import UUID

from dormbill.core import calculations
from dormbill.core.bills import CommonFees
from dormbill.core.calculations import ZERO
from dormbill.core.models import CapMode, DistributionMode
from dormbill.core.rates import CommonAreaPolicy


@dataclass(frozen=True)
class CentralReading:
    """One month of the building's master meters and provider charges."""

    water_last: int
    water_current: int
    water_rate: Decimal  # provider's price per unit
    electric_last: int
    electric_current: int
    electric_total_cost: Decimal  # provider's bill; the rate is derived
    internet_fee: Decimal = ZERO
    trash_fee: Decimal = ZERO
    maintenance_fee: Decimal = ZERO

    @property
    def water_usage(self) -> int:
        return calculations.calculate_usage(self.water_current, self.water_last)

    @property
    def electric_usage(self) -> int:
        return calculations.calculate_usage(self.electric_current, self.electric_last)

    @property
    def water_total_cost(self) -> Decimal:
        return calculations.calculate_cost(self.water_usage, self.water_rate)

    @property
    def electric_rate(self) -> Decimal:
        return calculations.back_calculate_rate(
            self.electric_total_cost, self.electric_usage
        )


@dataclass(frozen=True)
class RoomUsage:
    """Metered usage of one room in the month being apportioned."""

    room_id: UUID
    water_usage: int
    electric_usage: int
    charge_common_area: bool = True


@dataclass(frozen=True)
class Apportionment:
    """Common-area usage and cost for a month and each room's share of it."""

    room_water_usage: int
    room_electric_usage: int
    common_water_usage: int  # negative when room meters over-report
    common_electric_usage: int
    common_water_cost: Decimal
    common_electric_cost: Decimal
    common_internet_cost: Decimal
    common_trash_cost: Decimal
    total_common_cost: Decimal
    eligible_room_count: int
    shares: dict[UUID, CommonFees] = field(default_factory=dict)

    @property
    def distributed(self) -> Decimal:
        return sum((share.total for share in self.shares.values()), ZERO)

    @property
    def owner_absorbed(self) -> Decimal:
        return self.total_common_cost - self.distributed


def apportion(
    central: CentralReading,
    room_usages: Iterable[RoomUsage],
    policy: CommonAreaPolicy,
) -> Apportionment:
    """
    Computes common-area usage and cost and splits it between rooms.

    Common usage is the central meter's usage minus the rooms' usage, per
    utility. Only its positive part is billable; a negative figure is
    reported unchanged so meter drift stays visible. Internet and trash
    charges of the central record are shared equally.

    Rooms take part when the policy is enabled and the room's
    ``charge_common_area`` flag is set. With no such room, nothing is
    distributed and the owner absorbs the whole cost.
    """
    usages = list(room_usages)
    room_water = sum(usage.water_usage for usage in usages)
    room_electric = sum(usage.electric_usage for usage in usages)

    common_water_usage = central.water_usage - room_water
    common_electric_usage = central.electric_usage - room_electric
    common_water_cost = calculations.calculate_cost(
        common_water_usage, central.water_rate
    )
    common_electric_cost = calculations.calculate_cost(
        common_electric_usage, central.electric_rate
    )

    pool = CommonFees(
        water=calculations.quantize_fee(max(ZERO, common_water_cost)),
        electric=calculations.quantize_fee(max(ZERO, common_electric_cost)),
        internet=calculations.quantize_fee(central.internet_fee),
        trash=calculations.quantize_fee(central.trash_fee),
    )
    eligible = [u for u in usages if u.charge_common_area] if policy.enabled else []

    shares: dict[UUID, CommonFees] = {}
    if eligible and pool.total > ZERO:
        shares = _distribute(pool, eligible, policy.distribution)
        shares = _apply_cap(shares, pool.total, policy)
        shares = _round_shares(shares)

    return Apportionment(
        room_water_usage=room_water,
        room_electric_usage=room_electric,
        common_water_usage=common_water_usage,
        common_electric_usage=common_electric_usage,
        common_water_cost=common_water_cost,
        common_electric_cost=common_electric_cost,
        common_internet_cost=central.internet_fee,
        common_trash_cost=central.trash_fee,
        total_common_cost=pool.total,
        eligible_room_count=len(eligible),
        shares=shares,
    )


def _split(
    amount: Decimal,
    eligible: list[RoomUsage],
    usage_of: Callable[[RoomUsage], int],
    mode: DistributionMode,
) -> dict[UUID, Decimal]:
    total_usage = sum(usage_of(u) for u in eligible)
    if mode is DistributionMode.PROPORTIONAL and total_usage > 0:
        return {u.room_id: amount * usage_of(u) / total_usage for u in eligible}
    # Equal split, also the fallback when nobody used anything
    count = len(eligible)
    return {u.room_id: amount / count for u in eligible}


def _distribute(
    pool: CommonFees, eligible: list[RoomUsage], mode: DistributionMode
) -> dict[UUID, CommonFees]:
    water = _split(pool.water, eligible, lambda u: u.water_usage, mode)
    electric = _split(pool.electric, eligible, lambda u: u.electric_usage, mode)
    internet = _split(pool.internet, eligible, lambda u: 0, DistributionMode.EQUAL)
    trash = _split(pool.trash, eligible, lambda u: 0, DistributionMode.EQUAL)
    return {
        u.room_id: CommonFees(
            water=water[u.room_id],
            electric=electric[u.room_id],
            internet=internet[u.room_id],
            trash=trash[u.room_id],
        )
        for u in eligible
    }


def _apply_cap(
    shares: dict[UUID, CommonFees], total: Decimal, policy: CommonAreaPolicy
) -> dict[UUID, CommonFees]:
    cap_value = max(ZERO, policy.cap_value)

    if policy.cap_mode is CapMode.PERCENTAGE:
        allowed = total * cap_value / 100
        distributed = sum((share.total for share in shares.values()), ZERO)
        if distributed <= allowed:
            return shares
        factor = allowed / distributed
        return {room_id: share.scaled(factor) for room_id, share in shares.items()}

    if policy.cap_mode is CapMode.FIXED:
        ceiling = cap_value / len(shares)
        return {
            room_id: (
                share.scaled(ceiling / share.total) if share.total > ceiling else share
            )
            for room_id, share in shares.items()
        }

    return shares


def _round_shares(shares: dict[UUID, CommonFees]) -> dict[UUID, CommonFees]:
    """
    Rounds every sub-fee to stored precision.

    The rounding remainder of each utility goes to the room with the largest
    share of it, so the rounded shares add up to the rounded total.
    """
    rounded = {
        room_id: CommonFees(
            **{
                f.name: calculations.quantize_fee(getattr(share, f.name))
                for f in fields(CommonFees)
            }
        )
        for room_id, share in shares.items()
    }
    for f in fields(CommonFees):
        exact = sum((getattr(share, f.name) for share in shares.values()), ZERO)
        target = calculations.quantize_fee(exact)
        remainder = target - sum(
            (getattr(share, f.name) for share in rounded.values()), ZERO
        )
        if remainder:
            room_id = max(rounded, key=lambda r: getattr(rounded[r], f.name))
            rounded[room_id] = replace(
                rounded[room_id],
                **{f.name: getattr(rounded[room_id], f.name) + remainder},
            )
    return rounded
