"""Composition of per-room bills from meter readings and rates."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from dormbill.core import calculations
from dormbill.core.calculations import ZERO
from dormbill.core.rates import BillingConfig, RateOverrides, Rates, resolve_rates

WATER_ROLLBACK = "water_meter_rollback"
ELECTRIC_ROLLBACK = "electric_meter_rollback"


@dataclass(frozen=True)
class RoomRecord:
    """The parts of a room the calculations need."""

    room_id: UUID
    number: str
    price: Decimal
    last_water: int
    last_electric: int
    charge_common_area: bool = True
    overrides: RateOverrides = field(default_factory=RateOverrides)


@dataclass(frozen=True)
class MeterSubmission:
    """Current readings entered for a room; None means not read yet."""

    room_id: UUID
    water_current: int | None
    electric_current: int | None


@dataclass(frozen=True)
class CommonFees:
    """A room's share of the common-area cost, split by utility."""

    water: Decimal = ZERO
    electric: Decimal = ZERO
    internet: Decimal = ZERO
    trash: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.water + self.electric + self.internet + self.trash

    def scaled(self, factor: Decimal) -> CommonFees:
        return CommonFees(
            water=self.water * factor,
            electric=self.electric * factor,
            internet=self.internet * factor,
            trash=self.trash * factor,
        )


@dataclass(frozen=True)
class ComposedBill:
    """A computed bill; field names mirror the BillingEntry columns."""

    room_id: UUID
    room_number: str
    rent: Decimal
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
    flags: tuple[str, ...] = ()

    @property
    def water_usage(self) -> int:
        return calculations.calculate_usage(
            self.water_meter_current, self.water_meter_last
        )

    @property
    def electric_usage(self) -> int:
        return calculations.calculate_usage(
            self.electric_meter_current, self.electric_meter_last
        )

    @property
    def water_cost(self) -> Decimal:
        return calculations.calculate_cost(self.water_usage, self.water_rate)

    @property
    def electric_cost(self) -> Decimal:
        return calculations.calculate_cost(self.electric_usage, self.electric_rate)

    @property
    def common_total(self) -> Decimal:
        return (
            self.common_water_fee
            + self.common_electric_fee
            + self.common_internet_fee
            + self.common_trash_fee
        )

    def entry_fields(self) -> dict[str, object]:
        """Keyword arguments for creating the matching BillingEntry row."""
        return {
            "room_id": self.room_id,
            "rent": self.rent,
            "water_meter_last": self.water_meter_last,
            "water_meter_current": self.water_meter_current,
            "water_rate": self.water_rate,
            "electric_meter_last": self.electric_meter_last,
            "electric_meter_current": self.electric_meter_current,
            "electric_rate": self.electric_rate,
            "trash_fee": self.trash_fee,
            "internet_fee": self.internet_fee,
            "other_fees": self.other_fees,
            "common_water_fee": self.common_water_fee,
            "common_electric_fee": self.common_electric_fee,
            "common_internet_fee": self.common_internet_fee,
            "common_trash_fee": self.common_trash_fee,
            "total_amount": self.total_amount,
        }


@dataclass(frozen=True)
class SkippedRoom:
    room_id: UUID
    room_number: str
    reason: str


@dataclass
class BulkBillingResult:
    """Outcome of composing bills for a whole batch of rooms."""

    bills: list[ComposedBill] = field(default_factory=list)
    skipped: list[SkippedRoom] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def created(self) -> int:
        return len(self.bills)

    @property
    def completed_entries(self) -> list[ComposedBill]:
        return self.bills

    @property
    def grand_total(self) -> Decimal:
        return sum((bill.total_amount for bill in self.bills), ZERO)

    def summary(self) -> dict[str, object]:
        return {
            "created": self.created,
            "skipped": len(self.skipped),
            "errors": list(self.errors),
        }


def _rounded_fees(fees: CommonFees) -> CommonFees:
    return CommonFees(
        water=calculations.quantize_fee(fees.water),
        electric=calculations.quantize_fee(fees.electric),
        internet=calculations.quantize_fee(fees.internet),
        trash=calculations.quantize_fee(fees.trash),
    )


def compose_bill(
    room: RoomRecord,
    readings: MeterSubmission,
    rates: Rates,
    common: CommonFees | None = None,
) -> ComposedBill:
    """
    Builds the bill for one room.

    A missing reading is treated as unchanged from the last one. A reading
    below the last one is billed at zero usage and flagged on the result.

    Every component is rounded to the precision of its BillingEntry column
    before it is added up, so a stored bill still sums to its total.
    """
    common = _rounded_fees(common or CommonFees())
    rates = Rates(
        water_rate=calculations.quantize_fee(rates.water_rate),
        electric_rate=calculations.quantize_fee(rates.electric_rate),
        trash_fee=calculations.quantize_money(rates.trash_fee),
        internet_fee=calculations.quantize_money(rates.internet_fee),
        other_fees=calculations.quantize_money(rates.other_fees),
    )
    rent = calculations.quantize_money(room.price)
    water_current = (
        room.last_water if readings.water_current is None else readings.water_current
    )
    electric_current = (
        room.last_electric
        if readings.electric_current is None
        else readings.electric_current
    )

    flags: list[str] = []
    if calculations.is_rollback(water_current, room.last_water):
        flags.append(WATER_ROLLBACK)
    if calculations.is_rollback(electric_current, room.last_electric):
        flags.append(ELECTRIC_ROLLBACK)

    water_cost = calculations.calculate_cost(
        calculations.calculate_usage(water_current, room.last_water), rates.water_rate
    )
    electric_cost = calculations.calculate_cost(
        calculations.calculate_usage(electric_current, room.last_electric),
        rates.electric_rate,
    )
    total = (
        rent
        + water_cost
        + electric_cost
        + rates.trash_fee
        + rates.internet_fee
        + rates.other_fees
        + common.total
    )

    return ComposedBill(
        room_id=room.room_id,
        room_number=room.number,
        rent=rent,
        water_meter_last=room.last_water,
        water_meter_current=water_current,
        water_rate=rates.water_rate,
        electric_meter_last=room.last_electric,
        electric_meter_current=electric_current,
        electric_rate=rates.electric_rate,
        trash_fee=rates.trash_fee,
        internet_fee=rates.internet_fee,
        other_fees=rates.other_fees,
        common_water_fee=common.water,
        common_electric_fee=common.electric,
        common_internet_fee=common.internet,
        common_trash_fee=common.trash,
        total_amount=total,
        flags=tuple(flags),
    )


def compose_bulk(
    rooms: Iterable[RoomRecord],
    submissions: Iterable[MeterSubmission],
    config: BillingConfig,
    common_shares: Mapping[UUID, CommonFees] | None = None,
) -> BulkBillingResult:
    """
    Composes bills for every ready room of a batch.

    Rooms without both readings are skipped. Rooms whose reading went
    backwards are skipped and also listed in ``errors``. Submissions for
    unknown rooms are reported in ``errors`` only.
    """
    result = BulkBillingResult()
    rooms = list(rooms)
    known = {room.room_id for room in rooms}
    shares = common_shares or {}

    by_room: dict[UUID, MeterSubmission] = {}
    for submission in submissions:
        if submission.room_id not in known:
            result.errors.append(f"Room {submission.room_id} not found")
            continue
        by_room[submission.room_id] = submission

    for room in rooms:
        submission = by_room.get(room.room_id)
        if (
            submission is None
            or submission.water_current is None
            or submission.electric_current is None
        ):
            result.skipped.append(
                SkippedRoom(room.room_id, room.number, "missing meter reading")
            )
            continue

        if not calculations.is_ready_to_bill(
            submission.water_current,
            room.last_water,
            submission.electric_current,
            room.last_electric,
        ):
            reason = "invalid meter reading (current below last)"
            result.skipped.append(SkippedRoom(room.room_id, room.number, reason))
            result.errors.append(f"Room {room.number}: {reason}")
            continue

        rates = resolve_rates(config.rates, room.overrides)
        common = shares.get(room.room_id) if room.charge_common_area else None
        result.bills.append(compose_bill(room, submission, rates, common))

    return result
