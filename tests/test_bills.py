"""Tests for bill composition."""

from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

import pytest

from dormbill.core.bills import (
    ELECTRIC_ROLLBACK,
    WATER_ROLLBACK,
    CommonFees,
    MeterSubmission,
    RoomRecord,
    compose_bill,
    compose_bulk,
)
from dormbill.core.rates import BillingConfig, RateOverrides, Rates

RATES = Rates(
    water_rate=Decimal("18"),
    electric_rate=Decimal("7"),
    trash_fee=Decimal("30"),
    internet_fee=Decimal("200"),
    other_fees=Decimal("15.5"),
)
CONFIG = BillingConfig(rates=RATES)


def make_room(number: str, last_water: int = 100, last_electric: int = 1000, **kwargs):
    return RoomRecord(
        room_id=uuid4(),
        number=number,
        price=Decimal("3000"),
        last_water=last_water,
        last_electric=last_electric,
        **kwargs,
    )


def test_compose_bill_total_is_sum_of_components():
    room = make_room("101")
    common = CommonFees(
        water=Decimal("12.5"),
        electric=Decimal("40"),
        internet=Decimal("3.3333"),
        trash=Decimal("1"),
    )
    bill = compose_bill(room, MeterSubmission(room.room_id, 150, 1100), RATES, common)

    assert bill.water_usage == 50
    assert bill.electric_usage == 100
    assert bill.water_cost == Decimal("900")
    assert bill.electric_cost == Decimal("700")
    components = (
        bill.rent
        + bill.water_usage * bill.water_rate
        + bill.electric_usage * bill.electric_rate
        + bill.trash_fee
        + bill.internet_fee
        + bill.other_fees
        + bill.common_water_fee
        + bill.common_electric_fee
        + bill.common_internet_fee
        + bill.common_trash_fee
    )
    assert abs(bill.total_amount - components) < Decimal("1e-6")
    assert bill.total_amount == Decimal("4902.3333")
    assert bill.flags == ()


def test_compose_bill_rollback_is_clamped_and_flagged():
    room = make_room("101", last_water=500, last_electric=1000)
    bill = compose_bill(room, MeterSubmission(room.room_id, 480, 990), RATES)

    assert bill.water_usage == 0
    assert bill.water_cost == 0
    assert bill.electric_usage == 0
    assert WATER_ROLLBACK in bill.flags
    assert ELECTRIC_ROLLBACK in bill.flags
    assert bill.total_amount == Decimal("3245.5")


def test_entry_fields_match_bill():
    room = make_room("101")
    bill = compose_bill(room, MeterSubmission(room.room_id, 150, 1100), RATES)
    fields = bill.entry_fields()
    assert fields["room_id"] == room.room_id
    assert fields["water_meter_current"] == 150
    assert fields["total_amount"] == bill.total_amount
    assert "flags" not in fields


def test_next_month_from_current_readings_has_zero_usage():
    room = make_room("101")
    first = compose_bill(room, MeterSubmission(room.room_id, 150, 1100), RATES)

    next_room = replace(
        room,
        last_water=first.water_meter_current,
        last_electric=first.electric_meter_current,
    )
    second = compose_bill(next_room, MeterSubmission(room.room_id, 150, 1100), RATES)

    assert second.water_usage == 0
    assert second.electric_usage == 0


def test_bulk_excludes_incomplete_entries():
    complete = make_room("101")
    incomplete = make_room("102")
    result = compose_bulk(
        [complete, incomplete],
        [
            MeterSubmission(complete.room_id, 150, 1100),
            MeterSubmission(incomplete.room_id, None, 1100),
        ],
        CONFIG,
    )

    assert [b.room_id for b in result.completed_entries] == [complete.room_id]
    assert result.grand_total == result.bills[0].total_amount
    assert result.summary() == {"created": 1, "skipped": 1, "errors": []}
    assert result.skipped[0].reason == "missing meter reading"


def test_bulk_skips_room_without_submission():
    room = make_room("101")
    result = compose_bulk([room], [], CONFIG)
    assert result.created == 0
    assert len(result.skipped) == 1
    assert result.grand_total == 0


def test_bulk_reports_rollback_as_skipped_and_error():
    room = make_room("101", last_water=500)
    result = compose_bulk([room], [MeterSubmission(room.room_id, 480, 1100)], CONFIG)

    assert result.created == 0
    assert len(result.skipped) == 1
    assert result.errors == ["Room 101: invalid meter reading (current below last)"]


def test_bulk_reports_unknown_room():
    room = make_room("101")
    stranger = uuid4()
    result = compose_bulk(
        [room],
        [
            MeterSubmission(room.room_id, 150, 1100),
            MeterSubmission(stranger, 10, 10),
        ],
        CONFIG,
    )
    assert result.created == 1
    assert result.errors == [f"Room {stranger} not found"]


def test_bulk_applies_room_overrides():
    room = make_room("101", overrides=RateOverrides(water_rate=Decimal("20")))
    result = compose_bulk([room], [MeterSubmission(room.room_id, 150, 1000)], CONFIG)
    bill = result.bills[0]
    assert bill.water_rate == Decimal("20")
    assert bill.water_cost == Decimal("1000")


def test_bulk_common_share_only_for_participating_rooms():
    sharing = make_room("101")
    exempt = make_room("102", charge_common_area=False)
    share = CommonFees(water=Decimal("25"), electric=Decimal("50"))
    result = compose_bulk(
        [sharing, exempt],
        [
            MeterSubmission(sharing.room_id, 100, 1000),
            MeterSubmission(exempt.room_id, 100, 1000),
        ],
        CONFIG,
        {sharing.room_id: share, exempt.room_id: share},
    )
    by_room = {bill.room_id: bill for bill in result.bills}

    assert by_room[sharing.room_id].common_total == Decimal("75")
    assert by_room[exempt.room_id].common_total == 0
    assert (
        by_room[sharing.room_id].total_amount - by_room[exempt.room_id].total_amount
        == Decimal("75")
    )


@pytest.mark.parametrize("water, electric", [(100, 1000), (101, 1000), (5000, 9000)])
def test_bulk_bill_totals_match_single_composition(water, electric):
    room = make_room("101")
    submission = MeterSubmission(room.room_id, water, electric)
    bulk = compose_bulk([room], [submission], CONFIG)
    assert bulk.bills[0] == compose_bill(room, submission, RATES)


def test_compose_bill_rounds_to_stored_precision():
    room = make_room("101")
    common = CommonFees(internet=Decimal("100") / 3, trash=Decimal("100") / 3)
    rates = replace(RATES, electric_rate=Decimal("7.123456"))

    bill = compose_bill(room, MeterSubmission(room.room_id, 100, 1003), rates, common)

    assert bill.common_internet_fee == Decimal("33.3333")
    assert bill.electric_rate == Decimal("7.1235")
    assert bill.total_amount == (
        bill.rent
        + bill.electric_usage * bill.electric_rate
        + bill.trash_fee
        + bill.internet_fee
        + bill.other_fees
        + bill.common_total
    )
