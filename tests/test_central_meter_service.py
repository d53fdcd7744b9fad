"""Tests for recording central meter readings."""

from datetime import date
from decimal import Decimal

import pytest

from dormbill.core.repositories.central_meter import (
    CentralMeterRepository,
    to_central_reading,
)
from dormbill.services.central_meter import CentralMeterError, CentralMeterService


@pytest.fixture
def service() -> CentralMeterService:
    return CentralMeterService(CentralMeterRepository())


async def record(service: CentralMeterService, month: date, water: int, electric: int, **kwargs):
    return await service.record_month(
        month,
        water_current=water,
        water_rate_from_utility=Decimal("5"),
        electric_current=electric,
        electric_total_cost=Decimal("4000"),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_first_record_requires_last_readings(service: CentralMeterService):
    with pytest.raises(CentralMeterError, match="first central meter record"):
        await record(service, date(2026, 1, 1), 1000, 5000)


@pytest.mark.asyncio
async def test_records_chain_last_readings(service: CentralMeterService):
    first = await record(
        service, date(2026, 1, 1), 1000, 5000, water_last=850, electric_last=4000
    )
    second = await record(service, date(2026, 2, 10), 1120, 6000)

    assert first.water_meter_last == 850
    assert second.month == date(2026, 2, 1)
    assert second.water_meter_last == 1000
    assert second.electric_meter_last == 5000

    reading = to_central_reading(second)
    assert reading.water_usage == 120
    assert reading.water_total_cost == Decimal("600")
    assert reading.electric_rate == Decimal("4")


@pytest.mark.asyncio
async def test_explicit_last_readings_win(service: CentralMeterService):
    await record(service, date(2026, 1, 1), 1000, 5000, water_last=0, electric_last=0)

    second = await record(service, date(2026, 2, 1), 1100, 5500, water_last=990)

    assert second.water_meter_last == 990
    assert second.electric_meter_last == 5000


@pytest.mark.asyncio
async def test_duplicate_month_is_refused(service: CentralMeterService):
    await record(service, date(2026, 1, 1), 1000, 5000, water_last=0, electric_last=0)

    with pytest.raises(CentralMeterError, match="already exists"):
        await record(service, date(2026, 1, 20), 1100, 5100)


@pytest.mark.asyncio
async def test_backwards_reading_is_stored_with_warning(
    service: CentralMeterService, caplog
):
    await record(service, date(2026, 1, 1), 1000, 5000, water_last=0, electric_last=0)

    second = await record(service, date(2026, 2, 1), 900, 5100)

    assert "went backwards" in caplog.text
    assert to_central_reading(second).water_usage == 0


@pytest.mark.asyncio
async def test_history_is_newest_first(service: CentralMeterService):
    await record(service, date(2026, 1, 1), 1000, 5000, water_last=0, electric_last=0)
    await record(service, date(2026, 2, 1), 1100, 5500)
    await record(service, date(2026, 3, 1), 1200, 6000)

    history = await service.history(limit=2)

    assert [r.month for r in history] == [date(2026, 3, 1), date(2026, 2, 1)]
