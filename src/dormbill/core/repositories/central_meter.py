"""Repository for CentralMeterRecord model."""

from __future__ import annotations

from datetime import date

from dormbill.core.apportionment import CentralReading
from dormbill.core.dates import month_start
from dormbill.core.models import CentralMeterRecord
from dormbill.core.repositories.base import BaseRepository


def to_central_reading(record: CentralMeterRecord) -> CentralReading:
    return CentralReading(
        water_last=record.water_meter_last,
        water_current=record.water_meter_current,
        water_rate=record.water_rate_from_utility,
        electric_last=record.electric_meter_last,
        electric_current=record.electric_meter_current,
        electric_total_cost=record.electric_total_cost,
        internet_fee=record.internet_fee,
        trash_fee=record.trash_fee,
        maintenance_fee=record.maintenance_fee,
    )


class CentralMeterRepository(BaseRepository[CentralMeterRecord]):
    """CentralMeterRecord-specific repository operations."""

    def __init__(self) -> None:
        super().__init__(CentralMeterRecord)

    async def for_month(self, month: date) -> CentralMeterRecord | None:
        return await self.model.get_or_none(month=month_start(month))

    async def latest_before(self, month: date) -> CentralMeterRecord | None:
        """The most recent record of a month earlier than ``month``."""
        return (
            await self.model.filter(month__lt=month_start(month))
            .order_by("-month")
            .first()
        )

    async def recent(self, limit: int = 6) -> list[CentralMeterRecord]:
        return await self.model.all().order_by("-month").limit(limit)
