"""Service for recording the building's central meter each month."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from dormbill.core.dates import month_start
from dormbill.core.models import CentralMeterRecord
from dormbill.core.repositories.central_meter import CentralMeterRepository

logger = logging.getLogger(__name__)


class CentralMeterError(Exception):
    """Raised when a central meter record cannot be created."""


class CentralMeterService:
    """Creates monthly central meter records, chaining last readings."""

    def __init__(self, central_repo: CentralMeterRepository):
        self._central_repo = central_repo

    async def record_month(
        self,
        month: date,
        *,
        water_current: int,
        water_rate_from_utility: Decimal,
        electric_current: int,
        electric_total_cost: Decimal,
        water_last: int | None = None,
        electric_last: int | None = None,
        maintenance_fee: Decimal = Decimal("0"),
        internet_fee: Decimal = Decimal("0"),
        trash_fee: Decimal = Decimal("0"),
        note: str | None = None,
    ) -> CentralMeterRecord:
        """
        Records one month of central meter readings.

        The "last" readings are inherited from the latest earlier record.
        Only the very first record needs them entered by hand; explicit
        values always win. Records are never edited, so a second record for
        the same month is refused.
        """
        month = month_start(month)
        if await self._central_repo.for_month(month):
            raise CentralMeterError(f"Record for {month:%Y-%m} already exists.")

        previous = await self._central_repo.latest_before(month)
        if previous is None and (water_last is None or electric_last is None):
            raise CentralMeterError(
                "The first central meter record needs last water and electric readings."
            )
        if water_last is None:
            water_last = previous.water_meter_current
        if electric_last is None:
            electric_last = previous.electric_meter_current

        if water_current < water_last or electric_current < electric_last:
            logger.warning(
                f"Central meter for {month:%Y-%m} went backwards "
                f"(water {water_last}->{water_current}, "
                f"electric {electric_last}->{electric_current}); usage counts as 0."
            )

        record = await self._central_repo.create(
            month=month,
            water_meter_last=water_last,
            water_meter_current=water_current,
            water_rate_from_utility=water_rate_from_utility,
            electric_meter_last=electric_last,
            electric_meter_current=electric_current,
            electric_total_cost=electric_total_cost,
            maintenance_fee=maintenance_fee,
            internet_fee=internet_fee,
            trash_fee=trash_fee,
            note=note,
        )
        logger.info(f"Central meter recorded for {month:%Y-%m}.")
        return record

    async def history(self, limit: int = 6) -> list[CentralMeterRecord]:
        return await self._central_repo.recent(limit)
