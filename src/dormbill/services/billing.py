"""Service responsible for generating monthly room bills."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from uuid import UUID

from tortoise.transactions import in_transaction

from dormbill.core import calculations
from dormbill.core.apportionment import Apportionment, RoomUsage, apportion
from dormbill.core.bills import (
    BulkBillingResult,
    CommonFees,
    ComposedBill,
    MeterSubmission,
    RoomRecord,
    compose_bill,
    compose_bulk,
)
from dormbill.core.dates import month_start, previous_month
from dormbill.core.models import BillingEntry, PaymentStatus
from dormbill.core.rates import BillingConfig, RateOverrides, resolve_rates
from dormbill.core.repositories.billing import BillingRepository
from dormbill.core.repositories.central_meter import (
    CentralMeterRepository,
    to_central_reading,
)
from dormbill.core.repositories.resident import ResidentRepository
from dormbill.core.repositories.room import RoomRepository, to_room_record
from dormbill.core.repositories.system_config import SystemConfigRepository

logger = logging.getLogger(__name__)


class BillingError(Exception):
    """Custom exception for billing errors."""


@dataclass
class BulkBillingReport:
    """What a bulk submission wrote, in the ``{created, skipped, errors}`` shape."""

    created: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    entries: list[BillingEntry] = field(default_factory=list)
    grand_total: Decimal = Decimal("0")
    # Common-area shares of rooms that got no bill in this run
    unbilled_common: dict[UUID, CommonFees] = field(default_factory=dict)

    @property
    def unbilled_common_cost(self) -> Decimal:
        return sum((fees.total for fees in self.unbilled_common.values()), Decimal("0"))

    def summary(self) -> dict[str, object]:
        return {
            "created": self.created,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }


@dataclass
class _BulkPlan:
    result: BulkBillingResult
    replaced: dict[UUID, BillingEntry]
    locked_errors: list[str]
    unbilled_common: dict[UUID, CommonFees]


class BillingService:
    """Orchestrates bill generation: loads rows, runs the calculations, persists."""

    def __init__(
        self,
        room_repo: RoomRepository,
        billing_repo: BillingRepository,
        central_repo: CentralMeterRepository,
        config_repo: SystemConfigRepository,
        resident_repo: ResidentRepository,
    ):
        self._room_repo = room_repo
        self._billing_repo = billing_repo
        self._central_repo = central_repo
        self._config_repo = config_repo
        self._resident_repo = resident_repo

    async def apportion_month(
        self, month: date, config: BillingConfig | None = None
    ) -> Apportionment | None:
        """
        Apportions the common-area cost measured in ``month``.

        Uses that month's central meter record and the usage on that month's
        bills. Returns None when there is no central record yet.
        """
        config = config or await self._config_repo.load_billing_config()
        central = await self._central_repo.for_month(month)
        if not central:
            return None

        bills = await self._billing_repo.for_month(month)
        usages = [
            RoomUsage(
                room_id=bill.room_id,
                water_usage=calculations.calculate_usage(
                    bill.water_meter_current, bill.water_meter_last
                ),
                electric_usage=calculations.calculate_usage(
                    bill.electric_meter_current, bill.electric_meter_last
                ),
                charge_common_area=bill.room.charge_common_area,
            )
            for bill in bills
        ]
        return apportion(to_central_reading(central), usages, config.common_area)

    async def common_shares_for(
        self, month: date, config: BillingConfig
    ) -> dict[UUID, CommonFees]:
        """Common-area shares billed in ``month``, taken from the month before."""
        if not config.common_area.enabled:
            return {}
        prev = previous_month(month)
        apportionment = await self.apportion_month(prev, config)
        if apportionment is None:
            logger.info(
                f"No central meter record for {prev:%Y-%m}, "
                "bills carry no common-area charge."
            )
            return {}
        logger.info(
            f"Common-area cost for {prev:%Y-%m}: {apportionment.total_common_cost} "
            f"over {apportionment.eligible_room_count} rooms, "
            f"owner absorbs {apportionment.owner_absorbed}."
        )
        return apportionment.shares

    async def _plan_bulk(
        self, month: date, submissions: Iterable[MeterSubmission]
    ) -> _BulkPlan:
        config = await self._config_repo.load_billing_config()
        rooms = await self._room_repo.occupied()
        existing = {bill.room_id: bill for bill in await self._billing_repo.for_month(month)}

        records: list[RoomRecord] = []
        locked: set[UUID] = set()
        locked_errors: list[str] = []
        for room in rooms:
            record = to_room_record(room)
            bill = existing.get(room.id)
            if bill and bill.payment_status is PaymentStatus.PAID:
                locked.add(room.id)
                locked_errors.append(
                    f"Room {room.number}: Bill already paid for this month"
                )
                continue
            if bill:
                # Re-billing an unpaid month starts again from that bill's readings
                record = replace(
                    record,
                    last_water=bill.water_meter_last,
                    last_electric=bill.electric_meter_last,
                )
            records.append(record)

        shares = await self.common_shares_for(month, config)
        result = compose_bulk(
            records,
            [s for s in submissions if s.room_id not in locked],
            config,
            shares,
        )
        billed = {bill.room_id for bill in result.bills if bill.common_total > 0}
        return _BulkPlan(
            result=result,
            replaced={
                bill.room_id: existing[bill.room_id]
                for bill in result.bills
                if bill.room_id in existing
            },
            locked_errors=locked_errors,
            unbilled_common={
                room_id: fees
                for room_id, fees in shares.items()
                if room_id not in billed and room_id not in locked
            },
        )

    async def preview_bulk(
        self, month: date, submissions: Iterable[MeterSubmission]
    ) -> BulkBillingResult:
        """Computes a bulk submission without writing anything."""
        plan = await self._plan_bulk(month_start(month), submissions)
        plan.result.errors[:0] = plan.locked_errors
        return plan.result

    async def submit_bulk(
        self, month: date, submissions: Iterable[MeterSubmission]
    ) -> BulkBillingReport:
        """
        Creates bills for every occupied room with complete readings.

        An unpaid bill already issued for the month is replaced; a paid one
        is left alone and reported. All writes happen in one transaction:
        replaced bills are deleted, new entries created and each room's last
        readings advanced to the submitted ones, unless the room already has
        a bill for a later month.
        """
        month = month_start(month)
        logger.info(f"Starting bulk billing for {month:%Y-%m}.")
        plan = await self._plan_bulk(month, submissions)
        result = plan.result
        residents = await self._resident_repo.billed_resident_by_room(
            bill.room_id for bill in result.bills
        )

        entries: list[BillingEntry] = []
        async with in_transaction():
            for bill in result.bills:
                old = plan.replaced.get(bill.room_id)
                if old:
                    logger.info(f"Replacing unpaid bill for room {bill.room_number}.")
                    await old.delete()
                entry = await self._billing_repo.create(
                    month=month,
                    resident_id=residents.get(bill.room_id),
                    **bill.entry_fields(),
                )
                await self._advance_readings(bill, month)
                entries.append(entry)

        report = BulkBillingReport(
            created=result.created,
            skipped=len(result.skipped) + len(plan.locked_errors),
            errors=plan.locked_errors + result.errors,
            entries=entries,
            grand_total=result.grand_total,
            unbilled_common=plan.unbilled_common,
        )
        for error in report.errors:
            logger.warning(error)
        if report.unbilled_common_cost:
            logger.warning(
                f"Common-area share of {report.unbilled_common_cost} for "
                f"{len(report.unbilled_common)} rooms was not billed in {month:%Y-%m}."
            )
        logger.info(
            f"Bulk billing for {month:%Y-%m} finished: {report.created} created, "
            f"{report.skipped} skipped."
        )
        return report

    async def create_bill(
        self,
        room_id: UUID,
        month: date,
        water_current: int,
        electric_current: int,
        *,
        water_last: int | None = None,
        electric_last: int | None = None,
        overrides: RateOverrides | None = None,
        common_fees: CommonFees | None = None,
    ) -> tuple[BillingEntry, ComposedBill]:
        """
        Creates a single bill entered by hand.

        Last readings default to the room's carried-over values. Rates resolve
        from system defaults, then room overrides, then ``overrides``. A
        reading lower than the last one is billed at zero usage and flagged.
        The room's readings only advance when no later month is billed yet.
        """
        room = await self._room_repo.get(pk=room_id)
        if not room:
            raise BillingError(f"Room with id {room_id} not found.")

        month = month_start(month)
        if await self._billing_repo.for_room_and_month(room.id, month):
            raise BillingError(
                f"Room {room.number} already has a bill for {month:%Y-%m}."
            )

        config = await self._config_repo.load_billing_config()
        record = to_room_record(room)
        if water_last is not None:
            record = replace(record, last_water=water_last)
        if electric_last is not None:
            record = replace(record, last_electric=electric_last)

        rates = resolve_rates(config.rates, record.overrides, overrides)
        if common_fees is None and room.charge_common_area:
            shares = await self.common_shares_for(month, config)
            common_fees = shares.get(room.id)

        bill = compose_bill(
            record,
            MeterSubmission(room.id, water_current, electric_current),
            rates,
            common_fees,
        )
        if bill.flags:
            logger.warning(
                f"Room {room.number} billed with zero usage: {', '.join(bill.flags)}"
            )

        residents = await self._resident_repo.billed_resident_by_room([room.id])
        async with in_transaction():
            entry = await self._billing_repo.create(
                month=month, resident_id=residents.get(room.id), **bill.entry_fields()
            )
            await self._advance_readings(bill, month)
        return entry, bill

    async def _advance_readings(self, bill: ComposedBill, month: date) -> None:
        if await self._billing_repo.has_bill_after(bill.room_id, month):
            logger.info(
                f"Room {bill.room_number} already billed after {month:%Y-%m}, "
                "keeping its current readings."
            )
            return
        await self._room_repo.advance_readings(
            bill.room_id, bill.water_meter_current, bill.electric_meter_current
        )
