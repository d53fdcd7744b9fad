from datetime import date
from decimal import Decimal

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from conftest import make_bill, make_room

from dormbill.core.models import (
    BillingEntry,
    CapMode,
    DistributionMode,
    Expense,
    PaymentStatus,
    RecurringExpense,
    RoomStatus,
)
from dormbill.core.repositories.billing import BillingRepository
from dormbill.core.repositories.expense import (
    ExpenseRepository,
    RecurringExpenseRepository,
)
from dormbill.core.repositories.room import RoomRepository, to_room_record
from dormbill.core.repositories.system_config import (
    SystemConfigRepository,
    to_billing_config,
)
from dormbill.services.expenses import AUTO_NOTE, ExpenseService
from dormbill.services.payments import PaymentService
from dormbill.services.scheduler import SchedulerService


@pytest.mark.asyncio
async def test_room_crud():
    room_repo = RoomRepository()

    room = await room_repo.create(number="B201", price=Decimal("2800"))
    assert room.status is RoomStatus.AVAILABLE

    fetched = await room_repo.get(room.id)
    assert fetched is not None and fetched.id == room.id
    assert (await room_repo.get_by_number("B201")).id == room.id

    deleted = await room_repo.delete(room.id)
    assert deleted == 1
    assert await room_repo.get(room.id) is None


@pytest.mark.asyncio
async def test_occupied_rooms_and_readings():
    room_repo = RoomRepository()
    second = await make_room("A102")
    first = await make_room("A101", water_rate=Decimal("20"))
    await make_room("A103", status=RoomStatus.MAINTENANCE)

    rooms = await room_repo.occupied()
    assert [room.number for room in rooms] == ["A101", "A102"]

    await room_repo.advance_readings(second.id, 140, 1300)
    second = await room_repo.get(second.id)
    assert second.last_water_reading == 140
    assert second.last_electric_reading == 1300

    record = to_room_record(first)
    assert record.overrides.water_rate == Decimal("20")
    assert record.overrides.electric_rate is None


@pytest.mark.asyncio
async def test_billing_history_newest_first():
    room = await make_room("A101")
    await make_bill(room, date(2026, 1, 1))
    await make_bill(room, date(2026, 3, 1))
    await make_bill(room, date(2026, 2, 1), status=PaymentStatus.PAID)
    repo = BillingRepository()

    history = await repo.history_for_room(room.id)

    assert [bill.month for bill in history] == [
        date(2026, 3, 1),
        date(2026, 2, 1),
        date(2026, 1, 1),
    ]
    assert len(await repo.paid_for_month(date(2026, 2, 28))) == 1
    assert await repo.for_room_and_month(room.id, date(2026, 4, 1)) is None


@pytest.mark.asyncio
async def test_system_config_seeded_from_settings():
    repo = SystemConfigRepository()

    config = await repo.get_or_seed()
    again = await repo.get_or_seed()

    assert again.id == config.id
    assert config.water_rate == Decimal("18")
    assert config.electric_rate == Decimal("7")
    assert config.trash_fee == Decimal("30")
    assert config.common_area_enabled is False

    billing_config = await repo.load_billing_config()
    assert billing_config.rates.water_rate == Decimal("18")
    assert billing_config.common_area.enabled is False


@pytest.mark.asyncio
async def test_system_config_update():
    repo = SystemConfigRepository()
    original = await repo.get_or_seed()

    updated = await repo.update_config(
        id=None,
        water_rate=Decimal("20"),
        common_area_enabled=True,
        common_area_distribution=DistributionMode.PROPORTIONAL,
        common_area_cap_type=CapMode.FIXED,
        common_area_cap_percentage=Decimal("50"),
        common_area_cap_fixed=Decimal("1500"),
    )

    assert updated.id == original.id
    policy = to_billing_config(await repo.get_or_seed()).common_area
    assert policy.enabled is True
    assert policy.distribution is DistributionMode.PROPORTIONAL
    assert policy.cap_mode is CapMode.FIXED
    assert policy.cap_value == Decimal("1500")


@pytest.mark.asyncio
async def test_recurring_due_on_month_end():
    repo = RecurringExpenseRepository()
    on_15 = await RecurringExpense.create(
        title="Cleaning", amount=Decimal("800"), category="service", day_of_month=15
    )
    on_31 = await RecurringExpense.create(
        title="Security", amount=Decimal("3000"), category="service", day_of_month=31
    )
    await RecurringExpense.create(
        title="Old contract",
        amount=Decimal("100"),
        category="service",
        day_of_month=15,
        is_active=False,
    )

    assert [t.id for t in await repo.due_on(date(2026, 2, 15))] == [on_15.id]
    assert [t.id for t in await repo.due_on(date(2026, 2, 28))] == [on_31.id]
    assert await repo.due_on(date(2026, 3, 28)) == []


@pytest.mark.asyncio
async def test_recurring_expenses_created_once_per_day():
    template = await RecurringExpense.create(
        title="Internet", amount=Decimal("590"), category="utility", day_of_month=5
    )
    service = ExpenseService(ExpenseRepository(), RecurringExpenseRepository())
    today = date(2026, 2, 5)

    created = await service.create_due_expenses(today)
    again = await service.create_due_expenses(today)

    assert len(created) == 1
    assert again == []
    expense = await Expense.get(id=created[0].id)
    assert expense.recurring_id == template.id
    assert expense.amount == Decimal("590")
    assert expense.note == AUTO_NOTE
    assert await ExpenseRepository().total_for_month(today) == Decimal("590")


@pytest.mark.asyncio
async def test_scheduler_runs_jobs(caplog):
    """Smoke test: the scheduled jobs call the services without errors."""
    room = await make_room("A101")
    bill = await make_bill(room, date(2026, 1, 1), status=PaymentStatus.OVERDUE)

    scheduler = AsyncIOScheduler()
    service = SchedulerService(
        PaymentService(BillingRepository()),
        ExpenseService(ExpenseRepository(), RecurringExpenseRepository()),
        scheduler,
    )

    caplog.set_level("INFO")

    await service._run_payment_status_job()
    await service._run_recurring_expenses_job()

    assert "Payment status job finished" in caplog.text
    assert "Recurring expense job finished" in caplog.text
    assert "Failed" not in caplog.text
    bill = await BillingEntry.get(id=bill.id)
    assert bill.payment_status is PaymentStatus.LATE


@pytest.mark.asyncio
async def test_scheduler_registers_jobs():
    scheduler = AsyncIOScheduler()
    service = SchedulerService(
        PaymentService(BillingRepository()),
        ExpenseService(ExpenseRepository(), RecurringExpenseRepository()),
        scheduler,
    )

    service.start()
    try:
        assert {job.id for job in scheduler.get_jobs()} == {
            "payment_status",
            "recurring_expenses",
        }
    finally:
        service.shutdown()
