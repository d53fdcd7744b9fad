"""Main entry point: opens the database and runs the scheduled jobs."""

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from dormbill.config import settings
from dormbill.core.db import close_db, init_db
from dormbill.core.repositories.billing import BillingRepository
from dormbill.core.repositories.expense import (
    ExpenseRepository,
    RecurringExpenseRepository,
)
from dormbill.core.repositories.system_config import SystemConfigRepository
from dormbill.services.expenses import ExpenseService
from dormbill.services.payments import PaymentService
from dormbill.services.scheduler import SchedulerService

logger = logging.getLogger(__name__)


async def main():
    """Initializes the database and keeps the scheduler running."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    logger.info("Starting dormbill...")

    await init_db()
    await SystemConfigRepository().get_or_seed()

    scheduler = SchedulerService(
        payment_service=PaymentService(BillingRepository()),
        expense_service=ExpenseService(
            ExpenseRepository(), RecurringExpenseRepository()
        ),
        scheduler=AsyncIOScheduler(),
    )
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown()
        await close_db()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Stopped manually.")
