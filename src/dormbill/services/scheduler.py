"""Service for scheduling background jobs."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from dormbill.config import settings
from dormbill.services.expenses import ExpenseService
from dormbill.services.payments import PaymentService

logger = logging.getLogger(__name__)


class SchedulerService:
    """Manages scheduled tasks for the application."""

    def __init__(
        self,
        payment_service: PaymentService,
        expense_service: ExpenseService,
        scheduler: AsyncIOScheduler,
    ):
        self._payment_service = payment_service
        self._expense_service = expense_service
        self._scheduler = scheduler

    def start(self):
        """Starts the scheduler and adds jobs."""
        logger.info("Starting scheduler...")
        self._scheduler.add_job(
            self._run_payment_status_job,
            trigger=CronTrigger(hour=settings.SCHEDULER_HOUR, minute=0),
            id="payment_status",
            replace_existing=True,
        )
        self._scheduler.add_job(
            self._run_recurring_expenses_job,
            trigger=CronTrigger(hour=settings.SCHEDULER_HOUR, minute=15),
            id="recurring_expenses",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Scheduler started.")

    def shutdown(self):
        self._scheduler.shutdown(wait=False)

    async def _run_payment_status_job(self):
        """Moves unpaid bills to Overdue and Late as their deadlines pass."""
        logger.info("Starting payment status job.")
        try:
            await self._payment_service.mark_overdue(
                datetime.now(timezone.utc), settings.OVERDUE_GRACE_DAYS
            )
        except Exception as e:
            logger.error(f"Failed to mark overdue bills: {e}", exc_info=True)
        try:
            await self._payment_service.mark_late(date.today(), settings.LATE_AFTER_DAYS)
        except Exception as e:
            logger.error(f"Failed to mark late bills: {e}", exc_info=True)
        logger.info("Payment status job finished.")

    async def _run_recurring_expenses_job(self):
        logger.info(f"Running recurring expense job for day {date.today().day}.")
        try:
            await self._expense_service.create_due_expenses(date.today())
        except Exception as e:
            logger.error(f"Failed to create recurring expenses: {e}", exc_info=True)
        logger.info("Recurring expense job finished.")
