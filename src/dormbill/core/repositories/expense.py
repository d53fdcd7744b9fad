"""Repositories for Expense and RecurringExpense models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from dormbill.core.dates import month_end, month_start
from dormbill.core.models import Expense, RecurringExpense
from dormbill.core.repositories.base import BaseRepository


class ExpenseRepository(BaseRepository[Expense]):
    """Expense-specific repository operations."""

    def __init__(self) -> None:
        super().__init__(Expense)

    async def for_month(self, month: date) -> list[Expense]:
        return await self.model.filter(
            date__gte=month_start(month), date__lte=month_end(month)
        ).order_by("date")

    async def total_for_month(self, month: date) -> Decimal:
        expenses = await self.for_month(month)
        return sum((expense.amount for expense in expenses), Decimal("0"))

    async def exists_for_template(self, recurring_id: UUID, day: date) -> bool:
        return await self.model.filter(recurring_id=recurring_id, date=day).exists()


class RecurringExpenseRepository(BaseRepository[RecurringExpense]):
    """RecurringExpense-specific repository operations."""

    def __init__(self) -> None:
        super().__init__(RecurringExpense)

    async def due_on(self, day: date) -> list[RecurringExpense]:
        """Active templates due on ``day``; the month's last day also takes
        templates set to days the month does not have."""
        if day == month_end(day):
            return await self.model.filter(is_active=True, day_of_month__gte=day.day)
        return await self.model.filter(is_active=True, day_of_month=day.day)
