"""Service creating expenses from recurring templates."""

from __future__ import annotations

import logging
from datetime import date

from dormbill.core.models import Expense
from dormbill.core.repositories.expense import (
    ExpenseRepository,
    RecurringExpenseRepository,
)

logger = logging.getLogger(__name__)

AUTO_NOTE = "Auto-created from recurring template"


class ExpenseService:
    """Turns active recurring templates into dated expenses."""

    def __init__(
        self,
        expense_repo: ExpenseRepository,
        recurring_repo: RecurringExpenseRepository,
    ):
        self._expense_repo = expense_repo
        self._recurring_repo = recurring_repo

    async def create_due_expenses(self, today: date) -> list[Expense]:
        """
        Creates today's expenses from the templates due today.

        Running twice on the same day does not create duplicates.
        """
        templates = await self._recurring_repo.due_on(today)
        logger.info(f"Found {len(templates)} recurring templates to process.")

        created: list[Expense] = []
        for template in templates:
            if await self._expense_repo.exists_for_template(template.id, today):
                continue
            note = f"{template.note} ({AUTO_NOTE})" if template.note else AUTO_NOTE
            created.append(
                await self._expense_repo.create(
                    title=template.title,
                    amount=template.amount,
                    category=template.category,
                    date=today,
                    note=note,
                    recurring_id=template.id,
                )
            )
        logger.info(f"Created {len(created)} expenses.")
        return created
