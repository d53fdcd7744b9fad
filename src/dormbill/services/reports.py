"""Service building utility analysis and monthly income reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from dormbill.core.dates import format_period_for_display, month_start
from dormbill.core.models import RoomStatus
from dormbill.core.reconciliation import (
    IncomeBreakdown,
    MonthlySummary,
    income_breakdown,
    reconcile,
)
from dormbill.core.repositories.billing import BillingRepository
from dormbill.core.repositories.central_meter import (
    CentralMeterRepository,
    to_central_reading,
)
from dormbill.core.repositories.expense import ExpenseRepository
from dormbill.core.repositories.room import RoomRepository

ZERO = Decimal("0")


@dataclass(frozen=True)
class UtilityAnalysisRow:
    month: date
    label: str
    summary: MonthlySummary


@dataclass(frozen=True)
class MonthlyExpenses:
    water_bill: Decimal = ZERO
    electric_bill: Decimal = ZERO
    internet_bill: Decimal = ZERO
    trash_bill: Decimal = ZERO
    maintenance_bill: Decimal = ZERO
    recorded: Decimal = ZERO  # Expense rows entered by the operator

    @property
    def total(self) -> Decimal:
        return (
            self.water_bill
            + self.electric_bill
            + self.internet_bill
            + self.trash_bill
            + self.maintenance_bill
            + self.recorded
        )


@dataclass(frozen=True)
class MonthlyReport:
    month: date
    label: str
    income: IncomeBreakdown
    expenses: MonthlyExpenses
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def net(self) -> Decimal:
        return self.income.total - self.expenses.total


class ReportService:
    """Read-only aggregations for the administrator's dashboards."""

    def __init__(
        self,
        room_repo: RoomRepository,
        billing_repo: BillingRepository,
        central_repo: CentralMeterRepository,
        expense_repo: ExpenseRepository,
    ):
        self._room_repo = room_repo
        self._billing_repo = billing_repo
        self._central_repo = central_repo
        self._expense_repo = expense_repo

    async def utility_analysis(self, months: int = 6) -> list[UtilityAnalysisRow]:
        """Central meter vs. room usage and profit for the latest recorded months."""
        rows: list[UtilityAnalysisRow] = []
        for central in await self._central_repo.recent(months):
            bills = await self._billing_repo.for_month(central.month)
            rows.append(
                UtilityAnalysisRow(
                    month=central.month,
                    label=format_period_for_display(central.month),
                    summary=reconcile(to_central_reading(central), bills),
                )
            )
        return rows

    async def monthly_report(self, month: date) -> MonthlyReport:
        """Income from paid bills against the month's expenses."""
        month = month_start(month)
        paid = await self._billing_repo.paid_for_month(month)
        central = await self._central_repo.for_month(month)

        expenses = MonthlyExpenses(recorded=await self._expense_repo.total_for_month(month))
        if central:
            expenses = MonthlyExpenses(
                water_bill=to_central_reading(central).water_total_cost,
                electric_bill=central.electric_total_cost,
                internet_bill=central.internet_fee,
                trash_bill=central.trash_fee,
                maintenance_bill=central.maintenance_fee,
                recorded=expenses.recorded,
            )

        issued = await self._billing_repo.count_for_month(month)
        stats = {
            "total_rooms": await self._room_repo.count(),
            "occupied_rooms": await self._room_repo.count(status=RoomStatus.OCCUPIED),
            "total_bills_issued": issued,
            "paid_bills": len(paid),
            "unpaid_bills": issued - len(paid),
        }
        return MonthlyReport(
            month=month,
            label=format_period_for_display(month),
            income=income_breakdown(paid),
            expenses=expenses,
            stats=stats,
        )
