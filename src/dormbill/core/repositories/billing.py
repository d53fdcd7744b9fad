"""Repository for BillingEntry model."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from dormbill.core.dates import month_start
from dormbill.core.models import BillingEntry, PaymentStatus
from dormbill.core.repositories.base import BaseRepository


class BillingRepository(BaseRepository[BillingEntry]):
    """BillingEntry-specific repository operations."""

    def __init__(self) -> None:
        super().__init__(BillingEntry)

    async def for_month(self, month: date) -> list[BillingEntry]:
        """All bills of a billing month with their rooms loaded."""
        return await self.model.filter(month=month_start(month)).prefetch_related(
            "room"
        )

    async def for_room_and_month(
        self, room_id: UUID, month: date
    ) -> BillingEntry | None:
        return await self.model.get_or_none(room_id=room_id, month=month_start(month))

    async def paid_for_month(self, month: date) -> list[BillingEntry]:
        return await self.model.filter(
            month=month_start(month), payment_status=PaymentStatus.PAID
        )

    async def count_for_month(self, month: date) -> int:
        return await self.model.filter(month=month_start(month)).count()

    async def pending_created_before(self, cutoff: datetime) -> list[BillingEntry]:
        return await self.model.filter(
            payment_status=PaymentStatus.PENDING, created_at__lte=cutoff
        )

    async def overdue_for_months_before(self, month: date) -> list[BillingEntry]:
        """Overdue bills whose billing month started before ``month``."""
        return await self.model.filter(
            payment_status=PaymentStatus.OVERDUE, month__lt=month_start(month)
        )

    async def history_for_room(self, room_id: UUID) -> list[BillingEntry]:
        return await self.model.filter(room_id=room_id).order_by("-month")

    async def has_bill_after(self, room_id: UUID, month: date) -> bool:
        """True when the room was already billed for a later month."""
        return await self.model.filter(
            room_id=room_id, month__gt=month_start(month)
        ).exists()
