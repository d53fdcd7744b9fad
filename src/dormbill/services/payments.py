"""Payment status workflow for billing entries."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from dormbill.core.dates import month_end, month_start
from dormbill.core.models import BillingEntry, PaymentStatus
from dormbill.core.repositories.billing import BillingRepository

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset(
        {PaymentStatus.REVIEW, PaymentStatus.PAID, PaymentStatus.OVERDUE}
    ),
    PaymentStatus.OVERDUE: frozenset(
        {PaymentStatus.REVIEW, PaymentStatus.PAID, PaymentStatus.LATE}
    ),
    PaymentStatus.LATE: frozenset({PaymentStatus.REVIEW, PaymentStatus.PAID}),
    PaymentStatus.REVIEW: frozenset({PaymentStatus.PAID, PaymentStatus.REJECTED}),
    # A rejected slip is never re-reviewed; the bill is reopened for a new one
    PaymentStatus.REJECTED: frozenset({PaymentStatus.PENDING}),
    PaymentStatus.PAID: frozenset(),
}


class PaymentError(Exception):
    """Raised for a payment action the bill's status does not allow."""


def can_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def check_transition(current: PaymentStatus, target: PaymentStatus) -> None:
    if not can_transition(current, target):
        raise PaymentError(
            f"Cannot change payment status from {current.value} to {target.value}."
        )


class PaymentService:
    """Moves bills through Pending, Review, Paid and the overdue states."""

    def __init__(self, billing_repo: BillingRepository):
        self._billing_repo = billing_repo

    async def _get(self, billing_id: UUID) -> BillingEntry:
        bill = await self._billing_repo.get(pk=billing_id)
        if not bill:
            raise PaymentError(f"Bill {billing_id} not found.")
        return bill

    async def submit_slip(self, billing_id: UUID, slip_reference: str) -> BillingEntry:
        """A tenant uploaded a transfer slip; the bill waits for review."""
        bill = await self._get(billing_id)
        check_transition(bill.payment_status, PaymentStatus.REVIEW)
        bill.payment_status = PaymentStatus.REVIEW
        bill.slip_reference = slip_reference
        await bill.save()
        return bill

    async def review(
        self, billing_id: UUID, approve: bool, note: str | None = None
    ) -> BillingEntry:
        bill = await self._get(billing_id)
        if bill.payment_status is not PaymentStatus.REVIEW:
            raise PaymentError("Bill is not in Review status.")
        now = datetime.now(timezone.utc)
        bill.payment_status = PaymentStatus.PAID if approve else PaymentStatus.REJECTED
        bill.reviewed_at = now
        bill.review_note = note
        if approve:
            bill.payment_date = now
        await bill.save()
        logger.info(f"Bill {bill.id} reviewed: {bill.payment_status.value}.")
        return bill

    async def pay_cash(self, billing_id: UUID) -> BillingEntry:
        """Records a cash payment taken by an administrator."""
        bill = await self._get(billing_id)
        if bill.payment_status is PaymentStatus.PAID:
            raise PaymentError("Bill is already paid.")
        check_transition(bill.payment_status, PaymentStatus.PAID)
        now = datetime.now(timezone.utc)
        bill.payment_status = PaymentStatus.PAID
        bill.payment_date = now
        bill.reviewed_at = now
        bill.review_note = "Paid via Cash (Manual Entry)"
        await bill.save()
        return bill

    async def reopen(self, billing_id: UUID) -> BillingEntry:
        """Sends a rejected bill back to Pending so a new slip can be uploaded."""
        bill = await self._get(billing_id)
        check_transition(bill.payment_status, PaymentStatus.PENDING)
        bill.payment_status = PaymentStatus.PENDING
        bill.slip_reference = None
        await bill.save()
        return bill

    async def mark_overdue(self, now: datetime, grace_days: int) -> int:
        """Pending bills created more than ``grace_days`` ago become Overdue."""
        cutoff = now - timedelta(days=grace_days)
        bills = await self._billing_repo.pending_created_before(cutoff)
        for bill in bills:
            bill.payment_status = PaymentStatus.OVERDUE
            await bill.save()
        if bills:
            logger.info(f"Marked {len(bills)} bills as overdue.")
        return len(bills)

    async def mark_late(self, today: date, late_after_days: int) -> int:
        """Overdue bills whose month ended more than ``late_after_days`` ago become Late."""
        bills = await self._billing_repo.overdue_for_months_before(month_start(today))
        late = [
            bill
            for bill in bills
            if (today - month_end(bill.month)).days > late_after_days
        ]
        for bill in late:
            bill.payment_status = PaymentStatus.LATE
            await bill.save()
        if late:
            logger.info(f"Marked {len(late)} bills as late.")
        return len(late)
