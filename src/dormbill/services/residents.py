"""Service for moving residents in and out of rooms."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from tortoise.transactions import in_transaction

from dormbill.core.models import DepositStatus, Resident, ResidentStatus, RoomStatus
from dormbill.core.repositories.resident import ResidentRepository
from dormbill.core.repositories.room import RoomRepository

logger = logging.getLogger(__name__)


class ResidentError(Exception):
    """Raised when a check-in or checkout cannot be performed."""


class ResidentService:
    """Keeps residents and their rooms' occupancy status in step."""

    def __init__(self, room_repo: RoomRepository, resident_repo: ResidentRepository):
        self._room_repo = room_repo
        self._resident_repo = resident_repo

    async def check_in(
        self,
        room_id: UUID,
        full_name: str,
        *,
        phone: str | None = None,
        line_user_id: str | None = None,
        check_in_date: date | None = None,
    ) -> Resident:
        """Creates an active resident and marks the room Occupied."""
        room = await self._room_repo.get(pk=room_id)
        if not room:
            raise ResidentError(f"Room with id {room_id} not found.")
        if room.status is RoomStatus.MAINTENANCE:
            raise ResidentError(f"Room {room.number} is under maintenance.")

        async with in_transaction():
            resident = await self._resident_repo.create(
                full_name=full_name,
                phone=phone,
                line_user_id=line_user_id or None,
                room_id=room.id,
                check_in_date=check_in_date or date.today(),
            )
            await self._room_repo.set_status(room.id, RoomStatus.OCCUPIED)
        logger.info(f"{full_name} checked in to room {room.number}.")
        return resident

    async def check_out(
        self,
        resident_id: UUID,
        *,
        deposit_status: DepositStatus,
        deposit_returned_amount: Decimal | None = None,
        deposit_forfeit_reason: str | None = None,
        check_out_date: date | None = None,
    ) -> Resident:
        """
        Checks a resident out and settles the deposit.

        The room goes back to Available once nobody active is left in it;
        otherwise it stays Occupied.
        """
        resident = await self._resident_repo.get(pk=resident_id)
        if not resident:
            raise ResidentError(f"Resident with id {resident_id} not found.")
        if resident.status is ResidentStatus.CHECKED_OUT or resident.room_id is None:
            raise ResidentError(f"{resident.full_name} is not living in any room.")

        room_id = resident.room_id
        day = check_out_date or date.today()
        async with in_transaction():
            resident.status = ResidentStatus.CHECKED_OUT
            resident.check_out_date = day
            resident.room_id = None
            resident.deposit_status = DepositStatus(deposit_status)
            resident.deposit_returned_date = day
            resident.deposit_returned_amount = deposit_returned_amount
            resident.deposit_forfeit_reason = deposit_forfeit_reason
            await resident.save()

            remaining = await self._resident_repo.count_active_in_room(room_id)
            status = RoomStatus.OCCUPIED if remaining else RoomStatus.AVAILABLE
            await self._room_repo.set_status(room_id, status)
        logger.info(
            f"{resident.full_name} checked out; room is now {status.value}."
        )
        return resident

    async def residents_of(self, room_id: UUID) -> list[Resident]:
        return await self._resident_repo.active_in_room(room_id)
