"""Repository for Resident model."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from dormbill.core.models import Resident, ResidentStatus
from dormbill.core.repositories.base import BaseRepository


class ResidentRepository(BaseRepository[Resident]):
    """Resident-specific repository operations."""

    def __init__(self) -> None:
        super().__init__(Resident)

    async def active_in_room(self, room_id: UUID) -> list[Resident]:
        """Residents still living in a room, earliest check-in first."""
        return await self.model.filter(
            room_id=room_id, status=ResidentStatus.ACTIVE
        ).order_by("check_in_date", "created_at")

    async def count_active_in_room(self, room_id: UUID) -> int:
        return await self.model.filter(
            room_id=room_id, status=ResidentStatus.ACTIVE
        ).count()

    async def billed_resident_by_room(self, room_ids: Iterable[UUID]) -> dict[UUID, UUID]:
        """The resident a new bill is addressed to, per room: the earliest active one."""
        residents = await self.model.filter(
            room_id__in=list(room_ids), status=ResidentStatus.ACTIVE
        ).order_by("check_in_date", "created_at")
        by_room: dict[UUID, UUID] = {}
        for resident in residents:
            by_room.setdefault(resident.room_id, resident.id)
        return by_room
