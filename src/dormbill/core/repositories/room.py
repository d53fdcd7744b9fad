"""Repository for Room model."""

from __future__ import annotations

from uuid import UUID

from dormbill.core.bills import RoomRecord
from dormbill.core.models import Room, RoomStatus
from dormbill.core.rates import RateOverrides
from dormbill.core.repositories.base import BaseRepository


def to_room_record(room: Room) -> RoomRecord:
    """Converts a Room row into the plain record the calculations use."""
    return RoomRecord(
        room_id=room.id,
        number=room.number,
        price=room.price,
        last_water=room.last_water_reading,
        last_electric=room.last_electric_reading,
        charge_common_area=room.charge_common_area,
        overrides=RateOverrides(
            water_rate=room.water_rate,
            electric_rate=room.electric_rate,
            trash_fee=room.trash_fee,
            internet_fee=room.internet_fee,
            other_fees=room.other_fees,
        ),
    )


class RoomRepository(BaseRepository[Room]):
    """Room-specific repository operations."""

    def __init__(self) -> None:
        super().__init__(Room)

    async def get_by_number(self, number: str) -> Room | None:
        return await self.model.get_or_none(number=number)

    async def occupied(self) -> list[Room]:
        """Rooms that take part in bulk billing, ordered by number."""
        return await self.model.filter(status=RoomStatus.OCCUPIED).order_by("number")

    async def advance_readings(
        self, room_id: UUID, water_reading: int, electric_reading: int
    ) -> None:
        """Makes the given readings the starting point of the next bill."""
        await self.model.filter(id=room_id).update(
            last_water_reading=water_reading,
            last_electric_reading=electric_reading,
        )

    async def set_status(self, room_id: UUID, status: RoomStatus) -> None:
        await self.model.filter(id=room_id).update(status=status)
