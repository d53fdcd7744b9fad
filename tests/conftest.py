"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal

import pytest_asyncio
from tortoise import Tortoise

from dormbill.core.db import MODEL_MODULES
from dormbill.core.models import BillingEntry, PaymentStatus, Room, RoomStatus


@pytest_asyncio.fixture(scope="function", autouse=True)
async def db_session():
    """
    Provides a clean in-memory SQLite database for each test function.
    """
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": MODEL_MODULES},
    )
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


async def make_room(
    number: str,
    price: str = "3000",
    water: int = 100,
    electric: int = 1000,
    **kwargs,
) -> Room:
    """Creates an occupied room with the given carried-over readings."""
    kwargs.setdefault("status", RoomStatus.OCCUPIED)
    return await Room.create(
        number=number,
        price=Decimal(price),
        last_water_reading=water,
        last_electric_reading=electric,
        **kwargs,
    )


async def make_bill(
    room: Room,
    month: date,
    water: tuple[int, int] = (0, 0),
    electric: tuple[int, int] = (0, 0),
    status: PaymentStatus = PaymentStatus.PENDING,
    total: str = "1000",
) -> BillingEntry:
    """Creates a stored bill with the given (last, current) meter pairs."""
    return await BillingEntry.create(
        room=room,
        month=month,
        rent=room.price,
        water_meter_last=water[0],
        water_meter_current=water[1],
        water_rate=Decimal("18"),
        electric_meter_last=electric[0],
        electric_meter_current=electric[1],
        electric_rate=Decimal("7"),
        total_amount=Decimal(total),
        payment_status=status,
    )
