"""Database configuration for Tortoise-ORM."""

import logging
import os

from dotenv import load_dotenv
from tortoise import Tortoise

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://db.sqlite3")
MODEL_MODULES = ["dormbill.core.models"]


TORTOISE_ORM = {
    "connections": {"default": DATABASE_URL},
    "apps": {
        "models": {
            "models": [*MODEL_MODULES, "aerich.models"],
            "default_connection": "default",
        },
    },
}


async def init_db(generate_schemas: bool = False) -> None:
    """Opens the default connection; schemas are normally managed by aerich."""
    logger.info("Initializing database...")
    await Tortoise.init(config=TORTOISE_ORM)
    if generate_schemas:
        await Tortoise.generate_schemas(safe=True)
    logger.info("Database initialized.")


async def close_db() -> None:
    logger.info("Closing connections...")
    await Tortoise.close_connections()
    logger.info("Connections closed.")
