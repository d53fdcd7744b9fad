"""Application configuration."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Loads and validates application settings from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    LOG_LEVEL: str = "INFO"

    # Used to seed SystemConfig when the table is still empty
    DEFAULT_WATER_RATE: Decimal = Decimal("18")
    DEFAULT_ELECTRIC_RATE: Decimal = Decimal("7")
    DEFAULT_TRASH_FEE: Decimal = Decimal("30")
    DEFAULT_INTERNET_FEE: Decimal = Decimal("0")
    DEFAULT_OTHER_FEES: Decimal = Decimal("0")
    DORM_NAME: str = "หอพัก"

    OVERDUE_GRACE_DAYS: int = 5
    LATE_AFTER_DAYS: int = 30
    SCHEDULER_HOUR: int = 2


settings = Settings()
