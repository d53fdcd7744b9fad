"""Repository for the SystemConfig singleton."""

from __future__ import annotations

import logging
from typing import Any

from dormbill.config import settings
from dormbill.core.models import CapMode, SystemConfig
from dormbill.core.rates import BillingConfig, CommonAreaPolicy, Rates
from dormbill.core.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def to_billing_config(config: SystemConfig) -> BillingConfig:
    """Turns the stored settings row into the value passed to calculations."""
    if config.common_area_cap_type is CapMode.FIXED:
        cap_value = config.common_area_cap_fixed
    else:
        cap_value = config.common_area_cap_percentage
    return BillingConfig(
        rates=Rates(
            water_rate=config.water_rate,
            electric_rate=config.electric_rate,
            trash_fee=config.trash_fee,
            internet_fee=config.internet_fee,
            other_fees=config.other_fees,
        ),
        common_area=CommonAreaPolicy(
            enabled=config.common_area_enabled,
            distribution=config.common_area_distribution,
            cap_mode=config.common_area_cap_type,
            cap_value=cap_value,
        ),
    )


class SystemConfigRepository(BaseRepository[SystemConfig]):
    """Access to the single configuration row."""

    def __init__(self) -> None:
        super().__init__(SystemConfig)

    async def get_or_seed(self) -> SystemConfig:
        """Returns the configuration, creating it from settings defaults if missing."""
        config = await self.model.all().order_by("created_at").first()
        if config:
            return config
        logger.info("No system config found, seeding defaults.")
        return await self.model.create(
            dorm_name=settings.DORM_NAME,
            water_rate=settings.DEFAULT_WATER_RATE,
            electric_rate=settings.DEFAULT_ELECTRIC_RATE,
            trash_fee=settings.DEFAULT_TRASH_FEE,
            internet_fee=settings.DEFAULT_INTERNET_FEE,
            other_fees=settings.DEFAULT_OTHER_FEES,
        )

    async def load_billing_config(self) -> BillingConfig:
        return to_billing_config(await self.get_or_seed())

    async def update_config(self, **changes: Any) -> SystemConfig:
        """Applies settings-form changes; identity and timestamps are ignored."""
        for key in ("id", "created_at", "updated_at"):
            changes.pop(key, None)
        config = await self.get_or_seed()
        config.update_from_dict(changes)
        await config.save()
        return config
