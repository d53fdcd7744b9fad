"""Resolution of the rates and policy that apply to a bill."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from decimal import Decimal

from dormbill.core.models import CapMode, DistributionMode


@dataclass(frozen=True)
class Rates:
    """Unit prices and fixed monthly fees charged to a room."""

    water_rate: Decimal
    electric_rate: Decimal
    trash_fee: Decimal = Decimal("0")
    internet_fee: Decimal = Decimal("0")
    other_fees: Decimal = Decimal("0")


@dataclass(frozen=True)
class RateOverrides:
    """Optional replacements for any of the default rates; None keeps the default."""

    water_rate: Decimal | None = None
    electric_rate: Decimal | None = None
    trash_fee: Decimal | None = None
    internet_fee: Decimal | None = None
    other_fees: Decimal | None = None


@dataclass(frozen=True)
class CommonAreaPolicy:
    """How the unmetered common-area cost is passed on to rooms."""

    enabled: bool = False
    distribution: DistributionMode = DistributionMode.EQUAL
    cap_mode: CapMode = CapMode.NONE
    cap_value: Decimal = Decimal("0")

    def __post_init__(self):
        # Accept the raw stored strings ("proportional", "fixed") as well
        object.__setattr__(self, "distribution", DistributionMode(self.distribution))
        object.__setattr__(self, "cap_mode", CapMode(self.cap_mode))
        object.__setattr__(self, "cap_value", Decimal(self.cap_value))


@dataclass(frozen=True)
class BillingConfig:
    """Explicit configuration value handed to every calculation."""

    rates: Rates
    common_area: CommonAreaPolicy = field(default_factory=CommonAreaPolicy)


def resolve_rates(defaults: Rates, *overrides: RateOverrides | None) -> Rates:
    """
    Merges default rates with override layers.

    Later layers win, so ``resolve_rates(system, room, form)`` lets a single
    bill override a room setting that itself overrides the system default.
    """
    resolved = defaults
    for layer in overrides:
        if layer is None:
            continue
        changes = {
            f.name: getattr(layer, f.name)
            for f in fields(layer)
            if getattr(layer, f.name) is not None
        }
        if changes:
            resolved = replace(resolved, **changes)
    return resolved
