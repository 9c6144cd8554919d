"""
Deposit incentive calculation.

An item's reward is its carbon saving placed on the catalog's current
carbon-saving range and mapped linearly into a fixed reward band:

    reward = MIN_REWARD + (saving - lo) / (hi - lo) * (MAX_REWARD - MIN_REWARD)

The saving is clamped into [lo, hi] first, so values outside the catalog
range never extrapolate past the band. A catalog with no spread (hi <= lo)
gives every item MIN_REWARD.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


DEFAULT_MIN_REWARD = 500
DEFAULT_MAX_REWARD = 1500


@dataclass(frozen=True)
class IncentiveBand:
    """Reward band in minor currency units."""
    min_reward: int = DEFAULT_MIN_REWARD
    max_reward: int = DEFAULT_MAX_REWARD

    def __post_init__(self):
        if self.min_reward < 0 or self.max_reward < self.min_reward:
            raise ValueError(
                f"Invalid incentive band {self.min_reward}-{self.max_reward}"
            )


@dataclass(frozen=True)
class CarbonRange:
    """Min/max carbon saving over the active catalog."""
    lo: Optional[float] = None
    hi: Optional[float] = None

    @property
    def has_spread(self) -> bool:
        return self.lo is not None and self.hi is not None and self.hi > self.lo


def round_minor_units(value: float) -> int:
    """Round half-up to a whole minor currency unit."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def incentive_for(
    carbon_saving: float,
    carbon_range: CarbonRange,
    band: IncentiveBand = IncentiveBand(),
) -> int:
    """
    Compute the reward for an item's carbon saving.

    Args:
        carbon_saving: The item's carbon saving
        carbon_range: Catalog-wide min/max carbon saving
        band: Reward band

    Returns:
        Reward in minor units, always within [band.min_reward, band.max_reward]
    """
    if not carbon_range.has_spread:
        return band.min_reward

    lo, hi = carbon_range.lo, carbon_range.hi
    clamped = min(max(carbon_saving or 0.0, lo), hi)
    ratio = (clamped - lo) / (hi - lo)
    reward = band.min_reward + ratio * (band.max_reward - band.min_reward)

    return min(max(round_minor_units(reward), band.min_reward), band.max_reward)


def effective_deposit(deposit_cents: int, carbon_saving: float, reward_cents: int) -> int:
    """
    Deposit charged (and refunded) per unit.

    A positive stored deposit wins. Otherwise items with an environmental
    saving fall back to the computed reward; items without one carry no
    returnable container and no deposit.
    """
    if deposit_cents and deposit_cents > 0:
        return deposit_cents
    if carbon_saving and carbon_saving > 0:
        return reward_cents
    return 0


def round_carbon(value: float) -> float:
    """Carbon values are reported with 3 decimals."""
    return round(value or 0.0, 3)


def round_water(value: float) -> float:
    """Water values are reported with 1 decimal."""
    return round(value or 0.0, 1)
