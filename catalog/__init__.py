"""
Catalog Package

Active items, member lookup and the carbon-based deposit incentive.

Usage:
    from catalog import CatalogAccessor

    catalog = CatalogAccessor(store)
    entries = catalog.list_active()
    member = catalog.resolve_customer("M001")
"""

from .models import (
    ItemStatus,
    CatalogItem,
    CatalogEntry,
    Customer,
    CustomerSummary,
)

from .incentive import (
    IncentiveBand,
    CarbonRange,
    DEFAULT_MIN_REWARD,
    DEFAULT_MAX_REWARD,
    incentive_for,
    effective_deposit,
    round_minor_units,
    round_carbon,
    round_water,
)

from .accessor import CatalogAccessor

__all__ = [
    # Models
    "ItemStatus",
    "CatalogItem",
    "CatalogEntry",
    "Customer",
    "CustomerSummary",

    # Incentive
    "IncentiveBand",
    "CarbonRange",
    "DEFAULT_MIN_REWARD",
    "DEFAULT_MAX_REWARD",
    "incentive_for",
    "effective_deposit",
    "round_minor_units",
    "round_carbon",
    "round_water",

    # Accessor
    "CatalogAccessor",
]
