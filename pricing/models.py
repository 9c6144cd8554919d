"""
Pricing Models

Defines data structures for:
- Price requests (item + quantity)
- Priced line items with price/deposit snapshots
- Aggregate order totals
"""

from typing import Any, List

from pydantic import BaseModel, Field

from catalog.incentive import round_carbon, round_water


class PriceRequest(BaseModel):
    """One requested (item, quantity) pair.

    Quantity is kept loose here; the engine coerces and clamps it.
    """
    item_id: str = Field(..., description="Catalog item id")
    quantity: Any = Field(default=1, description="Requested units (clamped to >= 1)")


class PricedLine(BaseModel):
    """
    A priced line item.

    Attributes:
        line_no: Position in the request
        item_id: Catalog item id
        item_name: Display name at pricing time
        quantity: Units (>= 1)
        unit_price_cents: Unit price captured at order time
        deposit_cents: Effective deposit captured at order time
        subtotal_cents: (unit_price + deposit) * quantity
        carbon_saving: Line carbon saving (item saving * quantity)
        water_saving: Line water saving (item saving * quantity)
    """
    line_no: int
    item_id: str
    item_name: str
    quantity: int = Field(..., ge=1)
    unit_price_cents: int
    deposit_cents: int
    subtotal_cents: int
    carbon_saving: float = 0.0
    water_saving: float = 0.0


class PricingResult(BaseModel):
    """Priced lines plus aggregate totals at full precision."""
    lines: List[PricedLine] = Field(default_factory=list)
    total_cents: int = 0
    deposit_total_cents: int = 0
    carbon_saving: float = 0.0
    water_saving: float = 0.0

    def rounded_carbon(self) -> float:
        return round_carbon(self.carbon_saving)

    def rounded_water(self) -> float:
        return round_water(self.water_saving)
