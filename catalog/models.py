"""Catalog and Customer Data Models.

This module defines the Pydantic models read by the Catalog Accessor:
- CatalogItem: A sellable item as stored in the items table
- CatalogEntry: An active item annotated with its computed reward
- Customer: A member resolved by member number
- CustomerSummary: The member fields shown on receipts and balances
"""

import sqlite3
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ItemStatus(str, Enum):
    """Whether an item can be sold and returned."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class CatalogItem(BaseModel):
    """A sellable item.

    Attributes:
        id: Item identifier (SKU)
        name: Display name
        category: Free-form category (e.g., "drink", "snack")
        barcode: Product barcode scanned at the return slot
        price_cents: Unit price in minor currency units
        deposit_cents: Stored deposit; 0 means derive it from the incentive
        lane_no: Vending lane/slot the item is dispensed from
        stock: Units left in the lane
        status: active or inactive
        carbon_saving: Carbon saved per unit returned (kg CO2e)
        water_saving: Water saved per unit returned (litres)
        image_url: Optional image reference for the front end
    """
    id: str = Field(..., description="Item identifier")
    name: str = Field(..., description="Display name")
    category: str = Field(default="general")
    barcode: Optional[str] = Field(default=None, description="Product barcode")
    price_cents: int = Field(..., ge=0, description="Unit price in minor units")
    deposit_cents: int = Field(default=0, ge=0, description="Stored deposit in minor units")
    lane_no: int = Field(default=0, description="Dispense lane")
    stock: int = Field(default=0, ge=0, description="Units in stock")
    status: ItemStatus = Field(default=ItemStatus.ACTIVE)
    carbon_saving: float = Field(default=0.0, ge=0)
    water_saving: float = Field(default=0.0, ge=0)
    image_url: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == ItemStatus.ACTIVE

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "CatalogItem":
        """Convert database row to CatalogItem"""
        return cls(
            id=row["id"],
            name=row["name"],
            category=row["category"],
            barcode=row["barcode"],
            price_cents=row["price_cents"],
            deposit_cents=row["deposit_cents"],
            lane_no=row["lane_no"],
            stock=row["stock"],
            status=ItemStatus(row["status"]),
            carbon_saving=row["carbon_saving"] or 0.0,
            water_saving=row["water_saving"] or 0.0,
            image_url=row["image_url"],
        )


class CatalogEntry(CatalogItem):
    """An active item as listed to the kiosk front end."""
    reward_cents: int = Field(..., description="Incentive computed from carbon saving")
    effective_deposit_cents: int = Field(..., description="Deposit charged and refunded per unit")


class CustomerSummary(BaseModel):
    """Member fields shown on receipts."""
    member_no: str
    name: str
    points: int = 0
    deposit_balance_cents: int = 0


class Customer(BaseModel):
    """A registered member.

    Members are created by external registration; the kiosk only resolves
    them and credits their deposit balance.
    """
    id: str
    member_no: str
    name: str = "Guest"
    points: int = 0
    deposit_balance_cents: int = 0
    status: str = "active"

    def summary(self) -> CustomerSummary:
        return CustomerSummary(
            member_no=self.member_no,
            name=self.name,
            points=self.points,
            deposit_balance_cents=self.deposit_balance_cents,
        )

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Customer":
        return cls(
            id=row["id"],
            member_no=row["member_no"],
            name=row["name"] or "Guest",
            points=row["points"],
            deposit_balance_cents=row["deposit_balance_cents"],
            status=row["status"],
        )
