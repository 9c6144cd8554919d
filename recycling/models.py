"""Deposit Recycling Data Models.

This module defines the Pydantic models for container returns:
- RefundTarget: What a scanned code resolves to
- PrecheckResult: Advisory answer shown before the container is accepted
- ReturnRecord: The append-only audit row written for every decision
- ReturnReceipt: The result of confirming a return
"""

import sqlite3
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# Owner recorded for returns made without a member number
GUEST_OWNER = "guest"


class ReturnSource(str, Enum):
    """How the returned container was identified."""
    BARCODE = "barcode"   # Item id or product barcode
    RECEIPT = "receipt"   # order_id|item_id printed on the receipt


class ReturnStatus(str, Enum):
    """Outcome recorded for a return."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ReturnDecision(str, Enum):
    """Operator/machine decision passed to confirm."""
    ACCEPT = "accept"
    REJECT = "reject"


class RefundTarget(BaseModel):
    """A scanned code resolved to one refundable unit.

    Attributes:
        source: barcode or receipt
        code: The raw scanned code
        item_id: Resolved catalog item
        item_name: Item display name
        refundable_cents: Deposit refunded for one unit
        carbon_saving: Item carbon saving per unit
        water_saving: Item water saving per unit
        order_id: Receipt mode only, the order on the receipt
        order_item_id: Receipt mode only, the matched line item
        remaining_quantity: Receipt mode only, units still returnable
    """
    source: ReturnSource
    code: str
    item_id: str
    item_name: str
    refundable_cents: int = Field(..., ge=0)
    carbon_saving: float = 0.0
    water_saving: float = 0.0
    order_id: Optional[str] = None
    order_item_id: Optional[str] = None
    remaining_quantity: Optional[int] = None


class PrecheckResult(BaseModel):
    """Advisory result of scanning a container."""
    ok: bool = True
    source: ReturnSource
    item_id: str
    item_name: str
    refundable_cents: int
    carbon_credit: float = Field(..., description="Rounded to 3 decimals")
    water_credit: float = Field(..., description="Rounded to 1 decimal")
    remaining_quantity: Optional[int] = None
    returns_today: Optional[int] = None
    warning: Optional[str] = None


class ReturnRecord(BaseModel):
    """An immutable return audit row."""
    id: str
    customer_id: str
    source: ReturnSource
    code: str
    item_id: str
    order_item_id: Optional[str] = None
    refundable_cents: int = 0
    carbon_credit: float = 0.0
    water_credit: float = 0.0
    status: ReturnStatus
    created_at: str

    @property
    def is_guest(self) -> bool:
        return self.customer_id == GUEST_OWNER

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "ReturnRecord":
        return cls(
            id=row["id"],
            customer_id=row["customer_id"],
            source=ReturnSource(row["source"]),
            code=row["code"],
            item_id=row["item_id"],
            order_item_id=row["order_item_id"],
            refundable_cents=row["refundable_cents"],
            carbon_credit=row["carbon_credit"],
            water_credit=row["water_credit"],
            status=ReturnStatus(row["status"]),
            created_at=row["created_at"],
        )


class ReturnReceipt(BaseModel):
    """Result of confirming a return."""
    return_id: str
    status: ReturnStatus
    refunded_cents: Optional[int] = None
    new_balance_cents: Optional[int] = None
    carbon_credit: float = 0.0
    water_credit: float = 0.0
