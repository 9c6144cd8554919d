"""
Order Models

Defines data structures for:
- Order lifecycle status and payment outcomes
- Orders and their line items as stored
- Results returned by the lifecycle operations
- Dispense simulation attempts and reports
"""

import sqlite3
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from catalog.incentive import round_carbon, round_water
from catalog.models import CustomerSummary
from pricing.models import PricedLine


class OrderStatus(str, Enum):
    """Order lifecycle states."""
    CREATED = "created"
    PAID = "paid"
    DISPENSING = "dispensing"
    DONE = "done"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DONE, OrderStatus.CANCELED)


class PaymentOutcome(str, Enum):
    """Result reported by the payment terminal."""
    SUCCESS = "success"
    FAIL = "fail"
    TIMEOUT = "timeout"


class DispenseResult(str, Enum):
    """Result of one dispense attempt."""
    SUCCESS = "success"
    JAM = "jam"
    EMPTY = "empty"


# =============================================================================
# Stored records
# =============================================================================

class Order(BaseModel):
    """
    Order header.

    Attributes:
        id: Order id (uuid4)
        customer_id: Owning customer, None for guest orders
        total_cents: Sum of line subtotals (price + deposit)
        deposit_total_cents: Sum of line deposits
        carbon_saving: Sum of line carbon savings, 3 decimals
        water_saving: Sum of line water savings, 1 decimal
        refund_cents: Amount refunded for units that could not be dispensed
        status: Lifecycle status
        created_at: Local ISO timestamp
        updated_at: Local ISO timestamp of the last transition
    """
    id: str
    customer_id: Optional[str] = None
    total_cents: int
    deposit_total_cents: int
    carbon_saving: float = 0.0
    water_saving: float = 0.0
    refund_cents: int = 0
    status: OrderStatus
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Order":
        return cls(
            id=row["id"],
            customer_id=row["customer_id"],
            total_cents=row["total_cents"],
            deposit_total_cents=row["deposit_total_cents"],
            carbon_saving=round_carbon(row["carbon_saving"]),
            water_saving=round_water(row["water_saving"]),
            refund_cents=row["refund_cents"] or 0,
            status=OrderStatus(row["status"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class OrderLine(BaseModel):
    """A stored line item with its order-time price snapshot."""
    id: str
    order_id: str
    line_no: int
    item_id: str
    item_name: str
    lane_no: Optional[int] = None
    quantity: int
    unit_price_cents: int
    deposit_cents: int
    subtotal_cents: int
    refunded_quantity: int = 0

    @property
    def refundable_quantity(self) -> int:
        return self.quantity - self.refunded_quantity

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "OrderLine":
        return cls(
            id=row["id"],
            order_id=row["order_id"],
            line_no=row["line_no"],
            item_id=row["item_id"],
            item_name=row["item_name"],
            lane_no=row["lane_no"],
            quantity=row["quantity"],
            unit_price_cents=row["unit_price_cents"],
            deposit_cents=row["deposit_cents"],
            subtotal_cents=row["subtotal_cents"],
            refunded_quantity=row["refunded_quantity"],
        )


# =============================================================================
# Operation results
# =============================================================================

class OrderReceipt(BaseModel):
    """Result of creating an order."""
    order_id: str
    status: OrderStatus
    total_cents: int
    deposit_total_cents: int
    carbon_saving: float = Field(..., description="Rounded to 3 decimals")
    water_saving: float = Field(..., description="Rounded to 1 decimal")
    lines: List[PricedLine] = Field(default_factory=list)


class PaymentResult(BaseModel):
    """Result of confirming a payment."""
    order_id: str
    status: OrderStatus


class OrderDetail(BaseModel):
    """Order header, lines joined with item names, and member summary."""
    order: Order
    lines: List[OrderLine] = Field(default_factory=list)
    customer: Optional[CustomerSummary] = None


class DispenseAttempt(BaseModel):
    """One logged dispense attempt."""
    id: str
    order_id: str
    item_id: str
    lane_no: Optional[int] = None
    unit_no: int
    attempt_no: int
    result: DispenseResult
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "DispenseAttempt":
        return cls(
            id=row["id"],
            order_id=row["order_id"],
            item_id=row["item_id"],
            lane_no=row["lane_no"],
            unit_no=row["unit_no"],
            attempt_no=row["attempt_no"],
            result=DispenseResult(row["result"]),
            created_at=row["created_at"],
        )


class DispenseLineReport(BaseModel):
    """Per-line dispense outcome."""
    item_id: str
    name: str
    success: int = 0
    failed: int = 0
    refund_each_cents: int = 0


class DispenseReport(BaseModel):
    """Result of releasing the goods of a paid order."""
    order_id: str
    status: OrderStatus
    refund_cents: int = 0
    items: List[DispenseLineReport] = Field(default_factory=list)


class DispenseLog(BaseModel):
    """Order header plus every dispense attempt, oldest first."""
    order: Order
    attempts: List[DispenseAttempt] = Field(default_factory=list)
