"""
Orders Package

Order creation, payment confirmation, stock commitment and the legacy
dispense simulation.

Usage:
    from orders import OrderLifecycle

    lifecycle = OrderLifecycle(store, catalog)
    receipt = lifecycle.create_order("M001", [{"item_id": "SKU-1", "quantity": 2}])
    lifecycle.confirm_payment(receipt.order_id, "success")
"""

from .models import (
    # Enums
    OrderStatus,
    PaymentOutcome,
    DispenseResult,

    # Records
    Order,
    OrderLine,
    OrderReceipt,
    OrderDetail,
    PaymentResult,
    DispenseAttempt,
    DispenseLineReport,
    DispenseReport,
    DispenseLog,
)

from .inventory import InventoryLedger

from .fulfillment import (
    DispenseOutcomeProvider,
    RandomDispenser,
    ScriptedDispenser,
    FulfillmentStrategy,
    DirectCommitFulfillment,
    DispenseSimulationFulfillment,
)

from .lifecycle import OrderLifecycle, parse_outcome

__all__ = [
    # Enums
    "OrderStatus",
    "PaymentOutcome",
    "DispenseResult",

    # Records
    "Order",
    "OrderLine",
    "OrderReceipt",
    "OrderDetail",
    "PaymentResult",
    "DispenseAttempt",
    "DispenseLineReport",
    "DispenseReport",
    "DispenseLog",

    # Components
    "InventoryLedger",
    "OrderLifecycle",
    "parse_outcome",

    # Fulfillment
    "DispenseOutcomeProvider",
    "RandomDispenser",
    "ScriptedDispenser",
    "FulfillmentStrategy",
    "DirectCommitFulfillment",
    "DispenseSimulationFulfillment",
]
