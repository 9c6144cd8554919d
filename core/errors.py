"""Kiosk error taxonomy.

Every failure the core can surface derives from KioskError. Each class
carries a stable machine-readable code and the HTTP status the API layer
renders it with, so routes never translate errors by hand.

Validation, not-found and invalid-state errors are raised before any row
is touched. Storage failures are raised after the enclosing transaction
has been rolled back.
"""

from typing import Any, Dict, Optional


class KioskError(Exception):
    """Base exception for all kiosk errors."""
    code = "kiosk_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
        }


# =============================================================================
# Caller errors (400)
# =============================================================================

class ValidationError(KioskError):
    """Missing or malformed input."""
    code = "validation_error"
    status_code = 400


class EmptyOrder(ValidationError):
    """An order was requested with no items."""
    code = "empty_order"


class NoDepositOnItem(ValidationError):
    """The returned item carries no refundable deposit."""
    code = "no_deposit"


class ReturnLimitExceeded(ValidationError):
    """Daily return cap reached while the cap is enforced."""
    code = "return_limit_exceeded"


# =============================================================================
# Not found (404)
# =============================================================================

class NotFoundError(KioskError):
    """Referenced customer, item, order or receipt does not exist."""
    code = "not_found"
    status_code = 404


class MemberNotFound(NotFoundError):
    code = "member_not_found"


class ItemNotFound(NotFoundError):
    code = "item_not_found"


# Pricing reports unknown line items with the same error
LineItemNotFound = ItemNotFound


class OrderNotFound(NotFoundError):
    code = "order_not_found"


class ReceiptNotFound(NotFoundError):
    code = "receipt_not_found"


# =============================================================================
# Lifecycle conflicts (409)
# =============================================================================

class InvalidState(KioskError):
    """Operation is not legal in the order's current status."""
    code = "invalid_state"
    status_code = 409


class InsufficientStock(KioskError):
    """Stock commitment could not be satisfied."""
    code = "insufficient_stock"
    status_code = 409


StockInsufficient = InsufficientStock


class AlreadyFullyRefunded(KioskError):
    """Every unit of the receipt line has already been returned."""
    code = "already_fully_refunded"
    status_code = 409


# =============================================================================
# Infrastructure (500)
# =============================================================================

class StorageFailure(KioskError):
    """An atomic write failed for infrastructure reasons."""
    code = "storage_failure"
    status_code = 500
