"""
Recycling Package

Deposit refunds for returned containers, by receipt code or barcode.
"""

from .models import (
    GUEST_OWNER,
    ReturnSource,
    ReturnStatus,
    ReturnDecision,
    RefundTarget,
    PrecheckResult,
    ReturnRecord,
    ReturnReceipt,
)

from .ledger import RecyclingLedger, parse_decision

__all__ = [
    "GUEST_OWNER",
    "ReturnSource",
    "ReturnStatus",
    "ReturnDecision",
    "RefundTarget",
    "PrecheckResult",
    "ReturnRecord",
    "ReturnReceipt",
    "RecyclingLedger",
    "parse_decision",
]
