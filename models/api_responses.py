"""
API Request/Response Models for the Kiosk API.

These Pydantic models define the contracts between the kiosk front end and
the HTTP API. Domain results (OrderReceipt, ReturnReceipt, MetricsSummary,
...) are returned as-is; this module adds the request bodies and the few
envelopes the routes wrap around them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from catalog.models import CatalogEntry


# =============================================================================
# BASE MODELS
# =============================================================================

class RequestBase(BaseModel):
    """Base class for request bodies; unknown fields are rejected."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="forbid")


# =============================================================================
# MEMBERS
# =============================================================================

class MemberResolveRequest(RequestBase):
    member_no: str = Field(..., description="Member number (case-insensitive)")


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemRequest(RequestBase):
    """One requested line; quantity is coerced to an integer >= 1."""
    item_id: str = Field(..., description="Catalog item id")
    quantity: Any = Field(1, description="Units requested")


class CreateOrderRequest(RequestBase):
    member_no: Optional[str] = Field(None, description="Member number; omit for guests")
    items: List[OrderItemRequest] = Field(default_factory=list)


class PaymentConfirmRequest(RequestBase):
    outcome: str = Field(..., description="success, fail or timeout")


# =============================================================================
# RECYCLING
# =============================================================================

class RecyclePrecheckRequest(RequestBase):
    member_no: Optional[str] = Field(None, description="Member number; omit for guests")
    code: str = Field(..., description="Receipt code (order_id|item_id), item id or barcode")


class RecycleConfirmRequest(RecyclePrecheckRequest):
    decision: Optional[str] = Field("accept", description="accept or reject")


# =============================================================================
# RESPONSES
# =============================================================================

class CatalogResponse(BaseModel):
    items: List[CatalogEntry]
    total: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str
    services: Dict[str, str]


class ErrorResponse(BaseModel):
    """Body returned for every KioskError."""
    error: str
    code: str
    details: Dict[str, Any] = Field(default_factory=dict)
