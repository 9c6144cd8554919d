"""Models Package.

HTTP request and response contracts for the kiosk API. Domain models live
with their components (catalog.models, orders.models, recycling.models).
"""

from models.api_responses import (
    # Requests
    MemberResolveRequest,
    OrderItemRequest,
    CreateOrderRequest,
    PaymentConfirmRequest,
    RecyclePrecheckRequest,
    RecycleConfirmRequest,

    # Responses
    CatalogResponse,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    "MemberResolveRequest",
    "OrderItemRequest",
    "CreateOrderRequest",
    "PaymentConfirmRequest",
    "RecyclePrecheckRequest",
    "RecycleConfirmRequest",
    "CatalogResponse",
    "HealthResponse",
    "ErrorResponse",
]
