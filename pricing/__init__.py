"""Pricing Package - turns requested items into priced order lines."""

from .models import PriceRequest, PricedLine, PricingResult
from .engine import PricingEngine, coerce_quantity

__all__ = [
    "PriceRequest",
    "PricedLine",
    "PricingResult",
    "PricingEngine",
    "coerce_quantity",
]
