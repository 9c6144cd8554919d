"""API Routes Package."""

from api.routes import health, catalog, orders, recycle, metrics

__all__ = [
    "health",
    "catalog",
    "orders",
    "recycle",
    "metrics",
]
