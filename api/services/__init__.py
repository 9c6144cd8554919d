"""API Services Package."""

from api.services.kiosk import KioskService, build_fulfillment, build_kiosk

__all__ = [
    "KioskService",
    "build_fulfillment",
    "build_kiosk",
]
