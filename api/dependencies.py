"""Shared FastAPI dependencies."""

from fastapi import Request

from api.services.kiosk import KioskService


def get_kiosk(request: Request) -> KioskService:
    """The KioskService opened by the application lifespan."""
    return request.app.state.kiosk
