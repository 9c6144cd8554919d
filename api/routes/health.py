"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends

from api.dependencies import get_kiosk
from api.services.kiosk import KioskService
from core import __version__
from core.errors import StorageFailure
from models.api_responses import HealthResponse


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(kiosk: KioskService = Depends(get_kiosk)) -> HealthResponse:
    """Health check endpoint; reports the schema version the store is on."""
    try:
        storage = f"up (schema v{kiosk.store.schema_version()})"
        status = "healthy"
    except StorageFailure:
        storage = "down"
        status = "degraded"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        services={
            "api": "up",
            "storage": storage,
            "fulfillment": kiosk.orders.fulfillment.name,
        },
    )


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness probe."""
    return {"status": "alive"}
