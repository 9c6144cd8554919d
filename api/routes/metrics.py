"""Dashboard metrics endpoint."""

from fastapi import APIRouter, Depends

from api.dependencies import get_kiosk
from api.services.kiosk import KioskService
from reporting.metrics import MetricsSummary


router = APIRouter()


@router.get("/summary", response_model=MetricsSummary)
def metrics_summary(kiosk: KioskService = Depends(get_kiosk)) -> MetricsSummary:
    """Today, all-time and 7-day revenue, deposit and recycling figures."""
    return kiosk.metrics_summary()
