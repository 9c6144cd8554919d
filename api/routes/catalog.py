"""Catalog and member endpoints."""

from fastapi import APIRouter, Depends

from api.dependencies import get_kiosk
from api.services.kiosk import KioskService
from catalog.models import CustomerSummary
from models.api_responses import CatalogResponse, MemberResolveRequest


router = APIRouter()


@router.get("/catalog", response_model=CatalogResponse)
def list_catalog(kiosk: KioskService = Depends(get_kiosk)) -> CatalogResponse:
    """Active items in lane order with their reward and effective deposit."""
    items = kiosk.list_catalog()
    return CatalogResponse(items=items, total=len(items))


@router.post("/members/resolve", response_model=CustomerSummary)
def resolve_member(
    request: MemberResolveRequest,
    kiosk: KioskService = Depends(get_kiosk),
) -> CustomerSummary:
    """Look up an active member by member number."""
    return kiosk.resolve_customer(request.member_no).summary()
