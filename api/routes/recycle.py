"""Container return endpoints."""

from fastapi import APIRouter, Depends

from api.dependencies import get_kiosk
from api.services.kiosk import KioskService
from models.api_responses import RecycleConfirmRequest, RecyclePrecheckRequest
from recycling.models import PrecheckResult, ReturnReceipt


router = APIRouter()


@router.post("/precheck", response_model=PrecheckResult)
def recycle_precheck(
    request: RecyclePrecheckRequest,
    kiosk: KioskService = Depends(get_kiosk),
) -> PrecheckResult:
    """Check a scanned container before accepting it. Writes nothing."""
    return kiosk.recycle_precheck(request.member_no, request.code)


@router.post("/confirm", response_model=ReturnReceipt)
def recycle_confirm(
    request: RecycleConfirmRequest,
    kiosk: KioskService = Depends(get_kiosk),
) -> ReturnReceipt:
    """Accept or reject a returned container and credit its deposit."""
    return kiosk.recycle_confirm(request.member_no, request.code, request.decision)
