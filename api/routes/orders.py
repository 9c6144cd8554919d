"""Order, payment and dispense endpoints.

Handlers are plain functions: the store is synchronous SQLite, so FastAPI
runs them in its worker threadpool and KioskStore serializes access.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_kiosk
from api.services.kiosk import KioskService
from models.api_responses import CreateOrderRequest, PaymentConfirmRequest
from orders.models import DispenseLog, DispenseReport, OrderDetail, OrderReceipt, PaymentResult


router = APIRouter()


@router.post("/orders", response_model=OrderReceipt, status_code=201)
def create_order(
    request: CreateOrderRequest,
    kiosk: KioskService = Depends(get_kiosk),
) -> OrderReceipt:
    """Price and create an order in `created` status."""
    items = [item.model_dump() for item in request.items]
    return kiosk.create_order(request.member_no, items)


@router.get("/orders/{order_id}", response_model=OrderDetail)
def get_order(order_id: str, kiosk: KioskService = Depends(get_kiosk)) -> OrderDetail:
    return kiosk.get_order(order_id)


@router.post("/payments/{order_id}/confirm", response_model=PaymentResult)
def confirm_payment(
    order_id: str,
    request: PaymentConfirmRequest,
    kiosk: KioskService = Depends(get_kiosk),
) -> PaymentResult:
    """Apply the payment terminal's outcome (success, fail or timeout)."""
    return kiosk.confirm_payment(order_id, request.outcome)


@router.post("/dispense/{order_id}", response_model=DispenseReport)
def dispense_order(order_id: str, kiosk: KioskService = Depends(get_kiosk)) -> DispenseReport:
    """Release the goods of a paid order (dispense fulfillment mode)."""
    return kiosk.dispense_order(order_id)


@router.get("/dispense/{order_id}", response_model=DispenseLog)
def dispense_log(order_id: str, kiosk: KioskService = Depends(get_kiosk)) -> DispenseLog:
    """Order status with every recorded dispense attempt."""
    return kiosk.dispense_log(order_id)
