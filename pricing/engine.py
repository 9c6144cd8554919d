"""
Pricing Engine

Turns a list of (item, quantity) requests into priced line items:
1. Snapshot every requested item in one catalog read
2. Resolve each request against the snapshot (unknown -> LineItemNotFound)
3. Clamp quantity to >= 1 and price with the effective deposit
4. Accumulate money, deposit and environmental totals
"""

from typing import Any, Dict, Iterable, List, Mapping, Union

from catalog.accessor import CatalogAccessor
from catalog.models import CatalogItem
from core.errors import EmptyOrder, LineItemNotFound, ValidationError
from core.observability import get_logger

from .models import PriceRequest, PricedLine, PricingResult


logger = get_logger(__name__)

RequestLike = Union[PriceRequest, Mapping[str, Any]]

# Keeps line subtotals well inside a 64-bit SQLite INTEGER
MAX_QUANTITY = 10_000


def coerce_quantity(value: Any) -> int:
    """
    Integer quantity clamped to at least 1.

    Missing values count as 1. Fractions are truncated, so "2.7" orders 2.
    Quantities above MAX_QUANTITY are rejected.
    """
    if value is None or value == "":
        return 1
    if isinstance(value, bool):
        raise ValidationError(f"invalid quantity: {value!r}")
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"invalid quantity: {value!r}", {"quantity": str(value)})
    if quantity > MAX_QUANTITY:
        raise ValidationError(
            f"quantity exceeds {MAX_QUANTITY}: {quantity}",
            {"quantity": quantity, "max_quantity": MAX_QUANTITY},
        )
    return max(1, quantity)


def _to_request(raw: RequestLike) -> PriceRequest:
    if isinstance(raw, PriceRequest):
        return raw
    if not isinstance(raw, Mapping) or not raw.get("item_id"):
        raise ValidationError("item_id required for every line")
    return PriceRequest(item_id=str(raw["item_id"]), quantity=raw.get("quantity", 1))


class PricingEngine:
    """
    Prices purchase requests against a single catalog snapshot.

    Usage:
        engine = PricingEngine(catalog)
        result = engine.price([{"item_id": "SKU-1", "quantity": 2}])
    """

    def __init__(self, catalog: CatalogAccessor):
        self.catalog = catalog

    def price(self, requests: Iterable[RequestLike]) -> PricingResult:
        """
        Price a request list.

        Args:
            requests: PriceRequest objects or {"item_id", "quantity"} mappings

        Returns:
            PricingResult with one line per request, in request order

        Raises:
            EmptyOrder: If no requests were given
            LineItemNotFound: If any item id does not resolve to an active item
        """
        parsed = [_to_request(r) for r in (requests or [])]
        if not parsed:
            raise EmptyOrder("items required")

        snapshot = self._snapshot(parsed)
        carbon_range = self.catalog.carbon_range()
        deposits: Dict[str, int] = {}

        result = PricingResult()
        lines: List[PricedLine] = []

        for line_no, request in enumerate(parsed, start=1):
            item = snapshot.get(request.item_id)
            if item is None:
                logger.warning(
                    f"Pricing aborted: item not found {request.item_id}",
                    extra_fields={"item_id": request.item_id},
                )
                raise LineItemNotFound(
                    f"item not found: {request.item_id}",
                    {"item_id": request.item_id},
                )

            if item.id not in deposits:
                deposits[item.id] = self.catalog.effective_deposit(item, carbon_range)
            deposit = deposits[item.id]

            quantity = coerce_quantity(request.quantity)
            subtotal = (item.price_cents + deposit) * quantity

            lines.append(PricedLine(
                line_no=line_no,
                item_id=item.id,
                item_name=item.name,
                quantity=quantity,
                unit_price_cents=item.price_cents,
                deposit_cents=deposit,
                subtotal_cents=subtotal,
                carbon_saving=item.carbon_saving * quantity,
                water_saving=item.water_saving * quantity,
            ))

            result.total_cents += subtotal
            result.deposit_total_cents += deposit * quantity
            result.carbon_saving += item.carbon_saving * quantity
            result.water_saving += item.water_saving * quantity

        result.lines = lines
        logger.debug(
            "Priced request",
            extra_fields={
                "lines": len(lines),
                "total_cents": result.total_cents,
                "deposit_total_cents": result.deposit_total_cents,
            },
        )
        return result

    def _snapshot(self, requests: List[PriceRequest]) -> Dict[str, CatalogItem]:
        """Active items for the deduplicated request ids."""
        items = self.catalog.get_items(r.item_id for r in requests)
        return {item_id: item for item_id, item in items.items() if item.is_active}
