"""
Kiosk Service

The single entry point the HTTP routes (and scripts) call. Owns one
KioskStore and wires the catalog, pricing, order, recycling and metrics
components onto it according to KioskSettings.

Usage:
    kiosk = build_kiosk(KioskSettings.from_env())
    receipt = kiosk.create_order("M001", [{"item_id": "SKU-COLA", "quantity": 2}])
    kiosk.confirm_payment(receipt.order_id, "success")
"""

from typing import Any, Iterable, List, Mapping, Optional, Union

from catalog.accessor import CatalogAccessor
from catalog.incentive import IncentiveBand
from catalog.models import CatalogEntry, Customer
from core.config import KioskSettings
from core.observability import get_logger
from orders.fulfillment import (
    DirectCommitFulfillment,
    DispenseOutcomeProvider,
    DispenseSimulationFulfillment,
    FulfillmentStrategy,
    RandomDispenser,
)
from orders.lifecycle import OrderLifecycle
from orders.models import (
    DispenseLog,
    DispenseReport,
    OrderDetail,
    OrderReceipt,
    PaymentOutcome,
    PaymentResult,
)
from pricing.engine import PricingEngine
from pricing.models import PriceRequest
from recycling.ledger import RecyclingLedger
from recycling.models import PrecheckResult, ReturnDecision, ReturnReceipt
from reporting.metrics import MetricsAggregator, MetricsSummary
from storage.db import Clock, KioskStore


logger = get_logger(__name__)


class KioskService:
    """Facade over the kiosk components sharing one store."""

    def __init__(
        self,
        store: KioskStore,
        catalog: CatalogAccessor,
        orders: OrderLifecycle,
        recycling: RecyclingLedger,
        metrics: MetricsAggregator,
    ):
        self.store = store
        self.catalog = catalog
        self.orders = orders
        self.recycling = recycling
        self.metrics = metrics

    def close(self) -> None:
        self.store.close()

    # =========================================================================
    # Catalog and members
    # =========================================================================

    def list_catalog(self) -> List[CatalogEntry]:
        return self.catalog.list_active()

    def resolve_customer(self, member_no: str) -> Customer:
        return self.catalog.resolve_customer(member_no)

    # =========================================================================
    # Orders
    # =========================================================================

    def create_order(
        self,
        member_no: Optional[str],
        items: Iterable[Union[PriceRequest, Mapping[str, Any]]],
    ) -> OrderReceipt:
        return self.orders.create_order(member_no, items)

    def confirm_payment(self, order_id: str, outcome: Union[str, PaymentOutcome]) -> PaymentResult:
        return self.orders.confirm_payment(order_id, outcome)

    def get_order(self, order_id: str) -> OrderDetail:
        return self.orders.get_order(order_id)

    def dispense_order(self, order_id: str) -> DispenseReport:
        return self.orders.dispense_order(order_id)

    def dispense_log(self, order_id: str) -> DispenseLog:
        return self.orders.dispense_log(order_id)

    # =========================================================================
    # Returns and metrics
    # =========================================================================

    def recycle_precheck(self, member_no: Optional[str], code: str) -> PrecheckResult:
        return self.recycling.precheck(member_no, code)

    def recycle_confirm(
        self,
        member_no: Optional[str],
        code: str,
        decision: Union[str, ReturnDecision, None] = ReturnDecision.ACCEPT,
    ) -> ReturnReceipt:
        return self.recycling.confirm(member_no, code, decision)

    def metrics_summary(self) -> MetricsSummary:
        return self.metrics.summary()


def build_fulfillment(
    settings: KioskSettings,
    dispenser: Optional[DispenseOutcomeProvider] = None,
) -> FulfillmentStrategy:
    """Fulfillment strategy selected by KIOSK_FULFILLMENT_MODE."""
    if settings.fulfillment_mode == DispenseSimulationFulfillment.name:
        return DispenseSimulationFulfillment(
            provider=dispenser or RandomDispenser(settings.dispense_success_rate),
            max_attempts=settings.dispense_max_attempts,
        )
    return DirectCommitFulfillment()


def build_kiosk(
    settings: Optional[KioskSettings] = None,
    clock: Optional[Clock] = None,
    dispenser: Optional[DispenseOutcomeProvider] = None,
    store: Optional[KioskStore] = None,
) -> KioskService:
    """
    Open the store and assemble every component from settings.

    Args:
        settings: Kiosk settings (defaults to KioskSettings.from_env())
        clock: Injected "now" for row timestamps and calendar dates
        dispenser: Dispense outcome provider for the legacy dispense mode
        store: An already-open store to use instead of settings.db_path
    """
    settings = settings or KioskSettings.from_env()
    store = store or KioskStore(settings.db_path, clock=clock)

    catalog = CatalogAccessor(store, IncentiveBand(settings.min_reward, settings.max_reward))
    orders = OrderLifecycle(
        store,
        catalog,
        pricing=PricingEngine(catalog),
        fulfillment=build_fulfillment(settings, dispenser),
    )
    recycling = RecyclingLedger(
        store,
        catalog,
        daily_cap=settings.daily_return_cap,
        credit_ratio=settings.return_credit_ratio,
        receipt_separator=settings.receipt_separator,
        enforce_daily_cap=settings.enforce_daily_cap,
    )

    logger.info(
        "Kiosk assembled",
        extra_fields={
            "db_path": store.db_path,
            "fulfillment": orders.fulfillment.name,
            "enforce_daily_cap": settings.enforce_daily_cap,
        },
    )
    return KioskService(store, catalog, orders, recycling, MetricsAggregator(store))
