"""
Fulfillment strategies.

What a successful payment does to an order:

- DirectCommitFulfillment (default): payment success commits stock for
  every line at once and finishes the order (created -> done). Short
  stock fails the payment confirmation and leaves the order untouched.

- DispenseSimulationFulfillment (legacy kiosk flow): payment success only
  marks the order paid. A later dispense call moves it through
  dispensing, tries each unit up to max_attempts times against a
  DispenseOutcomeProvider, refunds units that never came out, and ends
  in done.

The dispense hardware is modelled by DispenseOutcomeProvider so tests can
script exact outcomes instead of relying on randomness.
"""

import random
import uuid
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING, Iterable, List, Optional

from core.errors import InvalidState
from core.observability import get_logger
from storage import queries

from .models import (
    DispenseLineReport,
    DispenseReport,
    DispenseResult,
    Order,
    OrderStatus,
)

if TYPE_CHECKING:
    from .lifecycle import OrderLifecycle


logger = get_logger(__name__)


# =============================================================================
# Dispense outcome providers
# =============================================================================

class DispenseOutcomeProvider(ABC):
    """Source of dispense attempt results."""

    @abstractmethod
    def attempt(self, item_id: str, lane_no: Optional[int], attempt_no: int) -> DispenseResult:
        """Result of one attempt to release one unit from a lane."""


class RandomDispenser(DispenseOutcomeProvider):
    """
    Randomized lane simulation.

    Each attempt succeeds with `success_rate`; failures are split evenly
    between a jam and an empty lane.
    """

    def __init__(self, success_rate: float = 0.8, rng: Optional[random.Random] = None):
        self.success_rate = success_rate
        self.rng = rng or random.Random()

    def attempt(self, item_id: str, lane_no: Optional[int], attempt_no: int) -> DispenseResult:
        if self.rng.random() < self.success_rate:
            return DispenseResult.SUCCESS
        return DispenseResult.JAM if self.rng.random() < 0.5 else DispenseResult.EMPTY


class ScriptedDispenser(DispenseOutcomeProvider):
    """Replays a fixed sequence of results, then keeps returning `default`."""

    def __init__(
        self,
        results: Iterable[DispenseResult],
        default: DispenseResult = DispenseResult.SUCCESS,
    ):
        self._results = deque(DispenseResult(r) for r in results)
        self.default = default
        self.calls: List[str] = []

    def attempt(self, item_id: str, lane_no: Optional[int], attempt_no: int) -> DispenseResult:
        self.calls.append(item_id)
        if self._results:
            return self._results.popleft()
        return self.default


# =============================================================================
# Strategies
# =============================================================================

class FulfillmentStrategy(ABC):
    """How payment success turns into released goods."""
    name = "base"

    @abstractmethod
    def on_payment_success(self, lifecycle: "OrderLifecycle", order: Order) -> OrderStatus:
        """
        Apply a successful payment to a `created` order.

        Runs inside the confirm_payment transaction; raising rolls the
        confirmation back.

        Returns:
            The order's new status
        """

    @abstractmethod
    def dispense(self, lifecycle: "OrderLifecycle", order: Order) -> DispenseReport:
        """Release the goods of a `paid` order."""


class DirectCommitFulfillment(FulfillmentStrategy):
    """Payment success commits stock and completes the order."""
    name = "direct"

    def on_payment_success(self, lifecycle: "OrderLifecycle", order: Order) -> OrderStatus:
        completed = lifecycle.complete_order(order.id)
        return completed.status

    def dispense(self, lifecycle: "OrderLifecycle", order: Order) -> DispenseReport:
        completed = lifecycle.complete_order(order.id)
        lines = lifecycle.order_lines(order.id)
        return DispenseReport(
            order_id=order.id,
            status=completed.status,
            refund_cents=0,
            items=[
                DispenseLineReport(
                    item_id=line.item_id,
                    name=line.item_name,
                    success=line.quantity,
                    failed=0,
                    refund_each_cents=line.unit_price_cents + line.deposit_cents,
                )
                for line in lines
            ],
        )


class DispenseSimulationFulfillment(FulfillmentStrategy):
    """
    Legacy per-unit dispense with partial refunds.

    Usage:
        fulfillment = DispenseSimulationFulfillment(ScriptedDispenser(["jam", "success"]))
        lifecycle = OrderLifecycle(store, catalog, fulfillment=fulfillment)
    """
    name = "dispense"

    def __init__(self, provider: Optional[DispenseOutcomeProvider] = None, max_attempts: int = 3):
        self.provider = provider or RandomDispenser()
        self.max_attempts = max_attempts

    def on_payment_success(self, lifecycle: "OrderLifecycle", order: Order) -> OrderStatus:
        lifecycle.transition(order.id, OrderStatus.CREATED, OrderStatus.PAID)
        return OrderStatus.PAID

    def dispense(self, lifecycle: "OrderLifecycle", order: Order) -> DispenseReport:
        if order.status != OrderStatus.PAID:
            raise InvalidState(
                f"order status must be 'paid', got {order.status.value}",
                {"order_id": order.id, "status": order.status.value},
            )

        store = lifecycle.store
        refund_cents = 0
        reports: List[DispenseLineReport] = []

        with store.transaction() as conn:
            lifecycle.transition(order.id, OrderStatus.PAID, OrderStatus.DISPENSING)

            for line in lifecycle.order_lines(order.id):
                unit_total = line.unit_price_cents + line.deposit_cents
                report = DispenseLineReport(
                    item_id=line.item_id,
                    name=line.item_name,
                    refund_each_cents=unit_total,
                )

                for unit_no in range(1, line.quantity + 1):
                    dispensed = False
                    for attempt_no in range(1, self.max_attempts + 1):
                        result = self._attempt(lifecycle, line.item_id, line.lane_no, attempt_no)
                        conn.execute(queries.INSERT_DISPENSE_ATTEMPT, (
                            str(uuid.uuid4()),
                            order.id,
                            line.item_id,
                            line.lane_no,
                            unit_no,
                            attempt_no,
                            result.value,
                            store.now_iso(),
                        ))
                        if result == DispenseResult.SUCCESS:
                            dispensed = True
                            break

                    if dispensed:
                        report.success += 1
                    else:
                        report.failed += 1
                        refund_cents += unit_total

                reports.append(report)

            conn.execute(queries.FINISH_DISPENSE, (refund_cents, store.now_iso(), order.id))

        logger.info(
            "Order dispensed",
            extra_fields={"order_id": order.id, "refund_cents": refund_cents},
        )
        return DispenseReport(
            order_id=order.id,
            status=OrderStatus.DONE,
            refund_cents=refund_cents,
            items=reports,
        )

    def _attempt(
        self,
        lifecycle: "OrderLifecycle",
        item_id: str,
        lane_no: Optional[int],
        attempt_no: int,
    ) -> DispenseResult:
        # An empty lane fails without touching the hardware
        if not lifecycle.inventory.stock_of(item_id):
            return DispenseResult.EMPTY

        result = self.provider.attempt(item_id, lane_no, attempt_no)
        if result != DispenseResult.SUCCESS:
            return result

        # The unit only counts once its stock decrement has taken effect
        if lifecycle.inventory.decrement_stock(item_id, 1):
            return DispenseResult.SUCCESS
        return DispenseResult.EMPTY
