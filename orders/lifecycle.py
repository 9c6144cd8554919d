"""
Order Lifecycle

Owns the order state machine:

    created --success--> done        (direct commit, default)
    created --success--> paid --dispense--> dispensing --> done   (dispense simulation)
    created --fail/timeout--> canceled

done and canceled are terminal. Every operation runs as one transaction
against the store: it either applies all of its row changes or none.
"""

import uuid
from typing import Any, Iterable, List, Mapping, Optional, Union

from catalog.accessor import CatalogAccessor
from core.errors import (
    EmptyOrder,
    InvalidState,
    OrderNotFound,
    ValidationError,
)
from core.observability import get_logger, with_correlation
from pricing.engine import PricingEngine
from pricing.models import PriceRequest
from storage import queries
from storage.db import KioskStore

from .fulfillment import DirectCommitFulfillment, FulfillmentStrategy
from .inventory import InventoryLedger
from .models import (
    DispenseAttempt,
    DispenseLog,
    DispenseReport,
    Order,
    OrderDetail,
    OrderLine,
    OrderReceipt,
    OrderStatus,
    PaymentOutcome,
    PaymentResult,
)


logger = get_logger(__name__)


def parse_outcome(outcome: Union[str, PaymentOutcome, None]) -> PaymentOutcome:
    """Payment outcome from terminal input; anything unknown is invalid."""
    try:
        return PaymentOutcome(outcome)
    except ValueError:
        raise ValidationError(
            "status invalid: expected one of success, fail, timeout",
            {"outcome": outcome},
        )


class OrderLifecycle:
    """
    Order creation, payment confirmation and stock commitment.

    Usage:
        lifecycle = OrderLifecycle(store, catalog)
        receipt = lifecycle.create_order("M001", [{"item_id": "SKU-1", "quantity": 2}])
        lifecycle.confirm_payment(receipt.order_id, "success")
    """

    def __init__(
        self,
        store: KioskStore,
        catalog: CatalogAccessor,
        pricing: Optional[PricingEngine] = None,
        inventory: Optional[InventoryLedger] = None,
        fulfillment: Optional[FulfillmentStrategy] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.pricing = pricing or PricingEngine(catalog)
        self.inventory = inventory or InventoryLedger(store)
        self.fulfillment = fulfillment or DirectCommitFulfillment()

    # =========================================================================
    # Creation
    # =========================================================================

    def create_order(
        self,
        member_no: Optional[str],
        items: Iterable[Union[PriceRequest, Mapping[str, Any]]],
    ) -> OrderReceipt:
        """
        Price and persist a new order in `created`.

        Args:
            member_no: Member number, or None for a guest order
            items: Requested (item_id, quantity) pairs

        Returns:
            OrderReceipt with the new order id and totals

        Raises:
            EmptyOrder: No items supplied
            MemberNotFound: member_no given but no active member has it
            LineItemNotFound: An item id does not resolve
        """
        items = list(items or [])
        if not items:
            raise EmptyOrder("items required")

        with with_correlation(member_no=member_no or None, operation="create_order"):
            customer = self.catalog.resolve_optional_customer(member_no)
            priced = self.pricing.price(items)

            order_id = str(uuid.uuid4())
            now = self.store.now_iso()

            with self.store.transaction() as conn:
                conn.execute(queries.INSERT_ORDER, (
                    order_id,
                    customer.id if customer else None,
                    priced.total_cents,
                    priced.deposit_total_cents,
                    priced.carbon_saving,
                    priced.water_saving,
                    now,
                    now,
                ))
                for line in priced.lines:
                    conn.execute(queries.INSERT_ORDER_ITEM, (
                        str(uuid.uuid4()),
                        order_id,
                        line.line_no,
                        line.item_id,
                        line.quantity,
                        line.unit_price_cents,
                        line.deposit_cents,
                        line.subtotal_cents,
                    ))

            logger.info(
                "Order created",
                extra_fields={
                    "order_id": order_id,
                    "lines": len(priced.lines),
                    "total_cents": priced.total_cents,
                },
            )

        return OrderReceipt(
            order_id=order_id,
            status=OrderStatus.CREATED,
            total_cents=priced.total_cents,
            deposit_total_cents=priced.deposit_total_cents,
            carbon_saving=priced.rounded_carbon(),
            water_saving=priced.rounded_water(),
            lines=priced.lines,
        )

    # =========================================================================
    # Payment and stock commitment
    # =========================================================================

    def confirm_payment(
        self,
        order_id: str,
        outcome: Union[str, PaymentOutcome],
    ) -> PaymentResult:
        """
        Apply the payment terminal's result to a `created` order.

        success hands the order to the fulfillment strategy; fail and
        timeout cancel it without touching stock.

        Raises:
            ValidationError: Unknown outcome
            OrderNotFound: Unknown order
            InvalidState: Order is not `created`
            InsufficientStock: Direct commit could not take the stock
                (the order stays `created`)
        """
        outcome = parse_outcome(outcome)

        with with_correlation(order_id=order_id, operation="confirm_payment"):
            with self.store.transaction():
                order = self.require_order(order_id)
                if order.status != OrderStatus.CREATED:
                    logger.warning(
                        f"Payment confirmation rejected in status {order.status.value}",
                        extra_fields={"outcome": outcome.value, "terminal": order.status.is_terminal},
                    )
                    raise InvalidState(
                        f"invalid status {order.status.value}",
                        {"order_id": order_id, "status": order.status.value},
                    )

                if outcome == PaymentOutcome.SUCCESS:
                    new_status = self.fulfillment.on_payment_success(self, order)
                else:
                    self.transition(order_id, OrderStatus.CREATED, OrderStatus.CANCELED)
                    new_status = OrderStatus.CANCELED

            logger.info(
                f"Payment {outcome.value}: order {new_status.value}",
                extra_fields={"fulfillment": self.fulfillment.name},
            )

        return PaymentResult(order_id=order_id, status=new_status)

    def complete_order(self, order_id: str) -> Order:
        """
        Commit stock for every line and finish the order.

        Accepts orders in `created` or `paid`. Either every line's stock is
        decremented and the order becomes `done` with a zero refund, or
        nothing changes.

        Raises:
            OrderNotFound: Unknown order
            InvalidState: Order is not `created` or `paid`
            InsufficientStock: Some line could not be covered
        """
        with with_correlation(order_id=order_id, operation="complete_order"):
            with self.store.transaction() as conn:
                order = self.require_order(order_id)
                if order.status not in (OrderStatus.CREATED, OrderStatus.PAID):
                    raise InvalidState(
                        f"cannot complete order in status {order.status.value}",
                        {"order_id": order_id, "status": order.status.value},
                    )

                for line in self.order_lines(order_id):
                    self.inventory.require_stock(line.item_id, line.quantity)

                now = self.store.now_iso()
                cursor = conn.execute(queries.COMPLETE_ORDER, (now, order_id, order.status.value))
                if cursor.rowcount != 1:
                    raise InvalidState(
                        "order changed while completing",
                        {"order_id": order_id},
                    )

            logger.info("Order completed", extra_fields={"previous_status": order.status.value})

        return order.model_copy(update={
            "status": OrderStatus.DONE,
            "refund_cents": 0,
            "updated_at": now,
        })

    # =========================================================================
    # Dispensing
    # =========================================================================

    def dispense_order(self, order_id: str) -> DispenseReport:
        """
        Release the goods of a `paid` order through the fulfillment strategy.

        Raises:
            OrderNotFound: Unknown order
            InvalidState: Order is not `paid`
        """
        with with_correlation(order_id=order_id, operation="dispense_order"):
            with self.store.transaction():
                order = self.require_order(order_id)
                if order.status != OrderStatus.PAID:
                    raise InvalidState(
                        f"order status must be 'paid', got {order.status.value}",
                        {"order_id": order_id, "status": order.status.value},
                    )
                return self.fulfillment.dispense(self, order)

    def dispense_log(self, order_id: str) -> DispenseLog:
        order = self.require_order(order_id)
        rows = self.store.fetchall(queries.LIST_DISPENSE_ATTEMPTS, (order_id,))
        return DispenseLog(order=order, attempts=[DispenseAttempt.from_row(r) for r in rows])

    # =========================================================================
    # Reads
    # =========================================================================

    def get_order(self, order_id: str) -> OrderDetail:
        """
        Order header, lines with item names, and member summary.

        Raises:
            OrderNotFound: Unknown order
        """
        order = self.require_order(order_id)
        customer = None
        if order.customer_id:
            found = self.catalog.get_customer(order.customer_id)
            customer = found.summary() if found else None
        return OrderDetail(order=order, lines=self.order_lines(order_id), customer=customer)

    def find_order(self, order_id: str) -> Optional[Order]:
        row = self.store.fetchone(queries.GET_ORDER, (order_id,))
        return Order.from_row(row) if row else None

    def require_order(self, order_id: str) -> Order:
        order = self.find_order(order_id)
        if order is None:
            raise OrderNotFound("order not found", {"order_id": order_id})
        return order

    def order_lines(self, order_id: str) -> List[OrderLine]:
        rows = self.store.fetchall(queries.GET_ORDER_ITEMS, (order_id,))
        return [OrderLine.from_row(r) for r in rows]

    # =========================================================================
    # Transitions
    # =========================================================================

    def transition(self, order_id: str, from_status: OrderStatus, to_status: OrderStatus) -> None:
        """
        Move an order between two states.

        The UPDATE is guarded on the expected current status, so a
        concurrent transition makes this one fail instead of overwriting it.
        """
        with self.store.transaction() as conn:
            cursor = conn.execute(
                queries.TRANSITION_ORDER,
                (to_status.value, self.store.now_iso(), order_id, from_status.value),
            )
            if cursor.rowcount != 1:
                raise InvalidState(
                    f"order is not {from_status.value}",
                    {"order_id": order_id, "expected": from_status.value},
                )
        logger.debug(
            f"Order {from_status.value} -> {to_status.value}",
            extra_fields={"order_id": order_id},
        )
