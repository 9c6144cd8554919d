"""
Deposit-Recycling Ledger

Accepts returned containers and credits their deposit:
1. Resolve the scanned code (receipt `order_id|item_id` or item id/barcode)
2. Check eligibility (line not exhausted, item carries a deposit)
3. Warn when the member has reached today's return cap for the item
4. On confirm, append a return record and credit the member atomically

Return records are append-only. Guests (no member number) are recorded
under the "guest" owner and receive no balance credit.
"""

import uuid
from typing import Optional, Union

from catalog.accessor import CatalogAccessor
from catalog.incentive import round_carbon, round_water
from catalog.models import Customer
from core.errors import (
    AlreadyFullyRefunded,
    ItemNotFound,
    NoDepositOnItem,
    ReceiptNotFound,
    ReturnLimitExceeded,
    ValidationError,
)
from core.observability import get_logger, with_correlation
from storage import queries
from storage.db import KioskStore

from .models import (
    GUEST_OWNER,
    PrecheckResult,
    RefundTarget,
    ReturnDecision,
    ReturnReceipt,
    ReturnRecord,
    ReturnSource,
    ReturnStatus,
)


logger = get_logger(__name__)

DEFAULT_DAILY_CAP = 5
DEFAULT_CREDIT_RATIO = 0.8


def parse_decision(decision: Union[str, ReturnDecision, None]) -> ReturnDecision:
    if decision is None or decision == "":
        return ReturnDecision.ACCEPT
    try:
        return ReturnDecision(decision)
    except ValueError:
        raise ValidationError(
            "decision must be accept or reject",
            {"decision": decision},
        )


class RecyclingLedger:
    """
    Container return ledger.

    Usage:
        ledger = RecyclingLedger(store, catalog)
        check = ledger.precheck("M001", "SKU-1")
        receipt = ledger.confirm("M001", "SKU-1", "accept")
    """

    def __init__(
        self,
        store: KioskStore,
        catalog: CatalogAccessor,
        daily_cap: int = DEFAULT_DAILY_CAP,
        credit_ratio: float = DEFAULT_CREDIT_RATIO,
        receipt_separator: str = "|",
        enforce_daily_cap: bool = False,
    ):
        """
        Args:
            store: Storage handle
            catalog: Catalog accessor for item and member lookups
            daily_cap: Accepted returns per member/item/day before warning
            credit_ratio: Share of an item's savings credited per return
            receipt_separator: Separator between order id and item id on receipts
            enforce_daily_cap: Reject over-cap returns instead of only warning
        """
        self.store = store
        self.catalog = catalog
        self.daily_cap = daily_cap
        self.credit_ratio = credit_ratio
        self.receipt_separator = receipt_separator
        self.enforce_daily_cap = enforce_daily_cap

    # =========================================================================
    # Code resolution
    # =========================================================================

    def resolve(self, code: str) -> RefundTarget:
        """
        Resolve a scanned code to one refundable unit.

        Raises:
            ValidationError: Blank code
            ReceiptNotFound: Receipt code does not match an order line
            AlreadyFullyRefunded: Every unit on the receipt line was returned
            ItemNotFound: Item id/barcode does not match an active item
            NoDepositOnItem: The unit carries no deposit
        """
        if code is None or not str(code).strip():
            raise ValidationError("code required")
        code = str(code).strip()

        if self.receipt_separator in code:
            target = self._resolve_receipt(code)
        else:
            target = self._resolve_catalog(code)

        if target.refundable_cents <= 0:
            raise NoDepositOnItem(
                "this item has no deposit",
                {"item_id": target.item_id},
            )
        return target

    def _resolve_receipt(self, code: str) -> RefundTarget:
        parts = code.split(self.receipt_separator)
        order_id, item_id = parts[0].strip(), parts[1].strip()
        if not order_id or not item_id:
            raise ReceiptNotFound("receipt not match", {"code": code})

        row = self.store.fetchone(queries.FIND_RECEIPT_LINE, (order_id, item_id))
        if row is None:
            raise ReceiptNotFound("receipt not match", {"code": code})

        remaining = row["quantity"] - row["refunded_quantity"]
        if remaining <= 0:
            raise AlreadyFullyRefunded(
                "already fully refunded",
                {"order_id": order_id, "item_id": item_id, "quantity": row["quantity"]},
            )

        return RefundTarget(
            source=ReturnSource.RECEIPT,
            code=code,
            item_id=item_id,
            item_name=row["item_name"],
            refundable_cents=row["deposit_cents"],
            carbon_saving=row["carbon_saving"] or 0.0,
            water_saving=row["water_saving"] or 0.0,
            order_id=order_id,
            order_item_id=row["id"],
            remaining_quantity=remaining,
        )

    def _resolve_catalog(self, code: str) -> RefundTarget:
        item = self.catalog.find_active(code)
        if item is None:
            raise ItemNotFound("item not found", {"code": code})

        return RefundTarget(
            source=ReturnSource.BARCODE,
            code=code,
            item_id=item.id,
            item_name=item.name,
            refundable_cents=self.catalog.effective_deposit(item),
            carbon_saving=item.carbon_saving,
            water_saving=item.water_saving,
        )

    # =========================================================================
    # Abuse cap
    # =========================================================================

    def returns_today(self, customer_id: str, item_id: str) -> int:
        """Accepted returns by this customer for this item on today's local date."""
        row = self.store.fetchone(
            queries.COUNT_ACCEPTED_RETURNS_ON_DAY,
            (customer_id, item_id, self.store.today()),
        )
        return row["c"] if row else 0

    def _cap_warning(self, count: int) -> Optional[str]:
        if count >= self.daily_cap:
            return f"Daily limit of {self.daily_cap} returns for this item reached; the return may be refused"
        return None

    # =========================================================================
    # Operations
    # =========================================================================

    def precheck(self, member_no: Optional[str], code: str) -> PrecheckResult:
        """
        Advisory check of a scanned container. Writes nothing.

        Returns:
            PrecheckResult with refundable amount, credits and an optional
            daily-cap warning (members only)
        """
        with with_correlation(member_no=member_no or None, return_code=code, operation="recycle_precheck"):
            if code is None or not str(code).strip():
                raise ValidationError("code required")
            customer = self.catalog.resolve_optional_customer(member_no)
            target = self.resolve(code)

            count = None
            warning = None
            if customer is not None:
                count = self.returns_today(customer.id, target.item_id)
                warning = self._cap_warning(count)
                if warning:
                    logger.warning(
                        "Daily return cap reached",
                        extra_fields={"item_id": target.item_id, "returns_today": count},
                    )

        return PrecheckResult(
            source=target.source,
            item_id=target.item_id,
            item_name=target.item_name,
            refundable_cents=target.refundable_cents,
            carbon_credit=round_carbon(target.carbon_saving * self.credit_ratio),
            water_credit=round_water(target.water_saving * self.credit_ratio),
            remaining_quantity=target.remaining_quantity,
            returns_today=count,
            warning=warning,
        )

    def confirm(
        self,
        member_no: Optional[str],
        code: str,
        decision: Union[str, ReturnDecision, None] = ReturnDecision.ACCEPT,
    ) -> ReturnReceipt:
        """
        Record the decision on a returned container.

        reject appends a zero-value rejected record. accept appends an
        accepted record, credits the member's deposit balance and, for
        receipt codes, counts one more returned unit on the order line.
        All writes commit together or not at all.

        Raises:
            ValidationError: Blank code or unknown decision
            MemberNotFound: member_no given but unknown
            ReceiptNotFound / ItemNotFound / AlreadyFullyRefunded / NoDepositOnItem:
                The code does not resolve to a refundable unit
            ReturnLimitExceeded: Only when the daily cap is enforced
            StorageFailure: The atomic write failed
        """
        decision = parse_decision(decision)

        with with_correlation(member_no=member_no or None, return_code=code, operation="recycle_confirm"):
            if code is None or not str(code).strip():
                raise ValidationError("code required")
            customer = self.catalog.resolve_optional_customer(member_no)
            owner = customer.id if customer else GUEST_OWNER
            return_id = str(uuid.uuid4())

            with self.store.transaction() as conn:
                target = self.resolve(code)

                if decision == ReturnDecision.REJECT:
                    self._append(conn, return_id, owner, target, ReturnStatus.REJECTED)
                    logger.info("Return rejected", extra_fields={"return_id": return_id})
                    return ReturnReceipt(return_id=return_id, status=ReturnStatus.REJECTED)

                if customer is not None and self.enforce_daily_cap:
                    count = self.returns_today(customer.id, target.item_id)
                    if count >= self.daily_cap:
                        raise ReturnLimitExceeded(
                            f"daily return limit of {self.daily_cap} reached",
                            {"item_id": target.item_id, "returns_today": count},
                        )

                self._append(conn, return_id, owner, target, ReturnStatus.ACCEPTED)

                if target.source == ReturnSource.RECEIPT:
                    cursor = conn.execute(queries.INCREMENT_REFUNDED_QUANTITY, (target.order_item_id,))
                    if cursor.rowcount != 1:
                        raise AlreadyFullyRefunded(
                            "already fully refunded",
                            {"order_id": target.order_id, "item_id": target.item_id},
                        )

                new_balance = None
                if customer is not None:
                    new_balance = self._credit(conn, customer, target.refundable_cents)

            logger.info(
                "Return accepted",
                extra_fields={
                    "return_id": return_id,
                    "source": target.source.value,
                    "refunded_cents": target.refundable_cents,
                    "guest": customer is None,
                },
            )

        return ReturnReceipt(
            return_id=return_id,
            status=ReturnStatus.ACCEPTED,
            refunded_cents=target.refundable_cents,
            new_balance_cents=new_balance,
            carbon_credit=round_carbon(target.carbon_saving * self.credit_ratio),
            water_credit=round_water(target.water_saving * self.credit_ratio),
        )

    def get_return(self, return_id: str) -> Optional[ReturnRecord]:
        row = self.store.fetchone(queries.GET_RETURN_RECORD, (return_id,))
        return ReturnRecord.from_row(row) if row else None

    # =========================================================================
    # Writes
    # =========================================================================

    def _append(self, conn, return_id: str, owner: str, target: RefundTarget, status: ReturnStatus) -> None:
        accepted = status == ReturnStatus.ACCEPTED
        conn.execute(queries.INSERT_RETURN_RECORD, (
            return_id,
            owner,
            target.source.value,
            target.code,
            target.item_id,
            target.order_item_id,
            target.refundable_cents if accepted else 0,
            target.carbon_saving * self.credit_ratio if accepted else 0.0,
            target.water_saving * self.credit_ratio if accepted else 0.0,
            status.value,
            self.store.now_iso(),
        ))

    def _credit(self, conn, customer: Customer, amount: int) -> int:
        conn.execute(queries.CREDIT_DEPOSIT_BALANCE, (amount, customer.id))
        row = conn.execute(queries.GET_DEPOSIT_BALANCE, (customer.id,)).fetchone()
        return row["deposit_balance_cents"]
