"""
Deposit Recycling Tests

Validates container returns:
1. Receipt mode refunds each unit once, then AlreadyFullyRefunded
2. Barcode mode refunds the effective deposit with no per-order cap
3. Daily cap warns (advisory) or rejects (when enforced)
4. Guests are recorded without balance credit
5. Return records are append-only
"""

import sqlite3

import pytest

from core.errors import (
    AlreadyFullyRefunded,
    ItemNotFound,
    MemberNotFound,
    NoDepositOnItem,
    ReceiptNotFound,
    ReturnLimitExceeded,
    ValidationError,
)
from recycling.ledger import RecyclingLedger
from recycling.models import GUEST_OWNER, ReturnSource, ReturnStatus


def balance(store, member_id="cust-m001"):
    return store.fetchone(
        "SELECT deposit_balance_cents FROM customers WHERE id = ?", (member_id,)
    )["deposit_balance_cents"]


def refunded_quantity(store, order_id, item_id):
    return store.fetchone(
        "SELECT refunded_quantity FROM order_items WHERE order_id = ? AND item_id = ?",
        (order_id, item_id),
    )["refunded_quantity"]


class TestReceiptReturns:

    def test_each_unit_refunded_once(self, kiosk, store, paid_order):
        order_id = paid_order([{"item_id": "SKU-COLA", "quantity": 3}])
        code = f"{order_id}|SKU-COLA"

        for expected in (1, 2, 3):
            receipt = kiosk.recycle_confirm("M001", code, "accept")
            assert receipt.status == ReturnStatus.ACCEPTED
            assert receipt.refunded_cents == 20
            assert refunded_quantity(store, order_id, "SKU-COLA") == expected

        with pytest.raises(AlreadyFullyRefunded):
            kiosk.recycle_confirm("M001", code, "accept")

        assert refunded_quantity(store, order_id, "SKU-COLA") == 3
        assert balance(store) == 60

    def test_receipt_refund_uses_order_time_deposit(self, kiosk, store, paid_order):
        order_id = paid_order([{"item_id": "SKU-COLA", "quantity": 1}])
        store._conn.execute("UPDATE items SET deposit_cents = 50 WHERE id = 'SKU-COLA'")

        check = kiosk.recycle_precheck("M001", f"{order_id}|SKU-COLA")
        assert check.refundable_cents == 20
        assert check.source == ReturnSource.RECEIPT
        assert check.remaining_quantity == 1

    def test_receipt_return_keeps_order_refund(self, kiosk, paid_order):
        order_id = paid_order([{"item_id": "SKU-COLA", "quantity": 1}])
        kiosk.recycle_confirm("M001", f"{order_id}|SKU-COLA")
        assert kiosk.get_order(order_id).order.refund_cents == 0
        assert kiosk.get_order(order_id).lines[0].refundable_quantity == 0

    def test_repeated_item_lines_refund_in_line_order(self, kiosk, store, paid_order):
        order_id = paid_order([
            {"item_id": "SKU-COLA", "quantity": 1},
            {"item_id": "SKU-CHIPS", "quantity": 1},
            {"item_id": "SKU-COLA", "quantity": 2},
        ])
        code = f"{order_id}|SKU-COLA"

        def refunded_by_line():
            rows = store.fetchall(
                "SELECT line_no, refunded_quantity FROM order_items"
                " WHERE order_id = ? AND item_id = 'SKU-COLA' ORDER BY line_no",
                (order_id,),
            )
            return [(row["line_no"], row["refunded_quantity"]) for row in rows]

        kiosk.recycle_confirm("M001", code)
        assert refunded_by_line() == [(1, 1), (3, 0)]

        assert kiosk.recycle_precheck("M001", code).remaining_quantity == 2
        kiosk.recycle_confirm("M001", code)
        kiosk.recycle_confirm("M001", code)
        assert refunded_by_line() == [(1, 1), (3, 2)]

        with pytest.raises(AlreadyFullyRefunded):
            kiosk.recycle_confirm("M001", code)
        assert balance(store) == 60

    def test_unknown_receipt(self, kiosk, paid_order):
        order_id = paid_order([{"item_id": "SKU-COLA", "quantity": 1}])
        with pytest.raises(ReceiptNotFound):
            kiosk.recycle_precheck("M001", f"{order_id}|SKU-TEA")
        with pytest.raises(ReceiptNotFound):
            kiosk.recycle_precheck("M001", "missing|SKU-COLA")

    def test_receipt_line_without_deposit(self, kiosk, paid_order):
        order_id = paid_order([{"item_id": "SKU-CHIPS", "quantity": 1}])
        with pytest.raises(NoDepositOnItem):
            kiosk.recycle_confirm("M001", f"{order_id}|SKU-CHIPS")

    def test_precheck_does_not_write(self, kiosk, store, paid_order):
        order_id = paid_order([{"item_id": "SKU-COLA", "quantity": 1}])
        kiosk.recycle_precheck("M001", f"{order_id}|SKU-COLA")
        kiosk.recycle_precheck("M001", f"{order_id}|SKU-COLA")
        assert refunded_quantity(store, order_id, "SKU-COLA") == 0
        assert store.fetchone("SELECT COUNT(*) AS c FROM return_records")["c"] == 0


class TestBarcodeReturns:

    def test_barcode_refunds_effective_deposit(self, kiosk, store):
        receipt = kiosk.recycle_confirm("M001", "4710000000028")
        assert receipt.refunded_cents == 1167
        assert receipt.new_balance_cents == 1167
        assert balance(store) == 1167

    def test_credits_scaled_by_ratio(self, kiosk):
        check = kiosk.recycle_precheck("M001", "SKU-TEA")
        assert check.carbon_credit == 0.096
        assert check.water_credit == 1.2

    def test_no_per_order_cap_in_barcode_mode(self, kiosk):
        for _ in range(7):
            kiosk.recycle_confirm("M002", "SKU-COLA")

    def test_item_without_deposit(self, kiosk):
        with pytest.raises(NoDepositOnItem):
            kiosk.recycle_precheck("M001", "SKU-CHIPS")

    def test_unknown_and_inactive_codes(self, kiosk):
        with pytest.raises(ItemNotFound):
            kiosk.recycle_precheck("M001", "0000")
        with pytest.raises(ItemNotFound):
            kiosk.recycle_precheck("M001", "SKU-LEMON")

    def test_blank_code(self, kiosk):
        with pytest.raises(ValidationError):
            kiosk.recycle_confirm("M001", "  ")

    def test_unknown_member(self, kiosk):
        with pytest.raises(MemberNotFound):
            kiosk.recycle_confirm("M404", "SKU-COLA")


class TestDecisionsAndGuests:

    def test_reject_records_zero_value(self, kiosk, recycling, store):
        receipt = kiosk.recycle_confirm("M001", "SKU-COLA", "reject")
        assert receipt.status == ReturnStatus.REJECTED
        assert balance(store) == 0

        record = recycling.get_return(receipt.return_id)
        assert record.status == ReturnStatus.REJECTED
        assert record.refundable_cents == 0
        assert record.carbon_credit == 0.0

    def test_unknown_decision(self, kiosk):
        with pytest.raises(ValidationError):
            kiosk.recycle_confirm("M001", "SKU-COLA", "maybe")

    def test_guest_return(self, kiosk, recycling, store):
        receipt = kiosk.recycle_confirm(None, "SKU-COLA")
        assert receipt.status == ReturnStatus.ACCEPTED
        assert receipt.refunded_cents == 20
        assert receipt.new_balance_cents is None

        record = recycling.get_return(receipt.return_id)
        assert record.customer_id == GUEST_OWNER
        assert record.is_guest
        assert balance(store) == 0

    def test_guest_precheck_has_no_cap_count(self, kiosk):
        check = kiosk.recycle_precheck("", "SKU-COLA")
        assert check.returns_today is None
        assert check.warning is None


class TestDailyCap:

    def test_warning_at_cap_is_advisory(self, kiosk, store):
        for n in range(5):
            check = kiosk.recycle_precheck("M001", "SKU-COLA")
            assert check.returns_today == n
            assert check.warning is None
            kiosk.recycle_confirm("M001", "SKU-COLA")

        check = kiosk.recycle_precheck("M001", "SKU-COLA")
        assert check.returns_today == 5
        assert check.warning

        # Advisory: the sixth return is still accepted
        receipt = kiosk.recycle_confirm("M001", "SKU-COLA")
        assert receipt.status == ReturnStatus.ACCEPTED
        assert balance(store) == 120

    def test_cap_counts_per_item_and_day(self, kiosk, clock):
        for _ in range(5):
            kiosk.recycle_confirm("M001", "SKU-COLA")

        assert kiosk.recycle_precheck("M001", "SKU-TEA").warning is None
        assert kiosk.recycle_precheck("M002", "SKU-COLA").warning is None

        clock.advance(days=1)
        assert kiosk.recycle_precheck("M001", "SKU-COLA").returns_today == 0

    def test_rejected_returns_do_not_count(self, kiosk):
        for _ in range(5):
            kiosk.recycle_confirm("M001", "SKU-COLA", "reject")
        assert kiosk.recycle_precheck("M001", "SKU-COLA").returns_today == 0

    def test_enforced_cap_rejects(self, store, catalog):
        ledger = RecyclingLedger(store, catalog, daily_cap=2, enforce_daily_cap=True)
        ledger.confirm("M001", "SKU-COLA")
        ledger.confirm("M001", "SKU-COLA")

        with pytest.raises(ReturnLimitExceeded):
            ledger.confirm("M001", "SKU-COLA")
        assert balance(store) == 40


class TestReturnRecords:

    def test_records_are_append_only(self, kiosk, store):
        receipt = kiosk.recycle_confirm("M001", "SKU-COLA")

        with pytest.raises(sqlite3.DatabaseError, match="append-only"):
            store._conn.execute(
                "UPDATE return_records SET refundable_cents = 0 WHERE id = ?",
                (receipt.return_id,),
            )
        with pytest.raises(sqlite3.DatabaseError, match="append-only"):
            store._conn.execute("DELETE FROM return_records")

    def test_failed_confirm_writes_nothing(self, kiosk, store, paid_order):
        order_id = paid_order([{"item_id": "SKU-COLA", "quantity": 1}])
        kiosk.recycle_confirm("M001", f"{order_id}|SKU-COLA")
        with pytest.raises(AlreadyFullyRefunded):
            kiosk.recycle_confirm("M001", f"{order_id}|SKU-COLA")

        assert store.fetchone("SELECT COUNT(*) AS c FROM return_records")["c"] == 1
        assert balance(store) == 20
