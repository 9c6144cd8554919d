"""
Dispense Simulation Tests

Validates the legacy fulfillment mode with a scripted outcome provider:
1. Payment success only marks the order paid
2. Each unit is retried up to max_attempts times
3. Units that never come out are refunded (price + deposit)
4. Every attempt is logged
"""

import random

import pytest

from api.services.kiosk import build_kiosk
from core.config import KioskSettings
from core.errors import InvalidState
from orders.fulfillment import (
    DispenseSimulationFulfillment,
    RandomDispenser,
    ScriptedDispenser,
)
from orders.models import DispenseResult, OrderStatus


@pytest.fixture
def dispense_settings(settings):
    settings.fulfillment_mode = "dispense"
    settings.dispense_max_attempts = 3
    return settings


def make_kiosk(store, settings, results):
    dispenser = ScriptedDispenser(results)
    return build_kiosk(settings, store=store, dispenser=dispenser), dispenser


class TestDispenseSimulation:

    def test_payment_success_marks_paid(self, store, dispense_settings):
        kiosk, _ = make_kiosk(store, dispense_settings, [])
        receipt = kiosk.create_order("M001", [{"item_id": "SKU-COLA", "quantity": 2}])

        result = kiosk.confirm_payment(receipt.order_id, "success")

        assert result.status == OrderStatus.PAID
        assert kiosk.orders.inventory.stock_of("SKU-COLA") == 12

    def test_all_units_dispensed(self, store, dispense_settings):
        kiosk, dispenser = make_kiosk(store, dispense_settings, [])
        receipt = kiosk.create_order("M001", [{"item_id": "SKU-COLA", "quantity": 2}])
        kiosk.confirm_payment(receipt.order_id, "success")

        report = kiosk.dispense_order(receipt.order_id)

        assert report.status == OrderStatus.DONE
        assert report.refund_cents == 0
        assert report.items[0].success == 2
        assert report.items[0].failed == 0
        assert len(dispenser.calls) == 2
        assert kiosk.orders.inventory.stock_of("SKU-COLA") == 10

    def test_retry_then_partial_refund(self, store, dispense_settings):
        kiosk, _ = make_kiosk(store, dispense_settings, [
            # unit 1: jam, then success
            "jam", "success",
            # unit 2: three failures
            "jam", "empty", "jam",
        ])
        receipt = kiosk.create_order("M001", [{"item_id": "SKU-COLA", "quantity": 2}])
        kiosk.confirm_payment(receipt.order_id, "success")

        report = kiosk.dispense_order(receipt.order_id)

        assert report.items[0].success == 1
        assert report.items[0].failed == 1
        assert report.refund_cents == 120
        assert kiosk.orders.inventory.stock_of("SKU-COLA") == 11

        order = kiosk.get_order(receipt.order_id).order
        assert order.status == OrderStatus.DONE
        assert order.refund_cents == 120

        log = kiosk.dispense_log(receipt.order_id)
        assert [a.result for a in log.attempts] == [
            DispenseResult.JAM, DispenseResult.SUCCESS,
            DispenseResult.JAM, DispenseResult.EMPTY, DispenseResult.JAM,
        ]
        assert [(a.unit_no, a.attempt_no) for a in log.attempts] == [
            (1, 1), (1, 2), (2, 1), (2, 2), (2, 3),
        ]

    def test_empty_lane_fails_without_provider(self, store, dispense_settings):
        kiosk, dispenser = make_kiosk(store, dispense_settings, [])
        receipt = kiosk.create_order("M001", [{"item_id": "SKU-TEA", "quantity": 1}])
        kiosk.confirm_payment(receipt.order_id, "success")
        store._conn.execute("UPDATE items SET stock = 0 WHERE id = 'SKU-TEA'")

        report = kiosk.dispense_order(receipt.order_id)

        assert dispenser.calls == []
        assert report.items[0].failed == 1
        assert report.refund_cents == 150

    def test_dispense_twice_rejected(self, store, dispense_settings):
        kiosk, _ = make_kiosk(store, dispense_settings, [])
        receipt = kiosk.create_order("M001", [{"item_id": "SKU-COLA"}])
        kiosk.confirm_payment(receipt.order_id, "success")
        kiosk.dispense_order(receipt.order_id)

        with pytest.raises(InvalidState):
            kiosk.dispense_order(receipt.order_id)

    def test_dispense_before_payment_rejected(self, store, dispense_settings):
        kiosk, _ = make_kiosk(store, dispense_settings, [])
        receipt = kiosk.create_order("M001", [{"item_id": "SKU-COLA"}])

        with pytest.raises(InvalidState):
            kiosk.dispense_order(receipt.order_id)
        assert kiosk.get_order(receipt.order_id).order.status == OrderStatus.CREATED

    def test_strategy_selected_from_settings(self, store, dispense_settings):
        kiosk, _ = make_kiosk(store, dispense_settings, [])
        assert isinstance(kiosk.orders.fulfillment, DispenseSimulationFulfillment)
        assert kiosk.orders.fulfillment.max_attempts == 3


class TestRandomDispenser:

    def test_seeded_rng_is_deterministic(self):
        a = RandomDispenser(0.5, random.Random(7))
        b = RandomDispenser(0.5, random.Random(7))
        assert [a.attempt("x", 1, 1) for _ in range(20)] == [b.attempt("x", 1, 1) for _ in range(20)]

    def test_always_succeeds_at_rate_one(self):
        dispenser = RandomDispenser(1.0)
        assert {dispenser.attempt("x", 1, n) for n in range(10)} == {DispenseResult.SUCCESS}

    def test_never_succeeds_at_rate_zero(self):
        dispenser = RandomDispenser(0.0, random.Random(1))
        results = {dispenser.attempt("x", 1, n) for n in range(50)}
        assert DispenseResult.SUCCESS not in results
