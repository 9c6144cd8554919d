"""Shared pytest fixtures: a temporary SQLite store per test with the demo
catalog seeded and a clock the tests control."""

from datetime import datetime, timedelta

import pytest

from api.services.kiosk import KioskService, build_kiosk
from core.config import KioskSettings
from storage.db import KioskStore
from storage.seed import seed_demo_data


class FakeClock:
    """Settable clock; starts at a fixed local time."""

    def __init__(self, start: datetime = datetime(2024, 3, 14, 10, 30, 0)):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    return KioskSettings(db_path=str(tmp_path / "kiosk.db"))


@pytest.fixture
def store(settings, clock):
    store = KioskStore(settings.db_path, clock=clock)
    seed_demo_data(store)
    yield store
    store.close()


@pytest.fixture
def kiosk(settings, store) -> KioskService:
    return build_kiosk(settings, store=store)


@pytest.fixture
def catalog(kiosk):
    return kiosk.catalog


@pytest.fixture
def lifecycle(kiosk):
    return kiosk.orders


@pytest.fixture
def recycling(kiosk):
    return kiosk.recycling


@pytest.fixture
def paid_order(kiosk):
    """Factory: create an order, confirm a successful payment, return its id."""
    def _paid_order(items, member_no="M001") -> str:
        receipt = kiosk.create_order(member_no, items)
        kiosk.confirm_payment(receipt.order_id, "success")
        return receipt.order_id
    return _paid_order
