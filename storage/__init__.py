"""
Storage Package

SQLite storage for the kiosk ledger: the shared connection handle, the
versioned schema, named SQL statements and demo seed data.
"""

from .db import KioskStore
from .schema import MIGRATIONS, latest_version
from .seed import DEMO_ITEMS, DEMO_MEMBERS, add_customer, add_item, seed_demo_data

__all__ = [
    "KioskStore",
    "MIGRATIONS",
    "latest_version",
    "DEMO_ITEMS",
    "DEMO_MEMBERS",
    "add_item",
    "add_customer",
    "seed_demo_data",
]
