"""
Demo catalog and members.

Seeding is idempotent: rows are inserted with INSERT OR IGNORE keyed on
their ids, so re-running never duplicates or overwrites data.
"""

from typing import Any, Dict, List, Optional

from core.observability import get_logger
from storage.db import KioskStore


logger = get_logger(__name__)


# Bottled drinks carry a deposit (explicit or derived from their carbon
# saving); snacks have no returnable container.
DEMO_ITEMS: List[Dict[str, Any]] = [
    {
        "id": "SKU-COLA", "name": "Cola 330ml", "category": "drink",
        "barcode": "4710000000011", "price_cents": 100, "deposit_cents": 20,
        "lane_no": 1, "stock": 12, "carbon_saving": 0.05, "water_saving": 1.2,
    },
    {
        "id": "SKU-WATER", "name": "Mineral Water 600ml", "category": "drink",
        "barcode": "4710000000028", "price_cents": 80, "deposit_cents": 0,
        "lane_no": 2, "stock": 12, "carbon_saving": 0.08, "water_saving": 2.0,
    },
    {
        "id": "SKU-TEA", "name": "Green Tea 500ml", "category": "drink",
        "barcode": "4710000000035", "price_cents": 120, "deposit_cents": 30,
        "lane_no": 3, "stock": 6, "carbon_saving": 0.12, "water_saving": 1.5,
    },
    {
        "id": "SKU-CHIPS", "name": "Potato Chips", "category": "snack",
        "barcode": "4710000000042", "price_cents": 50, "deposit_cents": 0,
        "lane_no": 4, "stock": 20, "carbon_saving": 0.0, "water_saving": 0.0,
    },
    {
        "id": "SKU-LEMON", "name": "Lemon Soda 330ml", "category": "drink",
        "barcode": "4710000000059", "price_cents": 90, "deposit_cents": 20,
        "lane_no": 5, "stock": 4, "carbon_saving": 0.05, "water_saving": 1.0,
        "status": "inactive",
    },
]

DEMO_MEMBERS: List[Dict[str, Any]] = [
    {"id": "cust-m001", "member_no": "M001", "name": "Demo Member", "points": 120},
    {"id": "cust-m002", "member_no": "M002", "name": "Second Member", "points": 0},
    {"id": "cust-m003", "member_no": "M003", "name": "Closed Account", "status": "inactive"},
]


def add_item(store: KioskStore, item: Dict[str, Any]) -> bool:
    """
    Insert one catalog item unless its id already exists.

    Returns:
        True if a row was inserted
    """
    with store.transaction() as conn:
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO items
            (id, name, category, barcode, price_cents, deposit_cents, lane_no,
             stock, status, carbon_saving, water_saving, image_url)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                item["id"],
                item["name"],
                item.get("category", "general"),
                item.get("barcode"),
                item["price_cents"],
                item.get("deposit_cents", 0),
                item.get("lane_no", 0),
                item.get("stock", 0),
                item.get("status", "active"),
                item.get("carbon_saving", 0.0),
                item.get("water_saving", 0.0),
                item.get("image_url"),
            ),
        )
        return cursor.rowcount == 1


def add_customer(store: KioskStore, customer: Dict[str, Any]) -> bool:
    """Insert one member unless its id or member number already exists."""
    with store.transaction() as conn:
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO customers
            (id, member_no, name, points, deposit_balance_cents, status)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                customer["id"],
                customer["member_no"],
                customer.get("name"),
                customer.get("points", 0),
                customer.get("deposit_balance_cents", 0),
                customer.get("status", "active"),
            ),
        )
        return cursor.rowcount == 1


def seed_demo_data(
    store: KioskStore,
    items: Optional[List[Dict[str, Any]]] = None,
    members: Optional[List[Dict[str, Any]]] = None,
) -> int:
    """
    Seed the demo catalog and members.

    Returns:
        Number of rows inserted (0 when already seeded)
    """
    items = DEMO_ITEMS if items is None else items
    members = DEMO_MEMBERS if members is None else members

    inserted = 0
    with store.transaction():
        for item in items:
            inserted += add_item(store, item)
        for member in members:
            inserted += add_customer(store, member)

    logger.info(
        f"Seeded {inserted} demo rows",
        extra_fields={"items": len(items), "members": len(members)},
    )
    return inserted
