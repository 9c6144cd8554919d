"""Kiosk database schema as versioned migrations.

Each migration is applied once, in order, inside its own transaction and
recorded in schema_version. Existing databases are brought forward by
applying the versions they are missing; columns are never patched in ad hoc.

Tables:
- items: sellable catalog rows (price, deposit, lane, stock, savings)
- customers: members resolved by case-insensitive member number
- orders: order headers with aggregate totals and lifecycle status
- order_items: line items with price/deposit snapshots and refund counter
- return_records: append-only deposit return audit trail
- dispense_log: per-attempt results of the dispense simulation
"""

from typing import List, Tuple


MIGRATIONS: List[Tuple[int, str, List[str]]] = [
    (1, "core ledger tables", [
        """
        CREATE TABLE IF NOT EXISTS items (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            category TEXT NOT NULL DEFAULT 'general',
            barcode TEXT UNIQUE,
            price_cents INTEGER NOT NULL CHECK (price_cents >= 0),
            deposit_cents INTEGER NOT NULL DEFAULT 0 CHECK (deposit_cents >= 0),
            lane_no INTEGER NOT NULL DEFAULT 0,
            stock INTEGER NOT NULL DEFAULT 0 CHECK (stock >= 0),
            status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'inactive')),
            carbon_saving REAL NOT NULL DEFAULT 0 CHECK (carbon_saving >= 0),
            water_saving REAL NOT NULL DEFAULT 0 CHECK (water_saving >= 0),
            image_url TEXT
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_items_status_lane
        ON items(status, lane_no)
        """,
        """
        CREATE TABLE IF NOT EXISTS customers (
            id TEXT PRIMARY KEY,
            member_no TEXT NOT NULL UNIQUE COLLATE NOCASE,
            name TEXT,
            points INTEGER NOT NULL DEFAULT 0,
            deposit_balance_cents INTEGER NOT NULL DEFAULT 0,
            status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'inactive'))
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS orders (
            id TEXT PRIMARY KEY,
            customer_id TEXT REFERENCES customers(id),
            total_cents INTEGER NOT NULL,
            deposit_total_cents INTEGER NOT NULL,
            carbon_saving REAL NOT NULL DEFAULT 0,
            water_saving REAL NOT NULL DEFAULT 0,
            refund_cents INTEGER NOT NULL DEFAULT 0,
            status TEXT NOT NULL CHECK (
                status IN ('created', 'paid', 'dispensing', 'done', 'canceled')
            ),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_orders_created
        ON orders(created_at)
        """,
        """
        CREATE TABLE IF NOT EXISTS order_items (
            id TEXT PRIMARY KEY,
            order_id TEXT NOT NULL REFERENCES orders(id),
            line_no INTEGER NOT NULL,
            item_id TEXT NOT NULL REFERENCES items(id),
            quantity INTEGER NOT NULL CHECK (quantity > 0),
            unit_price_cents INTEGER NOT NULL,
            deposit_cents INTEGER NOT NULL,
            subtotal_cents INTEGER NOT NULL,
            refunded_quantity INTEGER NOT NULL DEFAULT 0
                CHECK (refunded_quantity >= 0 AND refunded_quantity <= quantity)
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_order_items_lookup
        ON order_items(order_id, item_id)
        """,
        """
        CREATE TABLE IF NOT EXISTS return_records (
            id TEXT PRIMARY KEY,
            customer_id TEXT NOT NULL,
            source TEXT NOT NULL CHECK (source IN ('barcode', 'receipt')),
            code TEXT NOT NULL,
            item_id TEXT NOT NULL,
            order_item_id TEXT,
            refundable_cents INTEGER NOT NULL DEFAULT 0,
            carbon_credit REAL NOT NULL DEFAULT 0,
            water_credit REAL NOT NULL DEFAULT 0,
            status TEXT NOT NULL CHECK (status IN ('accepted', 'rejected')),
            created_at TEXT NOT NULL
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_return_records_daily
        ON return_records(customer_id, item_id, status, created_at)
        """,
        """
        CREATE TRIGGER IF NOT EXISTS return_records_no_update
        BEFORE UPDATE ON return_records
        BEGIN
            SELECT RAISE(ABORT, 'return_records is append-only');
        END
        """,
        """
        CREATE TRIGGER IF NOT EXISTS return_records_no_delete
        BEFORE DELETE ON return_records
        BEGIN
            SELECT RAISE(ABORT, 'return_records is append-only');
        END
        """,
    ]),
    (2, "dispense simulation log", [
        """
        CREATE TABLE IF NOT EXISTS dispense_log (
            id TEXT PRIMARY KEY,
            order_id TEXT NOT NULL REFERENCES orders(id),
            item_id TEXT NOT NULL,
            lane_no INTEGER,
            unit_no INTEGER NOT NULL,
            attempt_no INTEGER NOT NULL,
            result TEXT NOT NULL CHECK (result IN ('success', 'jam', 'empty')),
            created_at TEXT NOT NULL
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_dispense_log_order
        ON dispense_log(order_id)
        """,
    ]),
]


SCHEMA_VERSION_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY,
        description TEXT NOT NULL,
        applied_at TEXT NOT NULL
    )
"""


def latest_version() -> int:
    return MIGRATIONS[-1][0]
