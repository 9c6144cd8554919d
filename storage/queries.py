"""Named SQL statements used by the kiosk components.

Statements are plain constants executed on the store's single connection;
sqlite3 keeps their compiled form in the connection's statement cache for
the lifetime of the store.
"""

# =============================================================================
# Catalog
# =============================================================================

LIST_ACTIVE_ITEMS = """
    SELECT * FROM items
    WHERE status = 'active'
    ORDER BY lane_no ASC, id ASC
"""

ACTIVE_CARBON_RANGE = """
    SELECT MIN(carbon_saving) AS lo, MAX(carbon_saving) AS hi
    FROM items
    WHERE status = 'active'
"""

FIND_ACTIVE_ITEM_BY_CODE = """
    SELECT * FROM items
    WHERE status = 'active' AND (id = ? OR barcode = ?)
    ORDER BY CASE WHEN id = ? THEN 0 ELSE 1 END
    LIMIT 1
"""

FIND_ACTIVE_CUSTOMER = """
    SELECT * FROM customers
    WHERE member_no = ? AND status = 'active'
"""

GET_CUSTOMER = """
    SELECT * FROM customers WHERE id = ?
"""


def select_items_by_ids(count: int) -> str:
    """SELECT for a fixed number of item ids (one placeholder per id)."""
    placeholders = ",".join("?" for _ in range(count))
    return f"SELECT * FROM items WHERE id IN ({placeholders})"


# =============================================================================
# Orders
# =============================================================================

INSERT_ORDER = """
    INSERT INTO orders
    (id, customer_id, total_cents, deposit_total_cents, carbon_saving,
     water_saving, refund_cents, status, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, 0, 'created', ?, ?)
"""

INSERT_ORDER_ITEM = """
    INSERT INTO order_items
    (id, order_id, line_no, item_id, quantity, unit_price_cents,
     deposit_cents, subtotal_cents, refunded_quantity)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0)
"""

GET_ORDER = """
    SELECT * FROM orders WHERE id = ?
"""

GET_ORDER_ITEMS = """
    SELECT oi.*, i.name AS item_name, i.lane_no AS lane_no
    FROM order_items oi
    JOIN items i ON i.id = oi.item_id
    WHERE oi.order_id = ?
    ORDER BY oi.line_no ASC
"""

TRANSITION_ORDER = """
    UPDATE orders
    SET status = ?, updated_at = ?
    WHERE id = ? AND status = ?
"""

COMPLETE_ORDER = """
    UPDATE orders
    SET status = 'done', refund_cents = 0, updated_at = ?
    WHERE id = ? AND status = ?
"""

FINISH_DISPENSE = """
    UPDATE orders
    SET status = 'done', refund_cents = ?, updated_at = ?
    WHERE id = ? AND status = 'dispensing'
"""

# =============================================================================
# Inventory
# =============================================================================

DECREMENT_STOCK = """
    UPDATE items
    SET stock = stock - ?
    WHERE id = ? AND stock >= ?
"""

GET_STOCK = """
    SELECT stock FROM items WHERE id = ?
"""

# =============================================================================
# Dispense simulation
# =============================================================================

INSERT_DISPENSE_ATTEMPT = """
    INSERT INTO dispense_log
    (id, order_id, item_id, lane_no, unit_no, attempt_no, result, created_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""

LIST_DISPENSE_ATTEMPTS = """
    SELECT * FROM dispense_log
    WHERE order_id = ?
    ORDER BY created_at ASC, rowid ASC
"""

# =============================================================================
# Deposit returns
# =============================================================================

# Several lines of one order may reference the same item; prefer the first
# line that still has units left to return.
FIND_RECEIPT_LINE = """
    SELECT oi.*, i.name AS item_name, i.carbon_saving AS carbon_saving,
           i.water_saving AS water_saving
    FROM order_items oi
    JOIN items i ON i.id = oi.item_id
    WHERE oi.order_id = ? AND oi.item_id = ?
    ORDER BY CASE WHEN oi.refunded_quantity < oi.quantity THEN 0 ELSE 1 END,
             oi.line_no ASC
    LIMIT 1
"""

COUNT_ACCEPTED_RETURNS_ON_DAY = """
    SELECT COUNT(*) AS c FROM return_records
    WHERE customer_id = ? AND item_id = ? AND status = 'accepted'
      AND substr(created_at, 1, 10) = ?
"""

INSERT_RETURN_RECORD = """
    INSERT INTO return_records
    (id, customer_id, source, code, item_id, order_item_id,
     refundable_cents, carbon_credit, water_credit, status, created_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

CREDIT_DEPOSIT_BALANCE = """
    UPDATE customers
    SET deposit_balance_cents = deposit_balance_cents + ?
    WHERE id = ?
"""

GET_DEPOSIT_BALANCE = """
    SELECT deposit_balance_cents FROM customers WHERE id = ?
"""

INCREMENT_REFUNDED_QUANTITY = """
    UPDATE order_items
    SET refunded_quantity = refunded_quantity + 1
    WHERE id = ? AND refunded_quantity < quantity
"""

GET_RETURN_RECORD = """
    SELECT * FROM return_records WHERE id = ?
"""

# =============================================================================
# Metrics
# =============================================================================

_ORDER_AGGREGATES = """
    COALESCE(SUM(CASE WHEN status = 'done'
                      THEN total_cents - refund_cents END), 0) AS revenue_cents,
    COALESCE(SUM(CASE WHEN status IN ('paid', 'dispensing', 'done')
                      THEN deposit_total_cents END), 0) AS deposit_liability_cents,
    COALESCE(SUM(CASE WHEN status IN ('paid', 'dispensing', 'done')
                      THEN carbon_saving END), 0) AS carbon_saving,
    COALESCE(SUM(CASE WHEN status IN ('paid', 'dispensing', 'done')
                      THEN water_saving END), 0) AS water_saving,
    COUNT(CASE WHEN status = 'done' THEN 1 END) AS orders_done
"""

_RETURN_AGGREGATES = """
    COALESCE(SUM(CASE WHEN status = 'accepted'
                      THEN refundable_cents END), 0) AS deposit_refunded_cents,
    COALESCE(SUM(CASE WHEN status = 'accepted'
                      THEN carbon_credit END), 0) AS recycled_carbon,
    COALESCE(SUM(CASE WHEN status = 'accepted'
                      THEN water_credit END), 0) AS recycled_water,
    COUNT(CASE WHEN status = 'accepted' THEN 1 END) AS returns_accepted,
    COUNT(CASE WHEN status = 'rejected' THEN 1 END) AS returns_rejected
"""

ORDER_TOTALS_ALL = f"SELECT {_ORDER_AGGREGATES} FROM orders"

ORDER_TOTALS_BY_DAY = f"""
    SELECT substr(created_at, 1, 10) AS day, {_ORDER_AGGREGATES}
    FROM orders
    WHERE substr(created_at, 1, 10) BETWEEN ? AND ?
    GROUP BY day
"""

RETURN_TOTALS_ALL = f"SELECT {_RETURN_AGGREGATES} FROM return_records"

RETURN_TOTALS_BY_DAY = f"""
    SELECT substr(created_at, 1, 10) AS day, {_RETURN_AGGREGATES}
    FROM return_records
    WHERE substr(created_at, 1, 10) BETWEEN ? AND ?
    GROUP BY day
"""
