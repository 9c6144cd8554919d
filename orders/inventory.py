"""Inventory Ledger.

The only code path that mutates item stock. Each decrement is a single
conditional UPDATE, so the check and the write happen in one atomic step
and stock can never go negative, whoever else is decrementing.
"""

from typing import Optional

from core.errors import InsufficientStock, ValidationError
from core.observability import get_logger
from storage import queries
from storage.db import KioskStore


logger = get_logger(__name__)


class InventoryLedger:
    """Compare-and-decrement stock guard."""

    def __init__(self, store: KioskStore):
        self.store = store

    def decrement_stock(self, item_id: str, quantity: int) -> bool:
        """
        Decrement stock if at least `quantity` units are left.

        Joins the caller's transaction when there is one, so a failed
        commitment higher up rolls this decrement back too.

        Args:
            item_id: Catalog item id
            quantity: Units to take (must be positive)

        Returns:
            True if the decrement took effect, False if stock was short
            or the item does not exist
        """
        if quantity is None or quantity <= 0:
            raise ValidationError(f"quantity must be positive, got {quantity}")

        with self.store.transaction() as conn:
            cursor = conn.execute(queries.DECREMENT_STOCK, (quantity, item_id, quantity))
            applied = cursor.rowcount == 1

        if applied:
            logger.debug(
                "Stock decremented",
                extra_fields={"item_id": item_id, "quantity": quantity},
            )
        return applied

    def require_stock(self, item_id: str, quantity: int) -> None:
        """
        Decrement stock or raise.

        Raises:
            InsufficientStock: If fewer than `quantity` units are left
        """
        if not self.decrement_stock(item_id, quantity):
            available = self.stock_of(item_id)
            logger.warning(
                f"Insufficient stock for {item_id}",
                extra_fields={"item_id": item_id, "requested": quantity, "available": available},
            )
            raise InsufficientStock(
                f"insufficient stock for {item_id}: requested {quantity}, available {available or 0}",
                {"item_id": item_id, "requested": quantity, "available": available or 0},
            )

    def stock_of(self, item_id: str) -> Optional[int]:
        row = self.store.fetchone(queries.GET_STOCK, (item_id,))
        return row["stock"] if row else None
