"""Catalog Accessor.

Read-only view of the catalog and member directory:
1. List active items in lane order, annotated with their reward
2. Snapshot a set of items for pricing
3. Resolve return codes (item id or barcode) to active items
4. Resolve members by case-insensitive member number
"""

from typing import Dict, Iterable, List, Optional

from core.errors import MemberNotFound, ValidationError
from core.observability import get_logger
from storage import queries
from storage.db import KioskStore

from .incentive import CarbonRange, IncentiveBand, effective_deposit, incentive_for
from .models import CatalogEntry, CatalogItem, Customer


logger = get_logger(__name__)


class CatalogAccessor:
    """
    Read-only catalog access with incentive computation.

    Usage:
        catalog = CatalogAccessor(store)
        for entry in catalog.list_active():
            print(entry.name, entry.reward_cents)
    """

    def __init__(self, store: KioskStore, band: Optional[IncentiveBand] = None):
        self.store = store
        self.band = band or IncentiveBand()

    # =========================================================================
    # Incentives
    # =========================================================================

    def carbon_range(self) -> CarbonRange:
        """Current min/max carbon saving among active items."""
        row = self.store.fetchone(queries.ACTIVE_CARBON_RANGE)
        if row is None or row["lo"] is None:
            return CarbonRange()
        return CarbonRange(lo=row["lo"], hi=row["hi"])

    def incentive_for(self, carbon_saving: float, carbon_range: Optional[CarbonRange] = None) -> int:
        """Reward for a carbon saving against the current catalog range."""
        if carbon_range is None:
            carbon_range = self.carbon_range()
        return incentive_for(carbon_saving, carbon_range, self.band)

    def effective_deposit(self, item: CatalogItem, carbon_range: Optional[CarbonRange] = None) -> int:
        """Deposit charged for one unit of the item."""
        if item.deposit_cents > 0:
            return item.deposit_cents
        reward = self.incentive_for(item.carbon_saving, carbon_range)
        return effective_deposit(item.deposit_cents, item.carbon_saving, reward)

    # =========================================================================
    # Items
    # =========================================================================

    def list_active(self) -> List[CatalogEntry]:
        """Every active item ordered by lane, with reward and effective deposit."""
        carbon_range = self.carbon_range()
        entries = []
        for row in self.store.fetchall(queries.LIST_ACTIVE_ITEMS):
            item = CatalogItem.from_row(row)
            reward = incentive_for(item.carbon_saving, carbon_range, self.band)
            entries.append(CatalogEntry(
                **item.model_dump(),
                reward_cents=reward,
                effective_deposit_cents=effective_deposit(
                    item.deposit_cents, item.carbon_saving, reward
                ),
            ))
        return entries

    def get_items(self, item_ids: Iterable[str]) -> Dict[str, CatalogItem]:
        """
        Fetch a set of items in one query.

        Args:
            item_ids: Item ids; duplicates are fetched once

        Returns:
            Dict of item id to CatalogItem for ids that exist (any status)
        """
        unique_ids = list(dict.fromkeys(item_ids))
        if not unique_ids:
            return {}
        rows = self.store.fetchall(queries.select_items_by_ids(len(unique_ids)), unique_ids)
        return {row["id"]: CatalogItem.from_row(row) for row in rows}

    def find_active(self, code: str) -> Optional[CatalogItem]:
        """Resolve an active item by id, falling back to barcode."""
        row = self.store.fetchone(queries.FIND_ACTIVE_ITEM_BY_CODE, (code, code, code))
        return CatalogItem.from_row(row) if row else None

    # =========================================================================
    # Members
    # =========================================================================

    def resolve_customer(self, member_no: str) -> Customer:
        """
        Resolve an active member by member number (case-insensitive).

        Raises:
            ValidationError: If member_no is blank
            MemberNotFound: If no active member has that number
        """
        if member_no is None or not str(member_no).strip():
            raise ValidationError("member_no required")

        member_no = str(member_no).strip()
        row = self.store.fetchone(queries.FIND_ACTIVE_CUSTOMER, (member_no,))
        if row is None:
            logger.warning("Member not found", extra_fields={"member_no": member_no})
            raise MemberNotFound("member not found", {"member_no": member_no})
        return Customer.from_row(row)

    def resolve_optional_customer(self, member_no: Optional[str]) -> Optional[Customer]:
        """Resolve a member if a number was given; guests resolve to None."""
        if member_no is None or not str(member_no).strip():
            return None
        return self.resolve_customer(member_no)

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        row = self.store.fetchone(queries.GET_CUSTOMER, (customer_id,))
        return Customer.from_row(row) if row else None
