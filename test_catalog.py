"""
Catalog and Incentive Tests

Validates:
1. Incentive stays within the reward band for every active item
2. Zero carbon-saving spread gives every item MIN_REWARD
3. Effective deposit: stored deposit, incentive fallback, no deposit
4. Active catalog listing, code lookup and member resolution
"""

import pytest

from catalog.incentive import (
    CarbonRange,
    IncentiveBand,
    effective_deposit,
    incentive_for,
    round_minor_units,
)
from core.errors import MemberNotFound, ValidationError
from storage.seed import add_item


class TestIncentive:
    """Pure incentive arithmetic."""

    def test_endpoints_of_range_map_to_band(self):
        band = IncentiveBand(500, 1500)
        carbon_range = CarbonRange(lo=0.1, hi=0.5)
        assert incentive_for(0.1, carbon_range, band) == 500
        assert incentive_for(0.5, carbon_range, band) == 1500
        assert incentive_for(0.3, carbon_range, band) == 1000

    def test_values_outside_range_are_clamped(self):
        carbon_range = CarbonRange(lo=0.1, hi=0.5)
        assert incentive_for(5.0, carbon_range) == 1500
        assert incentive_for(0.0, carbon_range) == 500

    def test_zero_spread_gives_min_reward(self):
        band = IncentiveBand(300, 900)
        assert incentive_for(0.2, CarbonRange(lo=0.2, hi=0.2), band) == 300
        assert incentive_for(0.2, CarbonRange(), band) == 300

    def test_half_up_rounding(self):
        assert round_minor_units(916.5) == 917
        assert round_minor_units(916.49) == 916

    def test_invalid_band_rejected(self):
        with pytest.raises(ValueError):
            IncentiveBand(1500, 500)

    def test_effective_deposit_rules(self):
        assert effective_deposit(20, 0.05, 917) == 20
        assert effective_deposit(0, 0.08, 1167) == 1167
        assert effective_deposit(0, 0.0, 500) == 0


class TestCatalogAccessor:
    """Catalog reads against the seeded demo store."""

    def test_every_active_item_within_band(self, catalog):
        entries = catalog.list_active()
        assert entries
        for entry in entries:
            assert 500 <= entry.reward_cents <= 1500

    def test_list_active_in_lane_order_without_inactive(self, catalog):
        entries = catalog.list_active()
        ids = [e.id for e in entries]
        assert ids == ["SKU-COLA", "SKU-WATER", "SKU-TEA", "SKU-CHIPS"]
        assert "SKU-LEMON" not in ids

    def test_reward_scales_with_carbon_saving(self, catalog):
        entries = {e.id: e for e in catalog.list_active()}
        assert entries["SKU-CHIPS"].reward_cents == 500
        assert entries["SKU-TEA"].reward_cents == 1500
        assert entries["SKU-WATER"].reward_cents == 1167
        assert entries["SKU-COLA"].reward_cents == 917

    def test_effective_deposit_fallback(self, catalog):
        entries = {e.id: e for e in catalog.list_active()}
        assert entries["SKU-COLA"].effective_deposit_cents == 20
        assert entries["SKU-WATER"].effective_deposit_cents == 1167
        assert entries["SKU-CHIPS"].effective_deposit_cents == 0

    def test_zero_spread_catalog(self, store, catalog):
        store._conn.execute("UPDATE items SET carbon_saving = 0.1")
        for entry in catalog.list_active():
            assert entry.reward_cents == 500

    def test_find_active_by_id_or_barcode(self, catalog):
        assert catalog.find_active("SKU-COLA").id == "SKU-COLA"
        assert catalog.find_active("4710000000011").id == "SKU-COLA"
        assert catalog.find_active("SKU-LEMON") is None
        assert catalog.find_active("nope") is None

    def test_get_items_snapshot_dedupes(self, catalog):
        items = catalog.get_items(["SKU-COLA", "SKU-COLA", "SKU-LEMON", "missing"])
        assert set(items) == {"SKU-COLA", "SKU-LEMON"}

    def test_new_item_changes_range(self, store, catalog):
        add_item(store, {
            "id": "SKU-JUICE", "name": "Juice", "price_cents": 150,
            "deposit_cents": 0, "carbon_saving": 0.24, "stock": 3,
        })
        entries = {e.id: e for e in catalog.list_active()}
        assert entries["SKU-JUICE"].reward_cents == 1500
        assert entries["SKU-TEA"].reward_cents == 1000


class TestMemberResolution:

    def test_resolve_case_insensitive(self, catalog):
        member = catalog.resolve_customer("m001")
        assert member.member_no == "M001"
        assert member.points == 120

    def test_unknown_member(self, catalog):
        with pytest.raises(MemberNotFound):
            catalog.resolve_customer("M404")

    def test_inactive_member_not_resolved(self, catalog):
        with pytest.raises(MemberNotFound):
            catalog.resolve_customer("M003")

    def test_blank_member_number(self, catalog):
        with pytest.raises(ValidationError):
            catalog.resolve_customer("  ")

    def test_optional_member_for_guests(self, catalog):
        assert catalog.resolve_optional_customer(None) is None
        assert catalog.resolve_optional_customer("") is None
