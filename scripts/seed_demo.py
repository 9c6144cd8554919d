"""
Seed the kiosk database with the demo catalog and members.

Usage:
    python scripts/seed_demo.py                    # Uses KIOSK_DB_PATH / kiosk.db
    python scripts/seed_demo.py --db /tmp/kiosk.db
    python scripts/seed_demo.py --list             # Show the catalog afterwards
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from catalog.accessor import CatalogAccessor
from catalog.incentive import IncentiveBand
from core.config import KioskSettings
from core.observability import configure_logging
from storage.db import KioskStore
from storage.seed import seed_demo_data


def print_catalog(catalog: CatalogAccessor) -> None:
    entries = catalog.list_active()
    print("\n=== ACTIVE CATALOG ===")
    print(f"{'Item':<12} {'Name':<22} {'Lane':>4} {'Stock':>5} {'Price':>6} {'Deposit':>8} {'Reward':>7}")
    print("-" * 70)
    for entry in entries:
        print(
            f"{entry.id:<12} {entry.name:<22} {entry.lane_no:>4} {entry.stock:>5} "
            f"{entry.price_cents:>6} {entry.effective_deposit_cents:>8} {entry.reward_cents:>7}"
        )
    print(f"\nTotal: {len(entries)} active item(s)")
    print("======================\n")


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Seed demo kiosk data")
    parser.add_argument("--db", help="SQLite database path (default: KIOSK_DB_PATH)")
    parser.add_argument("--list", action="store_true", help="Print the active catalog after seeding")
    args = parser.parse_args()

    settings = KioskSettings.from_env()
    configure_logging(level=settings.log_level, json_format=settings.log_json, force=True)

    db_path = args.db or settings.db_path
    with KioskStore(db_path) as store:
        inserted = seed_demo_data(store)
        print(f"Seeded {inserted} row(s) into {db_path}")

        if args.list:
            band = IncentiveBand(settings.min_reward, settings.max_reward)
            print_catalog(CatalogAccessor(store, band))


if __name__ == "__main__":
    main()
