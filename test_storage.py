"""
Storage Tests

Validates the shared store:
1. Migrations apply once and are recorded
2. Transactions commit, roll back, and join when nested
3. sqlite3 errors surface as StorageFailure after rollback
4. Demo seeding is idempotent
"""

import pytest

from core.errors import StorageFailure, ValidationError
from storage.db import KioskStore
from storage.schema import latest_version
from storage.seed import DEMO_ITEMS, DEMO_MEMBERS, seed_demo_data


def count(store, table):
    return store.fetchone(f"SELECT COUNT(*) AS c FROM {table}")["c"]


class TestMigrations:

    def test_fresh_store_at_latest_version(self, store):
        assert store.schema_version() == latest_version() == 2

    def test_reopen_applies_nothing(self, settings, store, clock):
        with KioskStore(settings.db_path, clock=clock) as reopened:
            assert reopened.migrate() == 0
            assert count(reopened, "items") == len(DEMO_ITEMS)

    def test_in_memory_store(self):
        with KioskStore() as memory:
            assert memory.schema_version() == 2
            assert count(memory, "items") == 0


class TestTransactions:

    def test_commit(self, store):
        with store.transaction() as conn:
            conn.execute("UPDATE items SET stock = 0 WHERE id = 'SKU-TEA'")
        assert store.fetchone("SELECT stock FROM items WHERE id = 'SKU-TEA'")["stock"] == 0

    def test_domain_error_rolls_back_and_propagates(self, store):
        with pytest.raises(ValidationError):
            with store.transaction() as conn:
                conn.execute("UPDATE items SET stock = 0 WHERE id = 'SKU-TEA'")
                raise ValidationError("stop")
        assert store.fetchone("SELECT stock FROM items WHERE id = 'SKU-TEA'")["stock"] == 6

    def test_nested_transaction_joins_outer(self, store):
        with pytest.raises(ValidationError):
            with store.transaction() as outer:
                outer.execute("UPDATE items SET stock = 1 WHERE id = 'SKU-TEA'")
                with store.transaction() as inner:
                    inner.execute("UPDATE items SET stock = 1 WHERE id = 'SKU-COLA'")
                raise ValidationError("stop")

        assert store.fetchone("SELECT stock FROM items WHERE id = 'SKU-TEA'")["stock"] == 6
        assert store.fetchone("SELECT stock FROM items WHERE id = 'SKU-COLA'")["stock"] == 12

    def test_sqlite_error_becomes_storage_failure(self, store):
        with pytest.raises(StorageFailure):
            with store.transaction() as conn:
                conn.execute("UPDATE items SET stock = 0 WHERE id = 'SKU-TEA'")
                # Violates CHECK (stock >= 0)
                conn.execute("UPDATE items SET stock = -1 WHERE id = 'SKU-COLA'")
        assert store.fetchone("SELECT stock FROM items WHERE id = 'SKU-TEA'")["stock"] == 6

    def test_integer_out_of_range_becomes_storage_failure(self, store):
        with pytest.raises(StorageFailure):
            with store.transaction() as conn:
                conn.execute("UPDATE items SET stock = 0 WHERE id = 'SKU-TEA'")
                conn.execute("UPDATE items SET stock = ? WHERE id = 'SKU-COLA'", (10**19,))
        assert store.fetchone("SELECT stock FROM items WHERE id = 'SKU-TEA'")["stock"] == 6

    def test_read_error_becomes_storage_failure(self, store):
        with pytest.raises(StorageFailure):
            store.fetchone("SELECT * FROM no_such_table")


class TestSeed:

    def test_seed_is_idempotent(self, store):
        assert seed_demo_data(store) == 0
        assert count(store, "items") == len(DEMO_ITEMS)
        assert count(store, "customers") == len(DEMO_MEMBERS)

    def test_member_numbers_unique_case_insensitive(self, store):
        with pytest.raises(StorageFailure):
            with store.transaction() as conn:
                conn.execute(
                    "INSERT INTO customers (id, member_no, name) VALUES ('x', 'm001', 'Dup')"
                )

    def test_clock_stamps(self, store, clock):
        assert store.now_iso() == "2024-03-14T10:30:00"
        assert store.today() == "2024-03-14"
        clock.advance(hours=14)
        assert store.today() == "2024-03-15"
