"""Kiosk Database Handle.

KioskStore owns the single SQLite connection every component shares:
- Schema migrations (storage/schema.py)
- Atomic transactions with rollback on any error
- Serialized access from API worker threads
- The clock used to stamp rows

Components receive the store through their constructor; nothing in the
kiosk opens its own connection.
"""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Sequence, Union

from core.errors import StorageFailure
from core.observability import get_logger
from storage.schema import MIGRATIONS, SCHEMA_VERSION_TABLE


logger = get_logger(__name__)

Clock = Callable[[], datetime]


class KioskStore:
    """
    Connection-scoped storage handle.

    Usage:
        store = KioskStore("kiosk.db")
        with store.transaction() as conn:
            conn.execute(queries.DECREMENT_STOCK, (1, item_id, 1))
    """

    def __init__(
        self,
        db_path: Union[str, Path] = ":memory:",
        clock: Optional[Clock] = None,
        migrate: bool = True,
    ):
        """
        Open the database.

        Args:
            db_path: SQLite file path (":memory:" for a private in-memory db)
            clock: Callable returning local "now"; defaults to datetime.now
            migrate: Apply pending schema migrations on open
        """
        self.db_path = str(db_path)
        self.clock: Clock = clock or datetime.now
        self._lock = threading.RLock()
        self._depth = 0

        # Autocommit mode: transactions are opened explicitly in transaction()
        self._conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            isolation_level=None,
            cached_statements=256,
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.execute("PRAGMA busy_timeout = 5000")

        if migrate:
            self.migrate()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "KioskStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def now_iso(self) -> str:
        """Current local time as stored in created_at/updated_at columns."""
        return self.clock().isoformat(timespec="seconds")

    def today(self) -> str:
        return self.clock().date().isoformat()

    # =========================================================================
    # Migrations
    # =========================================================================

    def schema_version(self) -> int:
        with self._lock:
            self._conn.execute(SCHEMA_VERSION_TABLE)
            row = self._conn.execute(
                "SELECT COALESCE(MAX(version), 0) AS v FROM schema_version"
            ).fetchone()
            return row["v"]

    def migrate(self) -> int:
        """
        Apply migrations newer than the recorded schema version.

        Returns:
            Number of migrations applied
        """
        current = self.schema_version()
        applied = 0
        for version, description, statements in MIGRATIONS:
            if version <= current:
                continue
            with self.transaction() as conn:
                for statement in statements:
                    conn.execute(statement)
                conn.execute(
                    "INSERT INTO schema_version (version, description, applied_at) VALUES (?, ?, ?)",
                    (version, description, self.now_iso()),
                )
            applied += 1
            logger.info(
                f"Applied schema migration {version}: {description}",
                extra_fields={"db_path": self.db_path},
            )
        return applied

    # =========================================================================
    # Transactions
    # =========================================================================

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run a block as one atomic unit.

        Opens BEGIN IMMEDIATE so the write lock is taken up front. Any
        exception rolls the whole block back; sqlite3 errors and integers too
        large for SQLite are re-raised as StorageFailure, domain errors
        propagate unchanged. Nested calls join the outer transaction.
        """
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield self._conn
                finally:
                    self._depth -= 1
                return

            try:
                self._conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                logger.error(f"Could not begin transaction: {e}")
                raise StorageFailure(f"Could not begin transaction: {e}") from e

            self._depth = 1
            try:
                yield self._conn
            except (sqlite3.Error, OverflowError) as e:
                # OverflowError: value outside SQLite INTEGER range
                self._rollback()
                logger.exception(f"Transaction rolled back after storage error: {e}")
                raise StorageFailure(f"Storage write failed: {e}") from e
            except BaseException:
                self._rollback()
                raise
            else:
                try:
                    self._conn.execute("COMMIT")
                except sqlite3.Error as e:
                    self._rollback()
                    logger.exception(f"Commit failed: {e}")
                    raise StorageFailure(f"Commit failed: {e}") from e
            finally:
                self._depth = 0

    def _rollback(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    # =========================================================================
    # Reads
    # =========================================================================

    def fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, tuple(params)).fetchone()
            except sqlite3.Error as e:
                raise StorageFailure(f"Storage read failed: {e}") from e

    def fetchall(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, tuple(params)).fetchall()
            except sqlite3.Error as e:
                raise StorageFailure(f"Storage read failed: {e}") from e
