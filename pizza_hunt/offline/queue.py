"""
Local Queue - Durable client-side storage for pizzas that could not be sent.

Records live in a SQLite file, so they survive page reloads, crashes and
restarts. Each record gets an auto-incremented integer key; reading the
store in key order gives insertion order.

SQLite calls block, so every operation runs in a worker thread through
asyncio.to_thread. The event loop stays free while a write is being
committed, and each public method is a single await for the caller.

Usage:
    queue = LocalQueue(settings.offline)
    await queue.open()
    await queue.enqueue({"pizzaName": "Zesty", "size": "Large"})
    records = await queue.drain()
    await queue.clear()
"""

import asyncio
import json
import logging
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from ..core.config import OfflineConfig, settings
from ..core.exceptions import OfflineQueueError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedEntry:
    """A queued record together with its local key."""
    key: int
    record: Any


class LocalQueue:
    """
    Durable FIFO of pending pizza-creation payloads.

    The container is identified by a fixed name and schema version.
    SQLite's user_version pragma stores the version; when it is lower
    than the configured one, the migration step runs once, inside a
    transaction, before any other statement.
    """

    def __init__(self, config: OfflineConfig | None = None, path: str | Path | None = None):
        """
        Args:
            config: Offline settings, defaults to global settings
            path: Overrides the database file location
        """
        config = config or settings.offline
        self.path = Path(path) if path is not None else config.db_path
        self.store_name = config.store_name
        self.schema_version = config.schema_version
        self._conn: Optional[sqlite3.Connection] = None
        # One connection shared across executor threads
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    # ============================================================
    # Lifecycle
    # ============================================================

    async def open(self) -> "LocalQueue":
        """
        Open the container, creating or migrating it if needed.

        Calling open() on an already open queue returns it unchanged.

        Raises:
            OfflineQueueError: If the database cannot be opened or migrated
        """
        if self._conn is not None:
            return self
        await asyncio.to_thread(self._open_sync)
        logger.info(f"Offline queue opened: {self.path} (store {self.store_name}, v{self.schema_version})")
        return self

    def _open_sync(self) -> None:
        with self._lock:
            if self._conn is not None:
                return
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(
                    str(self.path),
                    check_same_thread=False,
                    isolation_level=None
                )
            except (OSError, sqlite3.Error) as e:
                raise OfflineQueueError(f"Cannot open offline queue at {self.path}: {e}") from e

            try:
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=FULL")
                self._upgrade(conn)
            except sqlite3.Error as e:
                conn.close()
                raise OfflineQueueError(f"Cannot prepare offline queue: {e}") from e

            self._conn = conn

    def _upgrade(self, conn: sqlite3.Connection) -> None:
        """Run the structural migration if the stored version is older."""
        current = conn.execute("PRAGMA user_version").fetchone()[0]
        if current >= self.schema_version:
            return

        logger.info(f"Upgrading offline queue from v{current} to v{self.schema_version}")
        conn.execute("BEGIN IMMEDIATE")
        try:
            # Re-read under the write lock, another process may have upgraded
            current = conn.execute("PRAGMA user_version").fetchone()[0]
            if current < self.schema_version:
                conn.execute(
                    f'CREATE TABLE IF NOT EXISTS "{self.store_name}" ('
                    "key INTEGER PRIMARY KEY AUTOINCREMENT, "
                    "value TEXT NOT NULL)"
                )
                conn.execute(f"PRAGMA user_version = {int(self.schema_version)}")
            conn.execute("COMMIT")
        except sqlite3.Error:
            conn.execute("ROLLBACK")
            raise

    async def close(self) -> None:
        """Close the database. The queue can be reopened later."""
        await asyncio.to_thread(self._close_sync)

    def _close_sync(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # ============================================================
    # Operations
    # ============================================================

    def _run(self, statement: str, params: Iterable[Any] = (), fetch: bool = False) -> Any:
        """Execute one statement; returns the rows if fetch, else the cursor."""
        with self._lock:
            if self._conn is None:
                raise OfflineQueueError("Offline queue is not open")
            try:
                cursor = self._conn.execute(statement, tuple(params))
                return cursor.fetchall() if fetch else cursor
            except sqlite3.Error as e:
                raise OfflineQueueError(f"Offline queue operation failed: {e}") from e

    def _table(self) -> str:
        return f'"{self.store_name}"'

    async def enqueue(self, record: Any) -> int:
        """
        Append a record.

        Returns once SQLite has committed the write.

        Args:
            record: Any JSON-serializable value

        Returns:
            The key assigned to the record

        Raises:
            OfflineQueueError: If the record cannot be serialized or stored
        """
        try:
            value = json.dumps(record)
        except (TypeError, ValueError) as e:
            raise OfflineQueueError(f"Record is not JSON-serializable: {e}") from e

        cursor = await asyncio.to_thread(
            self._run,
            f"INSERT INTO {self._table()} (value) VALUES (?)",
            (value,)
        )
        logger.debug(f"Queued record {cursor.lastrowid}")
        return cursor.lastrowid

    async def drain_entries(self) -> list[QueuedEntry]:
        """Return every queued record with its key, oldest first."""
        rows = await asyncio.to_thread(
            self._run,
            f"SELECT key, value FROM {self._table()} ORDER BY key ASC",
            (),
            True
        )
        entries = []
        for key, value in rows:
            try:
                entries.append(QueuedEntry(key=key, record=json.loads(value)))
            except (json.JSONDecodeError, TypeError) as e:
                raise OfflineQueueError(f"Queued record {key} is corrupted: {e}") from e
        return entries

    async def drain(self) -> list[Any]:
        """
        Return every queued record in insertion order without removing it.

        An empty queue gives an empty list.
        """
        return [entry.record for entry in await self.drain_entries()]

    async def count(self) -> int:
        """Number of queued records."""
        rows = await asyncio.to_thread(
            self._run, f"SELECT COUNT(*) FROM {self._table()}", (), True
        )
        return rows[0][0]

    async def clear(self) -> None:
        """
        Remove every record.

        Anything enqueued after the last drain() is removed too; use
        remove() with the drained keys to delete only what was submitted.
        """
        await asyncio.to_thread(self._run, f"DELETE FROM {self._table()}")
        logger.debug("Offline queue cleared")

    async def remove(self, keys: Iterable[int]) -> int:
        """
        Remove the records with the given keys.

        Returns:
            Number of records removed
        """
        keys = list(keys)
        if not keys:
            return 0
        placeholders = ", ".join("?" for _ in keys)
        cursor = await asyncio.to_thread(
            self._run,
            f"DELETE FROM {self._table()} WHERE key IN ({placeholders})",
            keys
        )
        return cursor.rowcount
