"""
Record store for txvault.

Persists sealed records exactly as the envelope core produced them.
Records are opaque here: no field is decoded, and alg/mk_version come
back as stored so the core can still refuse what it does not support.

Two backends:
- InMemoryTxStore for tests and throwaway dev servers
- SQLiteTxStore for anything that should survive a restart
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from txvault.constants import RECORDS_DB
from txvault.crypto.envelope import TxSecureRecord
from txvault.storage.schema import RECORD_COLUMNS, SCHEMA_SQL
from txvault.utils.logging import get_logger

if TYPE_CHECKING:
    from txvault.gateway.config import StorageConfig

logger = get_logger("tx_store")

_UPSERT_SQL = (
    f"INSERT INTO tx_secure_records ({', '.join(RECORD_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in RECORD_COLUMNS)}) "
    "ON CONFLICT(id) DO UPDATE SET "
    + ", ".join(f"{c}=excluded.{c}" for c in RECORD_COLUMNS if c != "id")
)


class TxStore(ABC):
    """Storage interface for sealed records."""

    def open(self) -> None:
        """Prepare the backend. No-op unless the backend needs it."""

    def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    def put(self, record: TxSecureRecord) -> None:
        """Insert or wholly replace a record by id."""

    @abstractmethod
    def get(self, record_id: str) -> TxSecureRecord | None:
        """Return the record with this id, or None."""


class InMemoryTxStore(TxStore):
    def __init__(self) -> None:
        self._records: dict[str, TxSecureRecord] = {}

    def put(self, record: TxSecureRecord) -> None:
        self._records[record["id"]] = dict(record)

    def get(self, record_id: str) -> TxSecureRecord | None:
        record = self._records.get(record_id)
        return dict(record) if record is not None else None


class SQLiteTxStore(TxStore):
    """SQLite-backed record store."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or RECORDS_DB
        self._conn: sqlite3.Connection | None = None

    def open(self) -> None:
        """Open the database connection and initialize schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False,
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")

        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()
        logger.info("tx_store_ready", backend="sqlite", path=str(self.db_path))

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.info("tx_store_closed")

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise TxStoreError("Store not opened. Call open() first.")
        return self._conn

    def put(self, record: TxSecureRecord) -> None:
        self.conn.execute(_UPSERT_SQL, tuple(record[c] for c in RECORD_COLUMNS))
        self.conn.commit()

    def get(self, record_id: str) -> TxSecureRecord | None:
        row = self.conn.execute(
            "SELECT * FROM tx_secure_records WHERE id = ? LIMIT 1", (record_id,)
        ).fetchone()
        if row is None:
            return None
        return {c: row[c] for c in RECORD_COLUMNS}


class TxStoreError(Exception):
    """Raised for record store errors."""

    pass


def make_store(config: StorageConfig) -> TxStore:
    """Build the backend named by the storage config (not yet opened)."""
    if config.backend == "sqlite":
        return SQLiteTxStore(db_path=config.path)
    if config.backend == "memory":
        return InMemoryTxStore()
    raise TxStoreError(f"Unknown storage backend: {config.backend}")
