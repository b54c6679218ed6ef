"""txvault storage - persistence for sealed records."""

from txvault.storage.store import (
    InMemoryTxStore,
    SQLiteTxStore,
    TxStore,
    TxStoreError,
    make_store,
)

__all__ = ["InMemoryTxStore", "SQLiteTxStore", "TxStore", "TxStoreError", "make_store"]
