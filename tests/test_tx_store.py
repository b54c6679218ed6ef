"""Tests for the record store backends."""

from types import SimpleNamespace

import pytest

from txvault.crypto.errors import UnsupportedMkVersion
from txvault.storage.store import (
    InMemoryTxStore,
    SQLiteTxStore,
    TxStoreError,
    make_store,
)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, db_path):
    s = InMemoryTxStore() if request.param == "memory" else SQLiteTxStore(db_path=db_path)
    s.open()
    yield s
    s.close()


class TestTxStore:
    def test_put_and_get(self, store, make_record):
        record = make_record()
        store.put(record)
        assert store.get("tx_1") == record

    def test_missing_record(self, store):
        assert store.get("nope") is None

    def test_upsert_replaces_whole_record(self, store, make_record):
        store.put(make_record(payload={"v": 1}))
        replacement = make_record(payload={"v": 2})
        store.put(replacement)
        assert store.get("tx_1") == replacement

    def test_stored_record_opens(self, store, make_record, master_key):
        store.put(make_record(payload={"amount": 5}))
        assert master_key.open(store.get("tx_1")) == {"amount": 5}

    def test_stored_version_is_returned_as_is(self, store, make_record, master_key):
        """A record declaring a version this build lacks is still refused after a round trip."""
        store.put(make_record(mk_version=2))
        record = store.get("tx_1")
        assert record["mk_version"] == 2
        with pytest.raises(UnsupportedMkVersion):
            master_key.open(record)

    def test_returned_record_is_a_copy(self, store, make_record):
        store.put(make_record())
        record = store.get("tx_1")
        record["partyId"] = "changed"
        assert store.get("tx_1")["partyId"] == "party_123"


class TestSQLiteTxStore:
    def test_not_opened(self, db_path):
        store = SQLiteTxStore(db_path=db_path)
        with pytest.raises(TxStoreError, match="not opened"):
            store.get("tx_1")

    def test_persists_across_reopen(self, db_path, make_record, master_key):
        store = SQLiteTxStore(db_path=db_path)
        store.open()
        store.put(make_record(record_id="tx_a"))
        store.put(make_record(record_id="tx_b"))
        store.close()

        reopened = SQLiteTxStore(db_path=db_path)
        reopened.open()
        try:
            assert reopened.get("tx_a")["id"] == "tx_a"
            assert master_key.open(reopened.get("tx_b")) == {"amount": 100, "currency": "AED"}
        finally:
            reopened.close()

    def test_reopen_keeps_existing_table(self, db_path, make_record):
        """Opening an existing database twice does not recreate or wipe the table."""
        first = SQLiteTxStore(db_path=db_path)
        first.open()
        first.put(make_record())
        first.close()
        first.open()
        try:
            assert first.get("tx_1") is not None
        finally:
            first.close()

    def test_creates_parent_directory(self, tmp_dir):
        store = SQLiteTxStore(db_path=tmp_dir / "nested" / "dir" / "records.db")
        store.open()
        store.close()
        assert (tmp_dir / "nested" / "dir" / "records.db").exists()


class TestMakeStore:
    def test_memory(self):
        assert isinstance(make_store(SimpleNamespace(backend="memory", path=None)), InMemoryTxStore)

    def test_sqlite(self, db_path):
        store = make_store(SimpleNamespace(backend="sqlite", path=db_path))
        assert isinstance(store, SQLiteTxStore)
        assert store.db_path == db_path

    def test_unknown(self):
        with pytest.raises(TxStoreError, match="Unknown storage backend"):
            make_store(SimpleNamespace(backend="postgres", path=None))
