"""Shared test fixtures for txvault."""

import tempfile
from pathlib import Path

import pytest

from txvault.crypto.keys import MasterKey, parse_master_key_hex

MK_HEX = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
SAMPLE_PAYLOAD = {"amount": 100, "currency": "AED"}


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def db_path(tmp_dir):
    """Provide a temporary database path."""
    return tmp_dir / "test_records.db"


@pytest.fixture
def mk_hex():
    return MK_HEX


@pytest.fixture
def master_key_bytes():
    return parse_master_key_hex(MK_HEX)


@pytest.fixture
def master_key():
    return MasterKey.from_hex(MK_HEX)


@pytest.fixture
def make_record(master_key):
    """Build a full stored record, optionally overriding fields."""

    def _make(payload=SAMPLE_PAYLOAD, record_id="tx_1", **overrides):
        fields = master_key.seal("party_123", payload)
        record = {
            "id": record_id,
            "createdAt": "2026-01-01T00:00:00+00:00",
            **fields,
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def flip_bit():
    """Flip one bit of the byte at index of a hex string (negative indexes allowed)."""

    def _flip(hex_value: str, index: int = 0, mask: int = 0x01) -> str:
        data = bytearray(bytes.fromhex(hex_value))
        data[index] ^= mask
        return data.hex()

    return _flip
