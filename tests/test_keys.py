"""Tests for master key parsing and the MasterKey wrapper."""

import pickle

import pytest

from txvault.crypto.errors import DecryptFailed, InvalidHex, InvalidLength, UnsupportedMkVersion
from txvault.crypto.keys import MasterKey, generate_master_key_hex, parse_master_key_hex


class TestParseMasterKeyHex:
    def test_parses_64_hex_chars(self, mk_hex):
        key = parse_master_key_hex(mk_hex)
        assert len(key) == 32
        assert key[:4] == b"\x00\x11\x22\x33"

    def test_uppercase(self, mk_hex):
        assert parse_master_key_hex(mk_hex.upper()) == parse_master_key_hex(mk_hex)

    @pytest.mark.parametrize("length", [0, 32, 62, 66, 128])
    def test_wrong_length(self, length):
        with pytest.raises(InvalidLength, match="master_key must be 32 bytes"):
            parse_master_key_hex("a" * length)

    def test_non_hex(self):
        with pytest.raises(InvalidHex, match="master_key"):
            parse_master_key_hex("zz" * 32)


class TestGenerate:
    def test_generated_key_parses(self):
        value = generate_master_key_hex()
        assert len(value) == 64
        assert value == value.lower()
        assert len(parse_master_key_hex(value)) == 32

    def test_generated_keys_differ(self):
        assert generate_master_key_hex() != generate_master_key_hex()


class TestMasterKey:
    def test_default_version(self, master_key):
        assert master_key.version == 1

    def test_seal_and_open(self, master_key):
        fields = master_key.seal("party_123", {"amount": 100, "currency": "AED"})
        record = {"id": "tx_1", "createdAt": "2026-01-01T00:00:00+00:00", **fields}
        assert master_key.open(record) == {"amount": 100, "currency": "AED"}

    def test_generated_key_cannot_open_other_records(self, make_record):
        with pytest.raises(DecryptFailed):
            MasterKey.generate().open(make_record())

    @pytest.mark.parametrize("version", [0, 2, True])
    def test_unsupported_version(self, master_key_bytes, version):
        with pytest.raises(UnsupportedMkVersion):
            MasterKey(master_key_bytes, version=version)

    def test_short_material(self):
        with pytest.raises(InvalidLength):
            MasterKey(b"\x00" * 16)

    def test_repr_is_redacted(self, master_key, mk_hex):
        text = repr(master_key)
        assert "REDACTED" in text
        assert mk_hex not in text
        assert mk_hex[:16] not in text

    def test_cannot_be_pickled(self, master_key):
        with pytest.raises(TypeError, match="cannot be serialized"):
            pickle.dumps(master_key)

    def test_no_instance_dict(self, master_key):
        with pytest.raises(AttributeError):
            master_key.extra = "x"
