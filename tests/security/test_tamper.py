"""Tamper-resistance tests: any altered byte of a record is refused."""

import pytest

from txvault.crypto.envelope import BINARY_FIELDS
from txvault.crypto.errors import (
    DecryptFailed,
    InvalidHex,
    InvalidLength,
    UnsupportedAlg,
    UnsupportedMkVersion,
)


class TestBitFlips:
    @pytest.mark.parametrize("field", BINARY_FIELDS)
    @pytest.mark.parametrize("index", [0, -1])
    @pytest.mark.parametrize("mask", [0x01, 0x80])
    def test_flipped_bit_is_decrypt_failed(self, make_record, master_key, flip_bit, field, index, mask):
        record = make_record()
        record[field] = flip_bit(record[field], index, mask)
        with pytest.raises(DecryptFailed) as exc_info:
            master_key.open(record)
        assert str(exc_info.value) == "decrypt_failed"
        assert exc_info.value.field is None

    def test_swapped_payload_between_records(self, make_record, master_key):
        """Units from two records cannot be mixed."""
        first = make_record(payload={"amount": 1})
        second = make_record(payload={"amount": 2})
        for name in ("payload_nonce", "payload_ct", "payload_tag"):
            first[name] = second[name]
        with pytest.raises(DecryptFailed):
            master_key.open(first)

    def test_swapped_wrapped_dek(self, make_record, master_key):
        first = make_record()
        second = make_record()
        for name in ("dek_wrap_nonce", "dek_wrapped", "dek_wrap_tag"):
            first[name] = second[name]
        with pytest.raises(DecryptFailed):
            master_key.open(first)

    def test_uppercased_hex_still_opens(self, make_record, master_key):
        """Case is not tampering: the bytes are unchanged."""
        record = make_record()
        for name in BINARY_FIELDS:
            record[name] = record[name].upper()
        assert master_key.open(record) == {"amount": 100, "currency": "AED"}


class TestStructuralTampering:
    @pytest.mark.parametrize(
        "field", ["payload_nonce", "payload_tag", "dek_wrap_nonce", "dek_wrap_tag"]
    )
    def test_truncated_fixed_field(self, make_record, master_key, field):
        record = make_record()
        record[field] = record[field][:-2]
        with pytest.raises(InvalidLength) as exc_info:
            master_key.open(record)
        assert exc_info.value.field == field

    @pytest.mark.parametrize("field", ["payload_ct", "dek_wrapped"])
    def test_truncated_ciphertext(self, make_record, master_key, field):
        record = make_record()
        record[field] = record[field][:-2]
        with pytest.raises((DecryptFailed, InvalidLength)):
            master_key.open(record)

    @pytest.mark.parametrize("field", BINARY_FIELDS)
    def test_odd_length_hex(self, make_record, master_key, field):
        record = make_record()
        record[field] = record[field] + "0"
        with pytest.raises(InvalidHex) as exc_info:
            master_key.open(record)
        assert exc_info.value.field == field

    @pytest.mark.parametrize("field", BINARY_FIELDS)
    def test_missing_field(self, make_record, master_key, field):
        record = make_record()
        del record[field]
        with pytest.raises(InvalidHex):
            master_key.open(record)

    def test_hex_checked_before_length(self, make_record, master_key):
        record = make_record(payload_nonce="00", dek_wrap_tag="zz")
        with pytest.raises(InvalidHex):
            master_key.open(record)

    def test_short_nonce(self, make_record, master_key):
        with pytest.raises(InvalidLength):
            master_key.open(make_record(payload_nonce="00"))


class TestHeaderTampering:
    def test_downgraded_alg(self, make_record, master_key):
        with pytest.raises(UnsupportedAlg):
            master_key.open(make_record(alg="AES-128-GCM"))

    def test_bumped_version(self, make_record, master_key):
        with pytest.raises(UnsupportedMkVersion):
            master_key.open(make_record(mk_version=2))
