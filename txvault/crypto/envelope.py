"""
Envelope encryption for transaction records.

Each payload is sealed under a fresh 32-byte data-encryption key (DEK).
The DEK is sealed ("wrapped") under the long-lived master key. A record
stores both units hex-encoded, plus the algorithm and master key version:

    payload_nonce, payload_ct, payload_tag      payload under the DEK
    dek_wrap_nonce, dek_wrapped, dek_wrap_tag   DEK under the master key
    alg, mk_version

The DEK itself is never stored and lives in a bytearray that is zeroed
as soon as the sealing or opening call is done with it.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from typing import Any, TypedDict

from txvault.constants import (
    ALG,
    DEK_BYTES,
    MK_BYTES,
    MK_VERSION,
    NONCE_BYTES,
    SUPPORTED_MK_VERSIONS,
    TAG_BYTES,
)
from txvault.crypto import aead
from txvault.crypto.aead import EncryptedUnit
from txvault.crypto.codec import assert_bytes_len, bytes_to_hex, hex_to_bytes
from txvault.crypto.errors import DecryptFailed, UnsupportedAlg, UnsupportedMkVersion
from txvault.utils.logging import get_logger

logger = get_logger("envelope")

JSONValue = dict[str, "JSONValue"] | list["JSONValue"] | str | int | float | bool | None


class TxSecureRecord(TypedDict):
    """A persisted record. id and createdAt are assigned by the caller."""

    id: str
    partyId: str
    createdAt: str
    payload_nonce: str
    payload_ct: str
    payload_tag: str
    dek_wrap_nonce: str
    dek_wrapped: str
    dek_wrap_tag: str
    alg: str
    mk_version: int


BINARY_FIELDS = (
    "payload_nonce",
    "payload_ct",
    "payload_tag",
    "dek_wrap_nonce",
    "dek_wrapped",
    "dek_wrap_tag",
)

_FIXED_SIZES = (
    ("payload_nonce", NONCE_BYTES),
    ("payload_tag", TAG_BYTES),
    ("dek_wrap_nonce", NONCE_BYTES),
    ("dek_wrap_tag", TAG_BYTES),
)


def new_dek() -> bytes:
    """Generate a random 256-bit DEK."""
    return os.urandom(DEK_BYTES)


def encrypt_payload_with_dek(payload: JSONValue, dek: bytes) -> EncryptedUnit:
    """Serialize payload to compact JSON and seal it under the DEK."""
    assert_bytes_len(dek, DEK_BYTES, "dek")
    return aead.encrypt(dek, _serialize(payload))


def decrypt_payload_with_dek(unit: EncryptedUnit, dek: bytes) -> JSONValue:
    """
    Open a payload unit and parse it back into a JSON value.

    Plaintext that authenticates but does not parse is reported as
    DecryptFailed, exactly like a forged tag.
    """
    assert_bytes_len(dek, DEK_BYTES, "dek")
    plaintext = aead.decrypt(dek, unit)
    try:
        return json.loads(plaintext.decode("utf-8"))
    except (ValueError, RecursionError):
        raise DecryptFailed() from None


def wrap_dek_with_master_key(dek: bytes, master_key: bytes) -> EncryptedUnit:
    assert_bytes_len(dek, DEK_BYTES, "dek")
    assert_bytes_len(master_key, MK_BYTES, "master_key")
    return aead.encrypt(master_key, dek)


def unwrap_dek_with_master_key(unit: EncryptedUnit, master_key: bytes) -> bytes:
    assert_bytes_len(master_key, MK_BYTES, "master_key")
    dek = aead.decrypt(master_key, unit)
    # An authenticated unit can still carry a key of the wrong size
    assert_bytes_len(dek, DEK_BYTES, "dek")
    return dek


def build_record_fields(
    *,
    party_id: str,
    payload: JSONValue,
    master_key: bytes,
    mk_version: int = MK_VERSION,
) -> dict[str, Any]:
    """
    Seal a payload into the stored field set (everything except id and createdAt).

    All fields are produced or the call raises; nothing partial is returned.
    """
    if not is_supported_mk_version(mk_version):
        raise UnsupportedMkVersion("mk_version", "is not supported")
    assert_bytes_len(master_key, MK_BYTES, "master_key")

    dek = bytearray(new_dek())
    try:
        payload_unit = encrypt_payload_with_dek(payload, dek)
        wrapped = wrap_dek_with_master_key(dek, master_key)
    finally:
        _wipe(dek)

    fields = {
        "partyId": party_id,
        "payload_nonce": bytes_to_hex(payload_unit.nonce),
        "payload_ct": bytes_to_hex(payload_unit.ciphertext),
        "payload_tag": bytes_to_hex(payload_unit.tag),
        "dek_wrap_nonce": bytes_to_hex(wrapped.nonce),
        "dek_wrapped": bytes_to_hex(wrapped.ciphertext),
        "dek_wrap_tag": bytes_to_hex(wrapped.tag),
        "alg": ALG,
        "mk_version": mk_version,
    }
    logger.debug(
        "record_sealed",
        party_id=party_id,
        payload_bytes=len(payload_unit.ciphertext),
        mk_version=mk_version,
    )
    return fields


def decrypt_record(
    record: Mapping[str, Any],
    master_key: bytes,
    mk_version: int = MK_VERSION,
) -> JSONValue:
    """
    Open a stored record with the master key it was sealed under.

    Order of checks: alg, mk_version, hex of all six binary fields,
    nonce/tag sizes, then the two authenticated decryptions.
    """
    if record.get("alg") != ALG:
        raise UnsupportedAlg("alg", "is not supported")
    declared = record.get("mk_version")
    if not is_supported_mk_version(declared) or declared != mk_version:
        raise UnsupportedMkVersion("mk_version", "does not match the master key")

    raw = {name: hex_to_bytes(record.get(name), name) for name in BINARY_FIELDS}
    for name, size in _FIXED_SIZES:
        assert_bytes_len(raw[name], size, name)

    dek = bytearray(
        unwrap_dek_with_master_key(
            EncryptedUnit(
                nonce=raw["dek_wrap_nonce"],
                ciphertext=raw["dek_wrapped"],
                tag=raw["dek_wrap_tag"],
            ),
            master_key,
        )
    )
    try:
        return decrypt_payload_with_dek(
            EncryptedUnit(
                nonce=raw["payload_nonce"],
                ciphertext=raw["payload_ct"],
                tag=raw["payload_tag"],
            ),
            dek,
        )
    finally:
        _wipe(dek)


def is_supported_mk_version(version: Any) -> bool:
    # bool is an int subclass; True must not pass for version 1
    return (
        isinstance(version, int)
        and not isinstance(version, bool)
        and version in SUPPORTED_MK_VERSIONS
    )


def _serialize(payload: JSONValue) -> bytes:
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return text.encode("utf-8")


def _wipe(buf: bytearray) -> None:
    """Overwrite key material in place (best effort in Python)."""
    buf[:] = bytes(len(buf))
