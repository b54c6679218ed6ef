"""
Master key handling.

The master key is created once at startup and passed explicitly to
whatever needs it. It is never logged, pickled or echoed back.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from txvault.constants import MK_BYTES, MK_VERSION
from txvault.crypto.codec import assert_bytes_len, bytes_to_hex, hex_to_bytes
from txvault.crypto.envelope import (
    JSONValue,
    build_record_fields,
    decrypt_record,
    is_supported_mk_version,
)
from txvault.crypto.errors import UnsupportedMkVersion


def parse_master_key_hex(master_key_hex: str) -> bytes:
    """Decode a 64-character hex master key."""
    mk = hex_to_bytes(master_key_hex, "master_key")
    assert_bytes_len(mk, MK_BYTES, "master_key")
    return mk


def generate_master_key_hex() -> str:
    """Fresh random master key, hex-encoded for provisioning."""
    return bytes_to_hex(os.urandom(MK_BYTES))


class MasterKey:
    """
    A master key together with its version.

    Usage:
        mk = MasterKey.from_hex(os.environ["TXVAULT_MASTER_KEY_HEX"])
        fields = mk.seal("party_123", {"amount": 100})
        payload = mk.open(record)
    """

    __slots__ = ("_material", "_version")

    def __init__(self, material: bytes, version: int = MK_VERSION):
        assert_bytes_len(material, MK_BYTES, "master_key")
        if not is_supported_mk_version(version):
            raise UnsupportedMkVersion("mk_version", "is not supported")
        self._material = bytes(material)
        self._version = version

    @classmethod
    def from_hex(cls, master_key_hex: str, version: int = MK_VERSION) -> MasterKey:
        return cls(parse_master_key_hex(master_key_hex), version)

    @classmethod
    def generate(cls, version: int = MK_VERSION) -> MasterKey:
        return cls(os.urandom(MK_BYTES), version)

    @property
    def version(self) -> int:
        return self._version

    def seal(self, party_id: str, payload: JSONValue) -> dict[str, Any]:
        """Build the stored field set for a payload."""
        return build_record_fields(
            party_id=party_id,
            payload=payload,
            master_key=self._material,
            mk_version=self._version,
        )

    def open(self, record: Mapping[str, Any]) -> JSONValue:
        """Decrypt a stored record sealed under this key."""
        return decrypt_record(record, self._material, mk_version=self._version)

    def __reduce__(self):
        raise TypeError("MasterKey cannot be serialized")

    def __repr__(self) -> str:
        return f"MasterKey(version={self._version}, material=[REDACTED])"
