"""Strict hex codec and fixed-size buffer checks."""

from __future__ import annotations

import re

from txvault.crypto.errors import InvalidHex, InvalidLength

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def is_hex(s: str) -> bool:
    """True if every character of s is a hex digit. The empty string is hex."""
    return _HEX_RE.fullmatch(s) is not None


def bytes_to_hex(data: bytes) -> str:
    """Lowercase hex, two characters per byte."""
    return bytes(data).hex()


def hex_to_bytes(value: str, field: str = "hex") -> bytes:
    """Decode hex to bytes. Raises InvalidHex for anything but an even-length hex str."""
    if not isinstance(value, str):
        raise InvalidHex(field, "is not a string")
    if len(value) % 2 != 0:
        raise InvalidHex(field, "has odd length")
    if not is_hex(value):
        raise InvalidHex(field, "contains non-hex characters")
    return bytes.fromhex(value)


def assert_bytes_len(data: bytes, expected: int, field: str) -> None:
    if len(data) != expected:
        raise InvalidLength(field, f"must be {expected} bytes")


def assert_hex_bytes_len(value: str, expected: int, field: str) -> bytes:
    """Decode a hex field and require an exact decoded size."""
    data = hex_to_bytes(value, field)
    assert_bytes_len(data, expected, field)
    return data
