"""
AES-256-GCM for txvault.

Every call draws a fresh 12-byte nonce; callers never supply one.
Units keep nonce, ciphertext and the 16-byte tag as separate buffers
because records store them as separate fields.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from txvault.constants import KEY_BYTES, NONCE_BYTES, TAG_BYTES
from txvault.crypto.codec import assert_bytes_len
from txvault.crypto.errors import DecryptFailed


@dataclass(frozen=True)
class EncryptedUnit:
    """The output of one AES-256-GCM operation."""

    nonce: bytes  # 12 bytes
    ciphertext: bytes  # same length as the plaintext
    tag: bytes  # 16 bytes


def encrypt(
    key: bytes,
    plaintext: bytes,
    associated_data: bytes | None = None,
) -> EncryptedUnit:
    """Encrypt plaintext under a 32-byte key with a random nonce."""
    assert_bytes_len(key, KEY_BYTES, "key")
    nonce = os.urandom(NONCE_BYTES)
    sealed = AESGCM(key).encrypt(nonce, plaintext, associated_data)
    # cryptography appends the tag to the ciphertext
    return EncryptedUnit(
        nonce=nonce,
        ciphertext=sealed[:-TAG_BYTES],
        tag=sealed[-TAG_BYTES:],
    )


def decrypt(
    key: bytes,
    unit: EncryptedUnit,
    associated_data: bytes | None = None,
) -> bytes:
    """
    Decrypt and authenticate a unit.

    Sizes are checked before the cipher runs. Any authentication failure
    raises the same DecryptFailed whatever was altered.
    """
    assert_bytes_len(key, KEY_BYTES, "key")
    assert_bytes_len(unit.nonce, NONCE_BYTES, "nonce")
    assert_bytes_len(unit.tag, TAG_BYTES, "tag")
    try:
        return AESGCM(key).decrypt(
            unit.nonce,
            bytes(unit.ciphertext) + bytes(unit.tag),
            associated_data,
        )
    except InvalidTag:
        raise DecryptFailed() from None
