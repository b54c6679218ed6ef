"""
Envelope encryption core for txvault.

Handles:
- Strict hex codec
- AES-256-GCM units (12-byte nonce, 16-byte tag)
- DEK generation and wrapping under the master key
- Sealing and opening stored transaction records
"""

from txvault.crypto.aead import EncryptedUnit
from txvault.crypto.envelope import (
    TxSecureRecord,
    build_record_fields,
    decrypt_payload_with_dek,
    decrypt_record,
    encrypt_payload_with_dek,
    new_dek,
    unwrap_dek_with_master_key,
    wrap_dek_with_master_key,
)
from txvault.crypto.errors import (
    CompatibilityError,
    DecryptFailed,
    EnvelopeError,
    IntegrityError,
    InvalidHex,
    InvalidLength,
    StructuralError,
    UnsupportedAlg,
    UnsupportedMkVersion,
)
from txvault.crypto.keys import MasterKey, generate_master_key_hex, parse_master_key_hex

__all__ = [
    "EncryptedUnit",
    "TxSecureRecord",
    "build_record_fields",
    "decrypt_payload_with_dek",
    "decrypt_record",
    "encrypt_payload_with_dek",
    "new_dek",
    "unwrap_dek_with_master_key",
    "wrap_dek_with_master_key",
    "CompatibilityError",
    "DecryptFailed",
    "EnvelopeError",
    "IntegrityError",
    "InvalidHex",
    "InvalidLength",
    "StructuralError",
    "UnsupportedAlg",
    "UnsupportedMkVersion",
    "MasterKey",
    "generate_master_key_hex",
    "parse_master_key_hex",
]
