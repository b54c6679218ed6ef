"""Project-wide constants for txvault."""

from pathlib import Path

PROJECT_NAME = "txvault"
PROJECT_DISPLAY_NAME = "TxVault"
PROJECT_DESCRIPTION = "Envelope encryption for transaction payloads"
PROJECT_VERSION = "0.1.0"

# Default network config - LOOPBACK ONLY, never 0.0.0.0
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3001

DATA_DIR = Path.home() / f".{PROJECT_NAME}"
CONFIG_FILE = DATA_DIR / "config.toml"
RECORDS_DB = DATA_DIR / "records.db"

MASTER_KEY_ENV = "TXVAULT_MASTER_KEY_HEX"

# Envelope parameters
ALG = "AES-256-GCM"
MK_VERSION = 1
SUPPORTED_MK_VERSIONS = frozenset({MK_VERSION})
KEY_BYTES = 32  # AES-256
DEK_BYTES = KEY_BYTES
MK_BYTES = KEY_BYTES
NONCE_BYTES = 12
TAG_BYTES = 16

# Log fields whose values are always blanked
SENSITIVE_FIELDS = frozenset({"master_key", "master_key_hex", "mk", "dek", "payload", "plaintext"})

# Master-key-shaped strings, scrubbed from every log value
SENSITIVE_PATTERNS = [
    rf"{MASTER_KEY_ENV}\s*=\s*\S+",
    r"\b[0-9a-fA-F]{64}\b",
]
