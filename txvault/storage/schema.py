"""Database schema for the txvault record store."""

# One row per sealed record. Every column is written on each upsert.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tx_secure_records (
    id TEXT PRIMARY KEY,
    partyId TEXT NOT NULL,
    createdAt TEXT NOT NULL,
    payload_nonce TEXT NOT NULL,
    payload_ct TEXT NOT NULL,
    payload_tag TEXT NOT NULL,
    dek_wrap_nonce TEXT NOT NULL,
    dek_wrapped TEXT NOT NULL,
    dek_wrap_tag TEXT NOT NULL,
    alg TEXT NOT NULL,
    mk_version INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_records_party ON tx_secure_records(partyId);
"""

RECORD_COLUMNS = (
    "id",
    "partyId",
    "createdAt",
    "payload_nonce",
    "payload_ct",
    "payload_tag",
    "dek_wrap_nonce",
    "dek_wrapped",
    "dek_wrap_tag",
    "alg",
    "mk_version",
)
