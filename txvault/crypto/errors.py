"""
Failure taxonomy for the envelope core.

Three families, distinguishable by base class:
- StructuralError: malformed input (bad hex, wrong buffer size). Usually a caller bug.
- IntegrityError: authentication failed. Tampering or the wrong key.
- CompatibilityError: the record declares an algorithm or key version this build lacks.

Messages name the field at fault, never the bytes in it.
"""

from __future__ import annotations


class EnvelopeError(Exception):
    """Base class for every envelope failure."""

    code = "envelope_error"

    def __init__(self, field: str | None = None, reason: str = ""):
        self.field = field
        self.reason = reason
        parts = [p for p in (field, reason) if p]
        detail = " ".join(parts)
        super().__init__(f"{self.code}: {detail}" if detail else self.code)


class StructuralError(EnvelopeError):
    """Input does not have the shape the format requires."""


class IntegrityError(EnvelopeError):
    """Authenticated data did not verify."""


class CompatibilityError(EnvelopeError):
    """Record was produced by a scheme this build does not implement."""


class InvalidHex(StructuralError):
    code = "invalid_hex"


class InvalidLength(StructuralError):
    code = "invalid_length"


class DecryptFailed(IntegrityError):
    """
    Raised for every authentication failure and for authenticated
    plaintext that does not parse. Carries no field and no reason so
    callers cannot tell which part of a unit was altered.
    """

    code = "decrypt_failed"

    def __init__(self) -> None:
        super().__init__()


class UnsupportedAlg(CompatibilityError):
    code = "unsupported_alg"


class UnsupportedMkVersion(CompatibilityError):
    code = "unsupported_mk_version"
