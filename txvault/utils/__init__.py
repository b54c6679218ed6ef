"""txvault utilities: logging."""

from txvault.utils.logging import get_logger, redact, setup_logging

__all__ = ["get_logger", "redact", "setup_logging"]
