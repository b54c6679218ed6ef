"""
Structured logging for txvault.

Log lines may carry record ids, party ids and error codes. They must never
carry master keys, DEKs or decrypted payloads, so two processors run before
rendering:

- _drop_sensitive_fields blanks any field whose name marks it as key
  material or plaintext, whatever its value
- _redact_secrets scrubs master-key-shaped hex out of every string value,
  including strings nested in dicts and lists
"""

import re
import sys
from typing import Any

import structlog

from txvault.constants import PROJECT_NAME, SENSITIVE_FIELDS, SENSITIVE_PATTERNS

REDACTED = "[REDACTED]"

_SENSITIVE_RE = [re.compile(p) for p in SENSITIVE_PATTERNS]

_LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def redact(text: str) -> str:
    """Replace master-key-shaped substrings with [REDACTED]."""
    for pattern in _SENSITIVE_RE:
        text = pattern.sub(REDACTED, text)
    return text


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return redact(value)
    if isinstance(value, dict):
        return {
            k: REDACTED if k in SENSITIVE_FIELDS else _scrub(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_scrub(v) for v in value]
    return value


def _drop_sensitive_fields(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in SENSITIVE_FIELDS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def _redact_secrets(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    return {key: _scrub(value) for key, value in event_dict.items()}


def _add_service(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict["service"] = PROJECT_NAME
    return event_dict


def setup_logging(level: str = "INFO", json_format: bool = True) -> None:
    """
    Configure structlog for the gateway and CLI.

    JSON lines for servers, the coloured console renderer for humans.
    Output goes to stderr so CLI stdout stays pipeable.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service,
        _drop_sensitive_fields,
        _redact_secrets,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=True),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            _LEVELS.get(level.upper(), _LEVELS["INFO"])
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str = "") -> structlog.BoundLogger:
    """Logger bound to a component name (envelope, tx_store, gateway, ...)."""
    logger = structlog.get_logger()
    return logger.bind(component=component) if component else logger
