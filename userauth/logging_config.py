"""
Logging setup for the auth service.

One stderr handler on the root logger, JSON in production and a compact
line format elsewhere. Records carry the request id bound by
``RequestIdMiddleware``; credential material passed through ``extra=`` is
masked before any formatter sees it.

Usage:
    from userauth.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("User registered", extra={"user_id": str(uid)})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

HANDLER_NAME = "userauth"
REDACTED = "[REDACTED]"

# extra= keys that must never reach a log sink
SENSITIVE_FIELDS = frozenset((
    "password",
    "old_password",
    "new_password",
    "password_hash",
    "token",
    "secret_key",
    "smtp_password",
))

# Attributes every LogRecord has; anything else came in through extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "request_id",
}


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Fields attached to ``record`` via ``extra=``."""
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


class ContextFilter(logging.Filter):
    """Stamp the request id on each record and mask credential fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"  # type: ignore[attr-defined]
        for key in SENSITIVE_FIELDS.intersection(vars(record)):
            setattr(record, key, REDACTED)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        req_id = getattr(record, "request_id", None)
        if req_id and req_id != "-":
            log_obj["request_id"] = req_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in extra_fields(record).items():
            if value is None:
                continue
            if key in SENSITIVE_FIELDS:
                value = REDACTED
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        return json.dumps(log_obj)


class DevFormatter(logging.Formatter):
    """Human-readable lines; extras are appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "request_id"):
            record.request_id = "-"  # type: ignore[attr-defined]
        line = super().format(record)
        extras = " ".join(f"{k}={v}" for k, v in extra_fields(record).items())
        return f"{line} {extras}" if extras else line


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> logging.Handler:
    """
    Install the service handler on the root logger.

    Safe to call more than once: a handler installed by an earlier call is
    replaced, handlers added by others (test capture, uvicorn) are left
    alone.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'production' selects JSON output
        debug: If True, use DEBUG level regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if environment == "production" else DevFormatter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)
    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
