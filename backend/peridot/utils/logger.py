"""Logging setup with per-request correlation.

``ctx_request_id`` is set by the request-id middleware and ``ctx_github``
by the access gate.  :class:`RequestContextFilter` copies both onto every
record so the text and JSON formats can show who made the call.
"""

import contextvars
import logging
import sys

from pythonjsonlogger.json import JsonFormatter

ctx_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
ctx_github: contextvars.ContextVar[str | None] = contextvars.ContextVar("github", default=None)

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s %(github)s] %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "alembic", "uvicorn.access")


class RequestContextFilter(logging.Filter):
    """Attach ``request_id`` and ``github`` to each record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ctx_request_id.get() or "-"
        record.github = ctx_github.get() or "-"
        return True


class CorrelationJsonFormatter(JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        # Placeholders from the filter are dropped from JSON output.
        for key in ("request_id", "github"):
            if log_record.get(key) == "-":
                log_record.pop(key)


def _formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return CorrelationJsonFormatter(
            JSON_FORMAT,
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
    return logging.Formatter(TEXT_FORMAT)


def setup_logger(log_format: str = "text", log_level: str = "INFO") -> logging.Logger:
    """Configure the root logger.  Safe to call more than once."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(_formatter(log_format))
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
