"""Log formatting for Copilot Compass.

Every record carries the report being built, when there is one: the scope
("enterprise:<slug>" or "org:<name>") and a short request id. Both live in
contextvars, so concurrent tool calls on one event loop never see each
other's fields.
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Dict, Iterator, Optional

_scope: ContextVar[Optional[str]] = ContextVar("scope", default=None)
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

NOISY_LOGGERS = ("httpx", "httpcore", "mcp")


@contextmanager
def log_context(scope: Optional[str] = None, request_id: Optional[str] = None) -> Iterator[None]:
    """Tag log records emitted inside the block with scope and request id.

    On exit the previous values are restored, so blocks nest.
    """
    scope_token = _scope.set(scope)
    request_token = _request_id.set(request_id)
    try:
        yield
    finally:
        _request_id.reset(request_token)
        _scope.reset(scope_token)


def current_log_fields() -> Dict[str, str]:
    """The context fields that are set right now, keyed as they appear in JSON logs."""
    fields = {}
    scope = _scope.get()
    if scope:
        fields["scope"] = scope
    request_id = _request_id.get()
    if request_id:
        fields["request_id"] = request_id
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per line; used in production."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **current_log_fields(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class HumanReadableFormatter(logging.Formatter):
    """``[time] LEVEL logger: message [scope=..., request_id=...]``"""

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"[{self.formatTime(record, self.datefmt)}] {record.levelname:8s} "
            f"{record.name}: {record.getMessage()}"
        )
        fields = current_log_fields()
        if fields:
            line += " [" + ", ".join(f"{key}={value}" for key, value in fields.items()) + "]"
        if record.exc_info and record.exc_info[1]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(environment: str = "development", log_level: str = "INFO"):
    """Install a single stderr handler on the root logger.

    stdout is reserved for the MCP stdio transport. ``environment ==
    "production"`` selects JSON lines; anything else is human-readable.
    """
    handler = logging.StreamHandler(sys.stderr)
    if environment == "production":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanReadableFormatter(datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
