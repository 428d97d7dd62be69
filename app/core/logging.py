"""JSON logging configuration and per-request context.

Log records are rendered as single-line JSON objects so they can be shipped
to any aggregator as-is. The request id set by the request middleware is
attached to every record emitted while that request is being handled.
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)

_REDACTED = "[REDACTED]"
_SENSITIVE_FIELDS = {"password", "password_hash", "token", "access_token", "refresh_token"}


def get_request_id() -> Optional[str]:
    """Return the correlation id of the current request, if any."""
    return _request_id_ctx.get()


def set_request_id(request_id: Optional[str]) -> contextvars.Token:
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def redact_sensitive_data(data: Any) -> Any:
    """Recursively replace values of sensitive keys in mappings and sequences."""
    if isinstance(data, dict):
        return {
            key: _REDACTED if str(key).lower() in _SENSITIVE_FIELDS else redact_sensitive_data(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact_sensitive_data(item) for item in data]
    return data


class JSONFormatter(logging.Formatter):
    """Formatter that renders log records as single-line JSON objects."""

    # Attributes populated by logging.LogRecord that are not surfaced as extras
    _RESERVED = {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "ts": timestamp.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": get_request_id(),
        }

        extra: Dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in self._RESERVED or key.startswith("_"):
                continue
            extra[key] = value
        payload.update(redact_sensitive_data(extra))

        if record.exc_info:
            payload["error_type"] = record.exc_info[0].__name__
            payload["error"] = str(record.exc_info[1])
            payload["stack"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default, separators=(",", ":"))


def _json_default(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return obj.isoformat()
    return str(obj)


_configured = False


def configure_logging(level_name: str = "INFO") -> None:
    """Install the JSON formatter on the root logger. Safe to call more than once."""
    global _configured
    if _configured:
        return

    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]
    logging.captureWarnings(True)

    # Request logs come from our middleware; keep the server's own access log quiet
    for noisy_logger in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        log = logging.getLogger(noisy_logger)
        log.handlers = []
        log.propagate = True
        log.setLevel(logging.WARNING)

    _configured = True
