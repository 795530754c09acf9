"""
Structured logging for creatorhub.

One named logger, "creatorhub". Records carry the request id of the HTTP
request they were emitted under plus whatever event fields the caller
attached (user_id, plan_id, event_type, ...).

- production: one JSON object per line with every event field
- elsewhere: a readable line with the same fields as key=value pairs
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional, Tuple

request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else on a record came from `extra`
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "request_id"}

# Event fields whose values must never reach the logs
_REDACTED_KEYS = ("password", "token", "secret", "authorization")

_TRUNCATE_AT = 500


def get_request_id(default: Optional[str] = None) -> Optional[str]:
    """Request id of the HTTP request being served, if any."""
    rid = request_id_ctx_var.get()
    return rid if rid is not None else default


def latency_bucket_ms(latency_ms: Optional[float]) -> str:
    if latency_ms is None:
        return "unknown"
    for bound, label in ((10, "<10ms"), (100, "10-100ms"), (500, "100-500ms"), (1000, "500-1000ms")):
        if latency_ms < bound:
            return label
    return ">=1000ms"


def _utc_timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z")


def _event_fields(record: logging.LogRecord) -> Iterator[Tuple[str, object]]:
    for key, value in record.__dict__.items():
        if key in _RECORD_ATTRS or key.startswith("_") or value is None:
            continue
        yield key, value


class RequestIdFilter(logging.Filter):
    """Stamp records with the current request id unless the caller set one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": _utc_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(_event_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PrettyFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "request_id", None)
        parts = [_utc_timestamp(record), record.levelname, "[creatorhub]"]
        if rid:
            parts.append(f"[rid={rid}]")
        parts.append(record.getMessage())
        parts.extend(f"{key}={value}" for key, value in _event_fields(record))
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(env: str = "development", level: int = logging.INFO) -> None:
    """Install the stdout handler on the "creatorhub" logger (replaces any previous one)."""
    logger = logging.getLogger("creatorhub")
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if env.lower() == "production" else PrettyFormatter())
    handler.addFilter(RequestIdFilter())

    logger.handlers = [handler]
    logger.propagate = True

    # uvicorn has its own handlers; keep its lines out of ours
    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.error").propagate = False


def _scrub(key: str, value: object) -> object:
    if any(marker in key.lower() for marker in _REDACTED_KEYS):
        return "<redacted>"
    if isinstance(value, (bool, int, float)):
        return value
    try:
        text = str(value)
    except Exception:
        return "<unserializable>"
    if len(text) <= _TRUNCATE_AT:
        return text
    return text[:_TRUNCATE_AT] + "...<truncated>"


def log_event(
    level: str,
    msg: str,
    *,
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    plan_id: Optional[str] = None,
    event_type: Optional[str] = None,
    error_code: Optional[str] = None,
    extra: Optional[Dict[str, object]] = None,
):
    """
    Emit a domain event (plan.created, content.purchased, ...).

    `extra` values are truncated and credential-like keys are redacted.
    """
    logger = logging.getLogger("creatorhub")
    if not logger.handlers:
        configure_logging(os.getenv("ENV", "development"))

    fields: Dict[str, object] = {
        "request_id": request_id or get_request_id(),
        "user_id": user_id,
        "plan_id": plan_id,
        "event_type": event_type,
        "error_code": error_code,
    }
    for key, value in (extra or {}).items():
        if key in _RECORD_ATTRS:
            key = f"ctx_{key}"
        fields[key] = _scrub(key, value)

    getattr(logger, level, logger.info)(msg, extra=fields)
