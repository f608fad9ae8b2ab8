"""Structured logging helpers for fetch operations."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from core.models import FetchLog
from core.structured_logging import render_json_line, utc_timestamp


def _isoformat(value: datetime | None) -> str | None:
    """Serialize datetimes for logs."""
    if value is None:
        return None
    return value.isoformat()


def fetch_log_to_dict(fetch_log: FetchLog) -> dict[str, Any]:
    """Convert FetchLog to a JSON-safe dictionary."""
    return {
        "id": fetch_log.id,
        "url": fetch_log.url,
        "status_code": fetch_log.status_code,
        "latency_ms": fetch_log.latency_ms,
        "bytes_received": fetch_log.bytes_received,
        "redirects_followed": fetch_log.redirects_followed,
        "error_code": fetch_log.error_code.value if fetch_log.error_code else None,
        "error_message": fetch_log.error_message,
        "timestamp": _isoformat(fetch_log.created_at),
        "run_id": fetch_log.run_id,
    }


def emit_event(event_type: str, **payload: Any) -> str:
    """Emit a per-hop fetch event line and return it for testability."""
    event = {
        "event_type": event_type,
        "timestamp": utc_timestamp(),
    }
    event.update(payload)
    line = render_json_line(event)
    print(line)
    return line


def emit_fetch_log(fetch_log: FetchLog) -> str:
    """Emit one structured fetch_log line and return it for testability."""
    line = render_json_line({"event_type": "fetch_log", **fetch_log_to_dict(fetch_log)})
    print(line)
    return line
