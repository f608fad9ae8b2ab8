"""Shared structured JSON logging helpers.

Every log line in the project is one JSON object on stdout with sorted keys,
so pipeline, fetcher, and CLI events can be grepped and parsed the same way.
"""

from __future__ import annotations

import json
import sys
from datetime import UTC, datetime
from typing import Any, TextIO


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(UTC).isoformat()


def render_json_line(event: dict[str, Any]) -> str:
    """Serialize one event deterministically (sorted keys, ASCII only)."""
    return json.dumps(event, ensure_ascii=True, sort_keys=True, default=str)


def emit_json_event(
    event_type: str,
    *,
    run_id: str | None = None,
    level: str = "info",
    stream: TextIO | None = None,
    **payload: Any,
) -> str:
    """Emit one JSON event line and return the rendered line."""
    event: dict[str, Any] = {
        "event_type": event_type,
        "level": level,
        "timestamp": utc_timestamp(),
        "run_id": run_id,
    }
    event.update(payload)
    line = render_json_line(event)
    print(line, file=stream or sys.stdout)
    return line
