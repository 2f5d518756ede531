"""
Push-channel message framing.

Every event goes out as three labeled lines followed by a blank line:

    id: <message-id>
    event: <category>
    data: <json>
"""

import json
from dataclasses import dataclass
from typing import Any, Dict

MCP_EVENT = "mcp"

# SSE comment line, ignored by EventSource clients
KEEPALIVE_FRAME = ": keepalive\n\n"


class FramingError(Exception):
    """Raised when an event payload cannot be serialized."""
    pass


@dataclass(frozen=True)
class Event:
    id: str
    event: str
    data: Dict[str, Any]


def frame(event: Event) -> str:
    try:
        payload = json.dumps(event.data, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise FramingError(f"Cannot serialize payload for message {event.id}: {e}") from e

    return f"id: {event.id}\nevent: {event.event}\ndata: {payload}\n\n"


def parse_frame(text: str) -> Event:
    """Decode a single frame produced by ``frame``."""
    fields: Dict[str, str] = {}
    for line in text.strip("\n").split("\n"):
        if not line or line.startswith(":"):
            continue
        key, _, value = line.partition(":")
        fields[key] = value[1:] if value.startswith(" ") else value

    if "data" not in fields:
        raise ValueError(f"Frame has no data line: {text!r}")

    return Event(
        id=fields.get("id", ""),
        event=fields.get("event", "message"),
        data=json.loads(fields["data"]),
    )
