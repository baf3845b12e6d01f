"""
Browser Event Receiver — accepts events POSTed by the browser extension
and converts them to BrowserEvent objects for the dispatcher.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Mapping from browser extension event names → internal event_type strings
_EVENT_MAP: Dict[str, str] = {
    "INSTALLED": "installed",
    "STARTUP": "startup",
    "CONTEXT_MENU_CLICK": "menu_click",
    "TAB_ACTIVATED": "tab_activated",
    "TAB_UPDATED": "tab_updated",
    "TAB_REMOVED": "tab_removed",
    "GROUP_CREATED": "group_created",
    "GROUP_REMOVED": "group_removed",
}

# Events that refer to a tab and are useless without its id
_TAB_EVENTS = {"menu_click", "tab_activated", "tab_updated", "tab_removed"}


@dataclass
class BrowserEvent:
    event_type: str
    timestamp: float
    tab_id: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def parse_browser_event(payload: Dict[str, Any]) -> Optional[BrowserEvent]:
    """
    Parse a raw browser extension payload into a BrowserEvent.
    Returns None if the event type is unknown or malformed.

    Expected payload shape:
    {
        "type": "TAB_ACTIVATED",
        "timestamp": 1700000000.123,   # optional, defaults to now
        "data": { "tabId": 7, "windowId": 1, "url": "...", "title": "..." }
    }
    """
    internal_type = _EVENT_MAP.get(payload.get("type", ""))
    if not internal_type:
        return None

    data = payload.get("data") or {}
    timestamp = float(payload.get("timestamp") or time.time())

    tab_id = data.get("tabId")
    if internal_type in _TAB_EVENTS:
        if not _is_int(tab_id):
            return None

    metadata: Dict[str, Any] = {}

    if internal_type in ("tab_activated", "tab_updated"):
        # Activation may carry the resolved tab; only forward what was sent
        for src, dst in (("windowId", "window_id"), ("url", "url"), ("title", "title")):
            if src in data:
                metadata[dst] = data[src]

    elif internal_type == "menu_click":
        metadata["menu_item_id"] = data.get("menuItemId", "")

    elif internal_type in ("group_created", "group_removed"):
        group_id = data.get("groupId")
        if not _is_int(group_id):
            return None
        metadata["group_id"] = group_id
        if internal_type == "group_created":
            request_id = data.get("requestId")
            if not isinstance(request_id, str) or not request_id:
                return None
            metadata["request_id"] = request_id

    return BrowserEvent(
        event_type=internal_type,
        timestamp=timestamp,
        tab_id=tab_id if internal_type in _TAB_EVENTS else None,
        metadata=metadata,
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
