"""
Browser Host — the service-side mirror of the browser the extension runs in.

The extension reports tabs as they change; every mutation the service wants
(grouping, redirecting, opening a popup) is applied to the mirror and queued
as a BrowserCommand that the extension drains and executes with the real
browser APIs.

Group ids belong to the browser. A group created here starts out pending,
known only by a request id; commands that target it carry "requestId" until
the extension reports the real id back with confirm_group().
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set
from urllib.parse import quote

from ..errors import BrowserError, TabNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Tab:
    id: int
    window_id: int = 1
    url: str = ""
    title: str = ""


@dataclass
class TabGroup:
    window_id: int
    title: str = ""
    color: str = "grey"
    id: Optional[int] = None        # browser group id, None while pending
    request_id: str = ""
    tab_ids: Set[int] = field(default_factory=set)

    @property
    def pending(self) -> bool:
        return self.id is None

    def ref(self) -> Dict[str, Any]:
        """How commands address this group."""
        if self.id is None:
            return {"requestId": self.request_id}
        return {"groupId": self.id}


@dataclass
class ContextMenuItem:
    id: str
    title: str
    contexts: List[str] = field(default_factory=lambda: ["all"])


@dataclass
class BrowserCommand:
    type: str
    params: Dict[str, Any] = field(default_factory=dict)


class BrowserHost:

    def __init__(self, extension_base_url: str = "chrome-extension://lockin"):
        self.extension_base_url = extension_base_url.rstrip("/")
        self._tabs: Dict[int, Tab] = {}
        self._groups: List[TabGroup] = []
        self._menus: Dict[str, ContextMenuItem] = {}
        self._outbox: List[BrowserCommand] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    def upsert_tab(self, tab: Tab) -> Tab:
        """Record a tab as reported by the extension."""
        with self._lock:
            self._tabs[tab.id] = tab
            return tab

    def remove_tab(self, tab_id: int) -> bool:
        """Forget a closed tab. A group left without tabs is gone in the browser too."""
        with self._lock:
            removed = self._tabs.pop(tab_id, None) is not None
            for group in list(self._groups):
                group.tab_ids.discard(tab_id)
                if not group.tab_ids:
                    self._groups.remove(group)
            return removed

    def get_tab(self, tab_id: int) -> Tab:
        with self._lock:
            tab = self._tabs.get(tab_id)
        if tab is None:
            raise TabNotFoundError(tab_id)
        return tab

    def all_tabs(self) -> List[Tab]:
        with self._lock:
            return list(self._tabs.values())

    def update_tab(self, tab_id: int, url: str) -> Tab:
        """Navigate a tab to a new URL."""
        with self._lock:
            tab = self.get_tab(tab_id)
            tab.url = url
            self._emit("UPDATE_TAB", tabId=tab_id, url=url)
            return tab

    # ------------------------------------------------------------------
    # Tab groups
    # ------------------------------------------------------------------

    def query_groups(self, title: Optional[str] = None, window_id: Optional[int] = None) -> List[TabGroup]:
        """Groups matching *title* and *window_id*, pending ones included."""
        with self._lock:
            return [
                g for g in self._groups
                if (title is None or g.title == title)
                and (window_id is None or g.window_id == window_id)
            ]

    def group_of(self, tab_id: int) -> Optional[TabGroup]:
        with self._lock:
            for group in self._groups:
                if tab_id in group.tab_ids:
                    return group
            return None

    def create_group(self, tab_ids: List[int], title: str, color: str) -> TabGroup:
        """Create a titled, coloured group from tabs in the window of the first tab."""
        if not tab_ids:
            raise BrowserError("At least one tab id is required")
        with self._lock:
            tabs = [self.get_tab(t) for t in tab_ids]
            group = TabGroup(
                window_id=tabs[0].window_id,
                title=title,
                color=color,
                request_id=uuid.uuid4().hex,
            )
            self._groups.append(group)
            self._move(tab_ids, group)
            self._emit("CREATE_GROUP", requestId=group.request_id, tabIds=list(tab_ids),
                       title=title, color=color)
            return group

    def group_tabs(self, tab_ids: List[int], group: TabGroup) -> TabGroup:
        """Add tabs to an existing (possibly still pending) group."""
        if not tab_ids:
            raise BrowserError("At least one tab id is required")
        with self._lock:
            if not any(g is group for g in self._groups):
                raise BrowserError(f"Group {group.ref()} no longer exists")
            for t in tab_ids:
                self.get_tab(t)
            self._move(tab_ids, group)
            self._emit("GROUP_TABS", tabIds=list(tab_ids), **group.ref())
            return group

    def confirm_group(self, request_id: str, group_id: int) -> TabGroup:
        """Attach the browser's group id to the group created under *request_id*."""
        with self._lock:
            for group in self._groups:
                if group.request_id == request_id:
                    group.id = group_id
                    return group
        raise BrowserError(f"No pending group for request {request_id}")

    def remove_group(self, group_id: int) -> bool:
        with self._lock:
            before = len(self._groups)
            self._groups = [g for g in self._groups if g.id != group_id]
            return len(self._groups) < before

    def _move(self, tab_ids: List[int], group: TabGroup) -> None:
        for other in list(self._groups):
            if other is group:
                continue
            other.tab_ids.difference_update(tab_ids)
            if not other.tab_ids:
                self._groups.remove(other)
        group.tab_ids.update(tab_ids)

    # ------------------------------------------------------------------
    # Windows, menus, extension pages
    # ------------------------------------------------------------------

    def create_window(self, url: str, type: str = "normal", width: Optional[int] = None,
                      height: Optional[int] = None) -> None:
        params: Dict[str, Any] = {"url": url, "type": type}
        if width is not None:
            params["width"] = width
        if height is not None:
            params["height"] = height
        with self._lock:
            self._emit("CREATE_WINDOW", **params)

    def create_context_menu(self, item: ContextMenuItem) -> None:
        with self._lock:
            self._menus[item.id] = item
            self._emit("CREATE_CONTEXT_MENU", id=item.id, title=item.title, contexts=list(item.contexts))

    def context_menus(self) -> List[ContextMenuItem]:
        with self._lock:
            return list(self._menus.values())

    def extension_url(self, path: str, **query: str) -> str:
        """Absolute URL of an extension page, with URI-component encoded query values."""
        url = f"{self.extension_base_url}/{path.lstrip('/')}"
        if query:
            url += "?" + "&".join(f"{k}={quote(v, safe=_URI_COMPONENT_SAFE)}" for k, v in query.items())
        return url

    # ------------------------------------------------------------------
    # Outbound command queue
    # ------------------------------------------------------------------

    def drain_commands(self) -> List[BrowserCommand]:
        """Return and clear every queued command, oldest first."""
        with self._lock:
            commands, self._outbox = self._outbox, []
            return commands

    def pending_commands(self) -> List[BrowserCommand]:
        with self._lock:
            return list(self._outbox)

    def _emit(self, type: str, /, **params: Any) -> None:
        self._outbox.append(BrowserCommand(type=type, params=params))
        logger.debug("Queued browser command %s %s", type, params)


# Characters encodeURIComponent leaves untouched beyond quote()'s defaults
_URI_COMPONENT_SAFE = "!*'()"
