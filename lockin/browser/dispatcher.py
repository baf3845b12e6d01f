"""
Event Dispatcher — routes each parsed browser event to the one handler it
triggers and reports what happened.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..actions.grouping import TabGroupingService
from ..actions.lock_gate import LockGate
from ..errors import BrowserError, TabNotFoundError
from ..storage.store import SessionArea
from .events import BrowserEvent
from .host import BrowserHost, Tab

logger = logging.getLogger(__name__)


class EventDispatcher:

    def __init__(
        self,
        host: BrowserHost,
        grouping: TabGroupingService,
        gate: LockGate,
        session: SessionArea,
    ):
        self._host = host
        self._grouping = grouping
        self._gate = gate
        self._session = session

    def dispatch(self, event: BrowserEvent) -> Dict[str, Any]:
        handler = getattr(self, f"_on_{event.event_type}", None)
        if handler is None:
            raise ValueError(f"No handler for event type {event.event_type!r}")
        return handler(event)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _on_installed(self, event: BrowserEvent) -> Dict[str, Any]:
        self._grouping.install_context_menus()
        return {"menus": len(self._host.context_menus())}

    def _on_startup(self, event: BrowserEvent) -> Dict[str, Any]:
        # A new browser session: every session unlock expires
        self._session.clear()
        logger.info("Browser session started; session unlocks cleared.")
        return {}

    def _on_menu_click(self, event: BrowserEvent) -> Dict[str, Any]:
        group = self._grouping.handle_menu_click(event.metadata["menu_item_id"], event.tab_id)
        return {"group": group.ref() if group else None}

    def _on_tab_updated(self, event: BrowserEvent) -> Dict[str, Any]:
        self._upsert(event)
        return {}

    def _on_tab_removed(self, event: BrowserEvent) -> Dict[str, Any]:
        self._host.remove_tab(event.tab_id)
        return {}

    def _on_tab_activated(self, event: BrowserEvent) -> Dict[str, Any]:
        if event.metadata:
            self._upsert(event)
        try:
            decision = self._gate.on_tab_activated(event.tab_id)
        except TabNotFoundError:
            logger.info("Activated tab %s is unknown; skipping lock check.", event.tab_id)
            return {"state": None}
        if decision is None:
            return {"state": None}
        return {"state": decision.state.value, "redirect_url": decision.redirect_url}

    def _on_group_created(self, event: BrowserEvent) -> Dict[str, Any]:
        try:
            group = self._host.confirm_group(event.metadata["request_id"], event.metadata["group_id"])
        except BrowserError as e:
            # The group was emptied and dropped before the browser answered
            logger.warning("Ignoring group confirmation: %s", e)
            return {"confirmed": False}
        return {"confirmed": True, "group": group.ref()}

    def _on_group_removed(self, event: BrowserEvent) -> Dict[str, Any]:
        return {"removed": self._host.remove_group(event.metadata["group_id"])}

    def _upsert(self, event: BrowserEvent) -> None:
        try:
            known = self._host.get_tab(event.tab_id)
        except TabNotFoundError:
            known = Tab(id=event.tab_id)
        self._host.upsert_tab(Tab(
            id=event.tab_id,
            window_id=event.metadata.get("window_id", known.window_id),
            url=event.metadata.get("url", known.url),
            title=event.metadata.get("title", known.title),
        ))
