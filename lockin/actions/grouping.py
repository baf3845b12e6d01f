"""
Tab Grouping — files tabs into a "Productive" or "Distracting" tab group
from the context menu, and records distracting tabs in the registry.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

from ..browser.host import BrowserHost, ContextMenuItem, Tab, TabGroup
from ..errors import BrowserError, TabNotFoundError
from ..registry import DistractionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupStyle:
    title: str
    color: str


PRODUCTIVE = GroupStyle(title="Productive", color="green")
DISTRACTING = GroupStyle(title="Distracting", color="red")

MARK_PRODUCTIVE = "markProductive"
MARK_DISTRACTING = "markDistracting"

CONTEXT_MENUS = [
    ContextMenuItem(id=MARK_PRODUCTIVE, title=f"Mark as {PRODUCTIVE.title}"),
    ContextMenuItem(id=MARK_DISTRACTING, title=f"Mark as {DISTRACTING.title}"),
]


class TabGroupingService:

    def __init__(self, host: BrowserHost, registry: DistractionRegistry):
        self._host = host
        self._registry = registry

    def install_context_menus(self) -> None:
        """Create the two "Mark as …" entries. Called when the extension is installed."""
        for item in CONTEXT_MENUS:
            self._host.create_context_menu(item)

    def handle_menu_click(self, menu_item_id: str, tab_id: int) -> Optional[TabGroup]:
        """
        Entry point for a context-menu click. The tab may have been closed
        between the right-click and the menu selection; in that case nothing
        happens. Returns the group the tab ended up in, if any.
        """
        try:
            tab = self._host.get_tab(tab_id)
        except TabNotFoundError:
            logger.info("Tab not found, it was likely closed before the action could complete.")
            return None

        if menu_item_id == MARK_PRODUCTIVE:
            return self.group_tab(tab, True)
        if menu_item_id == MARK_DISTRACTING:
            return self.group_tab(tab, False)
        logger.warning("Ignoring unknown context menu item %r", menu_item_id)
        return None

    def group_tab(self, tab: Tab, is_productive: bool) -> Optional[TabGroup]:
        """
        Move *tab* into the Productive or Distracting group of its window,
        creating the group if needed. Distracting tabs are also saved to the
        registry. Errors are logged and the action is abandoned.
        """
        style = PRODUCTIVE if is_productive else DISTRACTING

        try:
            existing = self._host.query_groups(title=style.title, window_id=tab.window_id)

            if existing:
                group = self._host.group_tabs([tab.id], existing[0])
            else:
                group = self._host.create_group([tab.id], title=style.title, color=style.color)

            if not is_productive:
                self._registry.save_domain(tab.url)
                self._registry.save_tab(tab.url, tab.title)
        except (BrowserError, sqlite3.Error) as e:
            logger.error("Error grouping tab: %s", e)
            return None

        return group
