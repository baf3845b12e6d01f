"""
Distraction Registry — the persisted set of distracting domains and tabs.

Both lists live in the sync storage area:
    distractingDomains → sorted list of hostnames, no duplicates
    distractingTabs    → list of {"url", "title"}, unique by url
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from .storage.store import StorageArea

logger = logging.getLogger(__name__)

DOMAINS_KEY = "distractingDomains"
TABS_KEY = "distractingTabs"


def hostname_of(url: str) -> str:
    """Lower-cased hostname of *url*, or "" when it has none."""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""


def _is_web_url(url: Optional[str]) -> bool:
    return bool(url) and url.startswith("http")


class DistractionRegistry:

    def __init__(self, area: StorageArea):
        self._area = area
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    def domains(self) -> List[str]:
        return list(self._area.get(DOMAINS_KEY).get(DOMAINS_KEY, []))

    def is_domain_distracting(self, domain: str) -> bool:
        return domain in self.domains()

    def save_domain(self, url: Optional[str]) -> bool:
        """
        Add the hostname of *url* to the domain list.
        Non-web URLs are ignored. Returns True if the list changed.
        """
        if not _is_web_url(url):
            return False
        domain = hostname_of(url)
        if not domain:
            return False
        with self._lock:
            domains = self.domains()
            if domain in domains:
                return False
            domains.append(domain)
            domains.sort()
            self._area.set({DOMAINS_KEY: domains})
        logger.info("Saved %s to distracting domains list.", domain)
        return True

    def delete_domain(self, domain: str) -> bool:
        with self._lock:
            domains = self.domains()
            updated = [d for d in domains if d != domain]
            self._area.set({DOMAINS_KEY: updated})
        logger.info("Deleted %s from distracting domains list.", domain)
        return len(updated) < len(domains)

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    def tabs(self) -> List[Dict[str, Any]]:
        return list(self._area.get(TABS_KEY).get(TABS_KEY, []))

    def save_tab(self, url: Optional[str], title: str = "") -> bool:
        if not _is_web_url(url):
            return False
        with self._lock:
            tabs = self.tabs()
            if any(saved["url"] == url for saved in tabs):
                return False
            tabs.append({"url": url, "title": title})
            self._area.set({TABS_KEY: tabs})
        logger.info("Saved %s to distracting tabs list.", url)
        return True

    def delete_tab(self, url: str) -> bool:
        with self._lock:
            tabs = self.tabs()
            updated = [t for t in tabs if t["url"] != url]
            self._area.set({TABS_KEY: updated})
        logger.info("Deleted %s from distracting tabs list.", url)
        return len(updated) < len(tabs)
