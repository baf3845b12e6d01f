"""
Lock Gate — redirects activated tabs on distracting domains to the PIN page,
unless the domain was already unlocked during this browser session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..browser.host import BrowserHost
from ..registry import DistractionRegistry, hostname_of
from ..storage.store import SessionArea

logger = logging.getLogger(__name__)


def session_key(domain: str) -> str:
    return f"unlocked_{domain}"


class LockState(str, Enum):
    UNLOCKED = "unlocked"
    LOCKED = "locked"


@dataclass
class LockDecision:
    state: LockState
    domain: str = ""
    redirect_url: Optional[str] = None
    reason: str = ""


class LockGate:

    def __init__(
        self,
        host: BrowserHost,
        registry: DistractionRegistry,
        session: SessionArea,
        lock_page: str = "html/locked.html",
        extension_scheme: str = "chrome-extension",
    ):
        self._host = host
        self._registry = registry
        self._session = session
        self._lock_page = lock_page
        self._extension_scheme = extension_scheme

    def evaluate(self, url: str) -> LockDecision:
        """Decide the lock state of *url* without touching any tab."""
        if url.lower().startswith(self._extension_scheme + ":"):
            return LockDecision(LockState.UNLOCKED, reason="extension page")

        domain = hostname_of(url)
        if not self._registry.is_domain_distracting(domain):
            return LockDecision(LockState.UNLOCKED, domain=domain, reason="not distracting")

        if self._session.get(session_key(domain)).get(session_key(domain)):
            return LockDecision(LockState.UNLOCKED, domain=domain, reason="unlocked this session")

        return LockDecision(
            LockState.LOCKED,
            domain=domain,
            redirect_url=self._host.extension_url(self._lock_page, url=url),
            reason="distracting",
        )

    def on_tab_activated(self, tab_id: int) -> Optional[LockDecision]:
        """
        Handle a tab activation. Tabs without a URL are ignored (returns None).
        A locked decision rewrites the tab's location to the lock page.
        """
        tab = self._host.get_tab(tab_id)
        if not tab.url:
            return None

        decision = self.evaluate(tab.url)
        if decision.state is LockState.LOCKED:
            logger.info("%s is distracting.", decision.domain)
            self._host.update_tab(tab.id, decision.redirect_url)
        elif decision.reason == "unlocked this session":
            logger.info("%s is distracting but already unlocked this session.", decision.domain)
        return decision
