"""
Unlock Flow — checks the PIN typed on the lock page and, on a match,
unlocks the target domain for the rest of the browser session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..browser.host import BrowserHost
from ..registry import hostname_of
from ..storage.store import BrowserStorage
from .lock_gate import session_key

logger = logging.getLogger(__name__)

PIN_KEY = "unlockPin"
INCORRECT_PIN_MESSAGE = "Incorrect PIN. Please try again."
INVALID_TARGET_MESSAGE = "Cannot unlock: the target address has no domain."


@dataclass
class UnlockResult:
    ok: bool
    domain: str = ""
    redirect_url: Optional[str] = None
    error_message: str = ""
    clear_input: bool = False


class UnlockFlow:

    def __init__(self, storage: BrowserStorage, host: BrowserHost):
        self._storage = storage
        self._host = host

    def set_pin(self, pin: str) -> None:
        self._storage.local.set({PIN_KEY: pin})
        logger.info("Unlock PIN updated.")

    def has_pin(self) -> bool:
        return PIN_KEY in self._storage.local.get(PIN_KEY)

    def submit(self, entered_pin: str, target_url: str, tab_id: Optional[int] = None) -> UnlockResult:
        """
        Compare *entered_pin* with the stored PIN (exact match). On success the
        target domain is unlocked for this session and, when the lock page's
        tab is known, that tab is sent back to *target_url*. A target without
        a hostname unlocks nothing.
        """
        stored = self._storage.local.get(PIN_KEY).get(PIN_KEY)

        if stored is None or entered_pin != stored:
            return UnlockResult(ok=False, error_message=INCORRECT_PIN_MESSAGE, clear_input=True)

        domain = hostname_of(target_url)
        if not domain:
            logger.warning("Refusing to unlock unparseable target %r", target_url)
            return UnlockResult(ok=False, error_message=INVALID_TARGET_MESSAGE)

        self._storage.session.set({session_key(domain): True})
        logger.info("Unlocked %s for this session.", domain)

        if tab_id is not None:
            self._host.update_tab(tab_id, target_url)
        return UnlockResult(ok=True, domain=domain, redirect_url=target_url)
