"""
Exception hierarchy shared by the LockIn services and API routers.
"""

from __future__ import annotations


class LockInError(Exception):
    """Base class for all LockIn errors."""


class BrowserError(LockInError):
    """A tab, group or window operation could not be carried out."""


class TabNotFoundError(BrowserError):
    """The referenced tab no longer exists (usually closed by the user)."""

    def __init__(self, tab_id: int):
        super().__init__(f"No tab with id: {tab_id}")
        self.tab_id = tab_id


class TimerStateError(LockInError):
    """PAUSE or CONTINUE was issued without the state a prior START leaves behind."""


class TaskValidationError(LockInError):
    """Task or subtask text was empty after trimming."""
