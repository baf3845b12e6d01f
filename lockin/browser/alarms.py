"""
Alarm Scheduler — named one-shot alarms, polled by the app's background loop.

Creating an alarm under a name that is already scheduled replaces it, so a
name never has more than one pending fire time.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Alarm:
    name: str
    scheduled_time: int     # epoch ms


class AlarmScheduler:

    def __init__(self, clock: Callable[[], int] = now_ms):
        self._clock = clock
        self._alarms: Dict[str, Alarm] = {}
        self._listeners: list[Callable[[Alarm], None]] = []
        self._lock = threading.Lock()

    def create(self, name: str, when: int) -> Alarm:
        alarm = Alarm(name=name, scheduled_time=int(when))
        with self._lock:
            self._alarms[name] = alarm
        return alarm

    def clear(self, name: str) -> bool:
        with self._lock:
            return self._alarms.pop(name, None) is not None

    def get(self, name: str) -> Optional[Alarm]:
        with self._lock:
            return self._alarms.get(name)

    def all(self) -> List[Alarm]:
        with self._lock:
            return sorted(self._alarms.values(), key=lambda a: a.scheduled_time)

    def add_listener(self, fn: Callable[[Alarm], None]) -> None:
        """Register a callback(alarm) invoked once for every alarm that fires."""
        self._listeners.append(fn)

    def tick(self, now: Optional[int] = None) -> List[Alarm]:
        """Fire and remove every alarm due at *now*. Returns the fired alarms."""
        if now is None:
            now = self._clock()
        with self._lock:
            due = [a for a in self._alarms.values() if a.scheduled_time <= now]
            for alarm in due:
                del self._alarms[alarm.name]

        for alarm in sorted(due, key=lambda a: a.scheduled_time):
            for listener in self._listeners:
                try:
                    listener(alarm)
                except Exception:
                    logger.exception("Alarm listener failed for %s", alarm.name)
        return due
