"""
Countdown Timer — a single "locked-in" session that can be started, paused
and continued. When the alarm fires an alert popup is opened.

State lives in the local storage area (milliseconds):
    StartingTime  — when the current run started or resumed
    RemainingTime — time left as of StartingTime
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from ..browser.alarms import Alarm, AlarmScheduler, now_ms
from ..browser.host import BrowserHost
from ..errors import TimerStateError
from ..storage.store import StorageArea

logger = logging.getLogger(__name__)

ALARM_NAME = "LockedInSession"
STARTING_TIME_KEY = "StartingTime"
REMAINING_TIME_KEY = "RemainingTime"


@dataclass
class TimerState:
    starting_time: Optional[int] = None
    remaining_time: Optional[int] = None
    alarm_time: Optional[int] = None

    @property
    def running(self) -> bool:
        return self.alarm_time is not None


class CountdownTimer:

    def __init__(
        self,
        area: StorageArea,
        alarms: AlarmScheduler,
        host: BrowserHost,
        alert_page: str = "html/alert.html",
        alert_size: tuple[int, int] = (400, 200),
        clock: Callable[[], int] = now_ms,
    ):
        self._area = area
        self._alarms = alarms
        self._host = host
        self._alert_page = alert_page
        self._alert_size = alert_size
        self._clock = clock
        self._lock = threading.Lock()
        alarms.add_listener(self.on_alarm)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, duration: int) -> TimerState:
        """Arm the alarm *duration* ms from now, replacing any earlier schedule."""
        if duration < 0:
            raise ValueError("duration must be >= 0")
        with self._lock:
            now = self._clock()
            self._alarms.create(ALARM_NAME, when=now + duration)
            self._area.set({STARTING_TIME_KEY: now, REMAINING_TIME_KEY: duration})
        logger.info("Created timer for %d ms", duration)
        return self.state()

    def pause(self) -> TimerState:
        """
        Cancel the alarm and bank the time left. The result is not floored at
        zero, so pausing after the alarm would have fired yields a negative value.
        """
        with self._lock:
            data = self._area.get([STARTING_TIME_KEY, REMAINING_TIME_KEY])
            self._require(data, STARTING_TIME_KEY, REMAINING_TIME_KEY, command="PAUSE")
            self._alarms.clear(ALARM_NAME)
            elapsed = self._clock() - data[STARTING_TIME_KEY]
            self._area.set({REMAINING_TIME_KEY: data[REMAINING_TIME_KEY] - elapsed})
        logger.info('Alarm "Paused"')
        return self.state()

    def resume(self) -> TimerState:
        """Re-arm the alarm for the banked remaining time."""
        with self._lock:
            data = self._area.get(REMAINING_TIME_KEY)
            self._require(data, REMAINING_TIME_KEY, command="CONTINUE")
            now = self._clock()
            self._alarms.create(ALARM_NAME, when=now + data[REMAINING_TIME_KEY])
            self._area.set({STARTING_TIME_KEY: now})
        logger.info("Alarm continued with %d ms left", data[REMAINING_TIME_KEY])
        return self.state()

    # ------------------------------------------------------------------
    # Alarm + state
    # ------------------------------------------------------------------

    def on_alarm(self, alarm: Alarm) -> None:
        if alarm.name != ALARM_NAME:
            return
        logger.info("Lockdown timer ended!")
        width, height = self._alert_size
        self._host.create_window(
            url=self._host.extension_url(self._alert_page),
            type="popup",
            width=width,
            height=height,
        )

    def state(self) -> TimerState:
        data = self._area.get([STARTING_TIME_KEY, REMAINING_TIME_KEY])
        alarm = self._alarms.get(ALARM_NAME)
        return TimerState(
            starting_time=data.get(STARTING_TIME_KEY),
            remaining_time=data.get(REMAINING_TIME_KEY),
            alarm_time=alarm.scheduled_time if alarm else None,
        )

    @staticmethod
    def _require(data: dict, *keys: str, command: str) -> None:
        missing = [k for k in keys if data.get(k) is None]
        if missing:
            raise TimerStateError(
                f"{command} requires a started timer; missing {', '.join(missing)}"
            )
