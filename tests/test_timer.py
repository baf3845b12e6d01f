"""Tests for the countdown timer and the alarm scheduler."""

import asyncio
import threading

import pytest

from lockin.actions.timer import ALARM_NAME, CountdownTimer
from lockin.api.app import _alarm_loop
from lockin.browser.alarms import AlarmScheduler
from lockin.errors import TimerStateError


@pytest.fixture
def timer(storage, alarms, host, clock):
    return CountdownTimer(storage.local, alarms, host, clock=clock)


class TestAlarmScheduler:
    def test_create_replaces_same_name(self, alarms):
        alarms.create("x", when=100)
        alarms.create("x", when=200)
        assert len(alarms.all()) == 1
        assert alarms.get("x").scheduled_time == 200

    def test_tick_fires_due_alarms_once(self):
        fired = []
        alarms = AlarmScheduler(clock=lambda: 0)
        alarms.add_listener(lambda a: fired.append(a.name))
        alarms.create("early", when=10)
        alarms.create("late", when=50)

        assert [a.name for a in alarms.tick(now=20)] == ["early"]
        assert alarms.tick(now=20) == []
        alarms.tick(now=60)
        assert fired == ["early", "late"]

    def test_clear(self, alarms):
        alarms.create("x", when=10)
        assert alarms.clear("x") is True
        assert alarms.clear("x") is False
        assert alarms.tick(now=100) == []

    def test_failing_listener_does_not_block_others(self):
        seen = []
        alarms = AlarmScheduler()

        def broken(alarm):
            raise RuntimeError("listener bug")

        alarms.add_listener(broken)
        alarms.add_listener(lambda a: seen.append(a.name))
        alarms.create("x", when=0)
        alarms.tick(now=1)
        assert seen == ["x"]

    async def test_loop_ticks_off_the_event_loop_thread(self):
        alarms = AlarmScheduler(clock=lambda: 10)
        alarms.create("due", when=0)
        fired = []
        alarms.add_listener(lambda a: fired.append((a.name, threading.current_thread())))

        task = asyncio.create_task(_alarm_loop(alarms, interval_ms=1))
        try:
            for _ in range(200):
                if fired:
                    break
                await asyncio.sleep(0.01)
        finally:
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert [name for name, _ in fired] == ["due"]
        assert fired[0][1] is not threading.main_thread()


class TestCountdownTimer:
    def test_start_schedules_alarm(self, timer, alarms, clock, storage):
        timer.start(5000)
        assert alarms.get(ALARM_NAME).scheduled_time == clock.now + 5000
        assert storage.local.get("StartingTime") == {"StartingTime": clock.now}

    def test_restart_replaces_schedule(self, timer, alarms, clock):
        timer.start(5000)
        clock.advance(1000)
        timer.start(60_000)
        assert len(alarms.all()) == 1
        assert alarms.get(ALARM_NAME).scheduled_time == clock.now + 60_000

    def test_start_then_pause_keeps_duration(self, timer, alarms):
        timer.start(5000)
        state = timer.pause()
        assert state.remaining_time == 5000
        assert alarms.get(ALARM_NAME) is None
        assert state.running is False

    def test_pause_subtracts_elapsed(self, timer, clock):
        timer.start(10_000)
        clock.advance(3_000)
        assert timer.pause().remaining_time == 7_000

    def test_continue_rearms_for_remaining(self, timer, alarms, clock):
        timer.start(10_000)
        clock.advance(4_000)
        timer.pause()
        clock.advance(60_000)  # paused time does not count
        state = timer.resume()
        assert alarms.get(ALARM_NAME).scheduled_time == clock.now + 6_000
        assert state.starting_time == clock.now

    def test_pause_resume_pause(self, timer, clock):
        timer.start(10_000)
        clock.advance(2_000)
        timer.pause()
        timer.resume()
        clock.advance(3_000)
        assert timer.pause().remaining_time == 5_000

    def test_pause_after_expiry_goes_negative(self, timer, clock):
        timer.start(1_000)
        clock.advance(1_500)
        assert timer.pause().remaining_time == -500

    def test_pause_without_start(self, timer):
        with pytest.raises(TimerStateError):
            timer.pause()

    def test_continue_without_start(self, timer):
        with pytest.raises(TimerStateError):
            timer.resume()

    def test_negative_duration_rejected(self, timer):
        with pytest.raises(ValueError):
            timer.start(-1)

    def test_alarm_opens_alert_popup(self, timer, alarms, host, clock):
        timer.start(5000)
        host.drain_commands()
        clock.advance(5000)
        alarms.tick()

        commands = host.drain_commands()
        assert len(commands) == 1
        assert commands[0].type == "CREATE_WINDOW"
        assert commands[0].params == {
            "url": "chrome-extension://lockin/html/alert.html",
            "type": "popup",
            "width": 400,
            "height": 200,
        }

    def test_paused_timer_never_fires(self, timer, alarms, host, clock):
        timer.start(5000)
        timer.pause()
        clock.advance(10_000)
        assert alarms.tick() == []
        assert host.pending_commands() == []

    def test_other_alarms_ignored(self, timer, alarms, host):
        alarms.create("somethingElse", when=0)
        alarms.tick(now=1)
        assert host.pending_commands() == []
