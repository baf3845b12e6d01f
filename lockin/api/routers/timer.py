"""
/timer — START_TIMER / PAUSE_TIMER / CONTINUE_TIMER messages and timer state.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import TimerMessageIn, TimerStateOut
from ...errors import TimerStateError

router = APIRouter(prefix="/timer", tags=["timer"])


def _get_timer(request: Request):
    return request.app.state.services["timer"]


def _to_out(state) -> TimerStateOut:
    return TimerStateOut(
        starting_time=state.starting_time,
        remaining_time=state.remaining_time,
        alarm_time=state.alarm_time,
        running=state.running,
    )


@router.post("/message")
def timer_message(msg: TimerMessageIn, timer=Depends(_get_timer)):
    """Handle one timer command; acknowledged with an empty object."""
    try:
        if msg.type == "START_TIMER":
            if msg.duration is None:
                raise HTTPException(status_code=422, detail="START_TIMER requires a duration")
            timer.start(msg.duration)
        elif msg.type == "PAUSE_TIMER":
            timer.pause()
        else:
            timer.resume()
    except TimerStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {}


@router.get("", response_model=TimerStateOut)
def get_timer(timer=Depends(_get_timer)):
    return _to_out(timer.state())
