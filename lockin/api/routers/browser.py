"""
/browser — ingest host events from the extension and hand back the browser
commands it should execute.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import BrowserCommandOut, BrowserEventIn
from ...browser.events import parse_browser_event

router = APIRouter(prefix="/browser", tags=["browser"])


def _get_dispatcher(request: Request):
    return request.app.state.services["dispatcher"]


def _get_host(request: Request):
    return request.app.state.host


def _to_payload(event: BrowserEventIn) -> dict:
    payload = {"type": event.type, "data": event.data}
    if event.timestamp is not None:
        payload["timestamp"] = event.timestamp
    return payload


@router.post("/event")
def ingest_event(event: BrowserEventIn, dispatcher=Depends(_get_dispatcher)):
    """Accept a single host event and run the handler it triggers."""
    parsed = parse_browser_event(_to_payload(event))
    if parsed is None:
        raise HTTPException(status_code=422, detail=f"Unrecognised event type: {event.type!r}")
    return {"status": "handled", "result": dispatcher.dispatch(parsed)}


@router.post("/batch")
def ingest_batch(events: List[BrowserEventIn], dispatcher=Depends(_get_dispatcher)):
    """Accept a batch of events in order; unparseable ones are skipped."""
    handled = 0
    for event in events:
        parsed = parse_browser_event(_to_payload(event))
        if parsed:
            dispatcher.dispatch(parsed)
            handled += 1
    return {"handled": handled, "total": len(events)}


@router.get("/commands", response_model=List[BrowserCommandOut])
def drain_commands(host=Depends(_get_host)):
    """Return and clear the queued browser commands, oldest first."""
    return [BrowserCommandOut(type=c.type, params=c.params) for c in host.drain_commands()]
