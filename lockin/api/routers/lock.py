"""
/lock — lock page backend: PIN submission, PIN setup and lock status.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from ...api.schemas import LockStatusOut, PinIn, UnlockRequest, UnlockResultOut

router = APIRouter(prefix="/lock", tags=["lock"])


def _get_services(request: Request):
    return request.app.state.services


@router.post("/unlock", response_model=UnlockResultOut)
def unlock(req: UnlockRequest, services=Depends(_get_services)):
    """A wrong PIN is an ordinary outcome: 200 with ok=false."""
    result = services["unlock"].submit(req.pin, req.url, tab_id=req.tab_id)
    return UnlockResultOut(**result.__dict__)


@router.put("/pin")
def set_pin(body: PinIn, services=Depends(_get_services)):
    services["unlock"].set_pin(body.pin)
    return {"status": "saved"}


@router.get("/pin")
def pin_status(services=Depends(_get_services)):
    return {"configured": services["unlock"].has_pin()}


@router.get("/status", response_model=LockStatusOut)
def lock_status(url: str = Query(...), services=Depends(_get_services)):
    decision = services["gate"].evaluate(url)
    return LockStatusOut(
        url=url,
        domain=decision.domain,
        state=decision.state.value,
        redirect_url=decision.redirect_url,
        reason=decision.reason,
    )
