"""
Pydantic schemas for the FastAPI local API.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

# ── Browser events ─────────────────────────────────────────────────────────

class BrowserEventIn(BaseModel):
    type: str = Field(..., description="INSTALLED | STARTUP | CONTEXT_MENU_CLICK | TAB_* | GROUP_*")
    timestamp: Optional[float] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class BrowserCommandOut(BaseModel):
    type: str
    params: Dict[str, Any] = Field(default_factory=dict)


# ── Registry ───────────────────────────────────────────────────────────────

class DistractingTabOut(BaseModel):
    url: str
    title: str = ""


class DomainListOut(BaseModel):
    domains: List[str]


class TabListOut(BaseModel):
    tabs: List[DistractingTabOut]


# ── Lock / unlock ──────────────────────────────────────────────────────────

class UnlockRequest(BaseModel):
    pin: str
    url: str = Field(..., description="Original URL from the lock page's ?url= parameter")
    tab_id: Optional[int] = None


class UnlockResultOut(BaseModel):
    ok: bool
    domain: str = ""
    redirect_url: Optional[str] = None
    error_message: str = ""
    clear_input: bool = False


class PinIn(BaseModel):
    pin: str = Field(..., min_length=1)


class LockStatusOut(BaseModel):
    url: str
    domain: str
    state: str
    redirect_url: Optional[str] = None
    reason: str


# ── Timer ──────────────────────────────────────────────────────────────────

class TimerMessageIn(BaseModel):
    type: Literal["START_TIMER", "PAUSE_TIMER", "CONTINUE_TIMER"]
    duration: Optional[int] = Field(None, ge=0, description="milliseconds, START_TIMER only")


class TimerStateOut(BaseModel):
    starting_time: Optional[int]
    remaining_time: Optional[int]
    alarm_time: Optional[int]
    running: bool


# ── Tasks ──────────────────────────────────────────────────────────────────

class TaskTextIn(BaseModel):
    text: str


class TimedTaskIn(BaseModel):
    text: str
    deadline: str = ""


class DeadlineIn(BaseModel):
    deadline: str = Field(..., description="YYYY-MM-DD or empty")


class SubtaskOut(BaseModel):
    index: int
    text: str


class TaskOut(BaseModel):
    index: int
    kind: Literal["task", "timed"]
    text: str
    subtasks: List[SubtaskOut]
    deadline: Optional[str] = None


class TaskListOut(BaseModel):
    tasks: List[TaskOut]
