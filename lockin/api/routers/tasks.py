"""
/tasks — the task list page backend. Every mutation responds with the full,
freshly persisted list.
"""

from __future__ import annotations

from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import DeadlineIn, TaskListOut, TaskTextIn, TimedTaskIn
from ...errors import TaskValidationError

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _get_tasks(request: Request):
    return request.app.state.services["tasks"]


@contextmanager
def _http_errors():
    try:
        yield
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TaskValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("", response_model=TaskListOut)
def list_tasks(tasks=Depends(_get_tasks)):
    return {"tasks": tasks.render()}


@router.post("", response_model=TaskListOut, status_code=201)
def add_task(body: TaskTextIn, tasks=Depends(_get_tasks)):
    with _http_errors():
        return {"tasks": tasks.add_task(body.text)}


@router.post("/timed", response_model=TaskListOut, status_code=201)
def add_timed_task(body: TimedTaskIn, tasks=Depends(_get_tasks)):
    with _http_errors():
        return {"tasks": tasks.add_timed_task(body.text, body.deadline)}


@router.put("/{index}/text", response_model=TaskListOut)
def edit_text(index: int, body: TaskTextIn, tasks=Depends(_get_tasks)):
    with _http_errors():
        return {"tasks": tasks.edit_text(index, body.text)}


@router.put("/{index}/deadline", response_model=TaskListOut)
def edit_deadline(index: int, body: DeadlineIn, tasks=Depends(_get_tasks)):
    with _http_errors():
        return {"tasks": tasks.edit_deadline(index, body.deadline)}


@router.delete("/{index}", response_model=TaskListOut)
def delete_task(index: int, tasks=Depends(_get_tasks)):
    with _http_errors():
        return {"tasks": tasks.delete_task(index)}


@router.post("/{index}/subtasks", response_model=TaskListOut, status_code=201)
def add_subtask(index: int, body: TaskTextIn, tasks=Depends(_get_tasks)):
    with _http_errors():
        return {"tasks": tasks.add_subtask(index, body.text)}


@router.put("/{index}/subtasks/{sub_index}", response_model=TaskListOut)
def edit_subtask(index: int, sub_index: int, body: TaskTextIn, tasks=Depends(_get_tasks)):
    with _http_errors():
        return {"tasks": tasks.edit_subtask(index, sub_index, body.text)}


@router.delete("/{index}/subtasks/{sub_index}", response_model=TaskListOut)
def delete_subtask(index: int, sub_index: int, tasks=Depends(_get_tasks)):
    with _http_errors():
        return {"tasks": tasks.delete_subtask(index, sub_index)}
