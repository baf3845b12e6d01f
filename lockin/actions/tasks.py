"""
Task List Manager — an ordered list of tasks, each with ordered subtasks.

A task is either a plain Task or a TimedTask (which carries a deadline).
Records are stored with an explicit "kind" so loading never has to guess
the variant from which keys happen to be present.

Every mutation follows the same order: change the in-memory list, persist
the whole list, then return the rendered view.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from ..errors import TaskValidationError
from ..storage.store import StorageArea

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"

KIND_TASK = "task"
KIND_TIMED = "timed"


@dataclass
class Subtask:
    text: str


@dataclass
class Task:
    text: str
    subtasks: List[Subtask] = field(default_factory=list)


@dataclass
class TimedTask:
    text: str
    subtasks: List[Subtask] = field(default_factory=list)
    deadline: str = ""      # ISO date "YYYY-MM-DD", "" when not yet picked


TaskNode = Union[Task, TimedTask]


# ---------------------------------------------------------------------------
# (De)serialisation
# ---------------------------------------------------------------------------

def to_record(task: TaskNode) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "kind": KIND_TIMED if isinstance(task, TimedTask) else KIND_TASK,
        "text": task.text,
        "subtasks": [{"text": s.text} for s in task.subtasks],
    }
    if isinstance(task, TimedTask):
        record["deadline"] = task.deadline
    return record


def from_record(record: Dict[str, Any]) -> TaskNode:
    subtasks = [Subtask(text=s.get("text", "")) for s in record.get("subtasks") or []]
    kind = record.get("kind")
    if kind is None:
        # Records written before "kind" existed
        kind = KIND_TIMED if "deadline" in record else KIND_TASK

    if kind == KIND_TIMED:
        return TimedTask(text=record.get("text", ""), subtasks=subtasks,
                         deadline=record.get("deadline") or "")
    if kind == KIND_TASK:
        return Task(text=record.get("text", ""), subtasks=subtasks)
    raise ValueError(f"Unknown task kind: {kind!r}")


def render_task(task: TaskNode, index: int) -> Dict[str, Any]:
    """View of one task for the task-list page: shared fields plus variant extras."""
    view: Dict[str, Any] = {
        "index": index,
        "kind": KIND_TASK,
        "text": task.text,
        "subtasks": [{"index": i, "text": s.text} for i, s in enumerate(task.subtasks)],
    }
    if isinstance(task, TimedTask):
        view["kind"] = KIND_TIMED
        view["deadline"] = task.deadline
    return view


def _clean(text: str) -> str:
    text = text.strip()
    if not text:
        raise TaskValidationError("Text must not be empty")
    return text


# ---------------------------------------------------------------------------
# State + manager
# ---------------------------------------------------------------------------

@dataclass
class TaskList:
    tasks: List[TaskNode] = field(default_factory=list)

    def task(self, index: int) -> TaskNode:
        if not 0 <= index < len(self.tasks):
            raise IndexError(f"No task at index {index}")
        return self.tasks[index]

    def subtask_list(self, index: int, sub_index: int) -> List[Subtask]:
        subtasks = self.task(index).subtasks
        if not 0 <= sub_index < len(subtasks):
            raise IndexError(f"No subtask at index {sub_index} of task {index}")
        return subtasks


class TaskListManager:

    def __init__(self, area: StorageArea):
        self._area = area
        self._lock = threading.Lock()
        self.state = self.load()

    def load(self) -> TaskList:
        records = self._area.get(TASKS_KEY).get(TASKS_KEY) or []
        return TaskList(tasks=[from_record(r) for r in records])

    def save(self) -> None:
        self._area.set({TASKS_KEY: [to_record(t) for t in self.state.tasks]})
        logger.debug("Saved %d tasks", len(self.state.tasks))

    def render(self) -> List[Dict[str, Any]]:
        return [render_task(t, i) for i, t in enumerate(self.state.tasks)]

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def add_task(self, text: str) -> List[Dict[str, Any]]:
        with self._lock:
            self.state.tasks.append(Task(text=_clean(text)))
            self.save()
            return self.render()

    def add_timed_task(self, text: str, deadline: str = "") -> List[Dict[str, Any]]:
        with self._lock:
            self.state.tasks.append(TimedTask(text=_clean(text), deadline=deadline))
            self.save()
            return self.render()

    def edit_text(self, index: int, text: str) -> List[Dict[str, Any]]:
        # Edits keep the raw input, including an empty string
        with self._lock:
            self.state.task(index).text = text
            self.save()
            return self.render()

    def edit_deadline(self, index: int, deadline: str) -> List[Dict[str, Any]]:
        with self._lock:
            task = self.state.task(index)
            if not isinstance(task, TimedTask):
                raise TaskValidationError(f"Task {index} has no deadline")
            task.deadline = deadline
            self.save()
            return self.render()

    def delete_task(self, index: int) -> List[Dict[str, Any]]:
        with self._lock:
            self.state.task(index)
            del self.state.tasks[index]
            self.save()
            return self.render()

    # ------------------------------------------------------------------
    # Subtasks
    # ------------------------------------------------------------------

    def add_subtask(self, index: int, text: str) -> List[Dict[str, Any]]:
        with self._lock:
            self.state.task(index).subtasks.append(Subtask(text=_clean(text)))
            self.save()
            return self.render()

    def edit_subtask(self, index: int, sub_index: int, text: str) -> List[Dict[str, Any]]:
        with self._lock:
            self.state.subtask_list(index, sub_index)[sub_index].text = text
            self.save()
            return self.render()

    def delete_subtask(self, index: int, sub_index: int) -> List[Dict[str, Any]]:
        with self._lock:
            del self.state.subtask_list(index, sub_index)[sub_index]
            self.save()
            return self.render()
