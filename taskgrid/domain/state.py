from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime

from .entities import TaskEntity
from .enums import Priority, RecurrenceType
from .errors import TaskNotFoundError

TASK_FIELDS = {field.name for field in fields(TaskEntity)}
IMMUTABLE_FIELDS = {"id", "created_at"}


@dataclass(frozen=True)
class AppState:
    """Snapshot of everything the calendar renders from.

    Every update function below returns a new snapshot with ``version``
    bumped; snapshots are never mutated.
    """

    tasks: tuple[TaskEntity, ...] = ()
    dark_mode: bool = False
    version: int = 0

    def get_task(self, task_id: str) -> TaskEntity | None:
        return next((task for task in self.tasks if task.id == task_id), None)


def normalize_fields(data: dict) -> dict:
    normalized = {key: value for key, value in data.items() if key in TASK_FIELDS}
    if "priority" in normalized:
        normalized["priority"] = Priority.coerce(normalized["priority"])
    if "recurrence_type" in normalized:
        normalized["recurrence_type"] = RecurrenceType.coerce(normalized["recurrence_type"])
    if "recurrence_interval" in normalized:
        normalized["recurrence_interval"] = coerce_interval(normalized["recurrence_interval"])
    if "completed" in normalized:
        normalized["completed"] = bool(normalized["completed"])
    for key in ("start_time", "end_time", "color"):
        if key in normalized and not normalized[key]:
            normalized[key] = None
    return normalized


def coerce_interval(value: object) -> int:
    try:
        return max(int(value or 1), 1)
    except (TypeError, ValueError):
        return 1


def add_task(state: AppState, data: dict, task_id: str, created_at: datetime) -> tuple[AppState, TaskEntity]:
    values = normalize_fields(data)
    values.pop("id", None)
    values.pop("created_at", None)
    values["completed"] = False
    task = TaskEntity(id=task_id, created_at=created_at, **values)
    return _with_tasks(state, state.tasks + (task,)), task


def update_task(state: AppState, task_id: str, changes: dict) -> tuple[AppState, TaskEntity]:
    current = state.get_task(task_id)
    if current is None:
        raise TaskNotFoundError(task_id)
    values = {
        key: value for key, value in normalize_fields(changes).items() if key not in IMMUTABLE_FIELDS
    }
    updated = replace(current, **values)
    tasks = tuple(updated if task.id == task_id else task for task in state.tasks)
    return _with_tasks(state, tasks), updated


def delete_task(state: AppState, task_id: str) -> AppState:
    if state.get_task(task_id) is None:
        raise TaskNotFoundError(task_id)
    return _with_tasks(state, tuple(task for task in state.tasks if task.id != task_id))


def toggle_task(state: AppState, task_id: str) -> tuple[AppState, TaskEntity]:
    current = state.get_task(task_id)
    if current is None:
        raise TaskNotFoundError(task_id)
    return update_task(state, task_id, {"completed": not current.completed})


def toggle_dark_mode(state: AppState) -> AppState:
    return replace(state, dark_mode=not state.dark_mode, version=state.version + 1)


def _with_tasks(state: AppState, tasks: tuple[TaskEntity, ...]) -> AppState:
    return replace(state, tasks=tasks, version=state.version + 1)
