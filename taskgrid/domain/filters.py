from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .entities import TaskEntity
from .enums import Priority, StatusFilter

PRIORITY_ORDER = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


@dataclass(frozen=True)
class TaskFilters:
    status: StatusFilter = StatusFilter.ALL
    priority: str = "all"


def filter_tasks(tasks: Iterable[TaskEntity], filters: TaskFilters) -> list[TaskEntity]:
    result = []
    for task in tasks:
        if filters.status == StatusFilter.ACTIVE and task.completed:
            continue
        if filters.status == StatusFilter.COMPLETED and not task.completed:
            continue
        if filters.priority != "all" and task.priority != filters.priority:
            continue
        result.append(task)
    return result


def sort_tasks(tasks: Iterable[TaskEntity]) -> list[TaskEntity]:
    return sorted(
        tasks,
        key=lambda task: (task.completed, -PRIORITY_ORDER.get(task.priority, 2)),
    )
