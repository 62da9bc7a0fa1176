from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .enums import Priority, RecurrenceType


@dataclass(frozen=True)
class TaskEntity:
    id: str
    title: str
    description: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: str | None = None
    end_time: str | None = None
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    priority: Priority = Priority.MEDIUM
    color: str | None = None
    completed: bool = False
    recurrence_type: RecurrenceType = RecurrenceType.NONE
    recurrence_interval: int = 1
    recurrence_end_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_type != RecurrenceType.NONE


@dataclass(frozen=True)
class OccurrenceEntity:
    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool
    background_color: str
    border_color: str
    text_color: str
    task: TaskEntity
    is_recurrence: bool = False
    occurrence_index: int = 0
    editable: bool = True

    @property
    def task_id(self) -> str:
        return self.task.id


@dataclass(frozen=True)
class TaskUpdate:
    task_id: str
    changes: dict
