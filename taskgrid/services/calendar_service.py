from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time
from pathlib import Path
from typing import Callable, Protocol

from taskgrid.domain import state as app_state
from taskgrid.domain.entities import OccurrenceEntity, TaskEntity, TaskUpdate
from taskgrid.domain.errors import TaskNotFoundError
from taskgrid.domain.filters import TaskFilters, filter_tasks, sort_tasks
from taskgrid.domain.state import AppState
from taskgrid.domain.timing import combined_end, combined_start, format_time

from .ics import export_ics
from .projection import EventProjector
from .validation import validate_task

logger = logging.getLogger(__name__)

START_FIELDS = {"start_date", "start_time"}
END_FIELDS = {"start_date", "end_date", "end_time"}


class TaskRepositoryPort(Protocol):
    def load_tasks(self) -> list[TaskEntity]: ...

    def save_tasks(self, tasks: list[TaskEntity]) -> None: ...

    def load_dark_mode(self) -> bool: ...

    def save_dark_mode(self, enabled: bool) -> None: ...


class CalendarService:
    def __init__(
        self,
        repo: TaskRepositoryPort,
        projector: EventProjector | None = None,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
        ics_export_path: Path | None = None,
    ) -> None:
        self._repo = repo
        self._projector = projector or EventProjector()
        self._clock = clock
        self._id_factory = id_factory
        self._ics_export_path = ics_export_path
        self._state = AppState()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def projector(self) -> EventProjector:
        return self._projector

    def load(self) -> AppState:
        self._state = AppState(
            tasks=tuple(self._repo.load_tasks()),
            dark_mode=self._repo.load_dark_mode(),
        )
        logger.info("Loaded %d tasks", len(self._state.tasks))
        return self._state

    def list_tasks(self, filters: TaskFilters | None = None) -> list[TaskEntity]:
        return sort_tasks(filter_tasks(self._state.tasks, filters or TaskFilters()))

    def list_occurrences(self, filters: TaskFilters | None = None) -> list[OccurrenceEntity]:
        return self._projector.project_all(filter_tasks(self._state.tasks, filters or TaskFilters()))

    def get_task(self, task_id: str) -> TaskEntity | None:
        return self._state.get_task(task_id)

    def create_task(self, data: dict) -> TaskEntity:
        values = _with_timestamps(data, data)
        new_state, task = app_state.add_task(self._state, values, self._id_factory(), self._clock())
        validate_task(task)
        self._commit(new_state)
        logger.info("Created task %s", task.id)
        return task

    def update_task(self, task_id: str, data: dict) -> TaskEntity:
        current = self._require(task_id)
        merged = {**_task_values(current), **data}
        changes = _with_timestamps(data, merged)
        new_state, task = app_state.update_task(self._state, task_id, changes)
        validate_task(task)
        self._commit(new_state)
        logger.info("Updated task %s (%s)", task_id, ", ".join(sorted(changes)))
        return task

    def apply_update(self, update: TaskUpdate) -> TaskEntity:
        return self.update_task(update.task_id, update.changes)

    def delete_task(self, task_id: str) -> None:
        self._commit(app_state.delete_task(self._state, task_id))
        logger.info("Deleted task %s", task_id)

    def toggle_task(self, task_id: str) -> TaskEntity:
        new_state, task = app_state.toggle_task(self._state, task_id)
        self._commit(new_state)
        logger.info("Task %s marked %s", task_id, "completed" if task.completed else "active")
        return task

    def toggle_dark_mode(self) -> bool:
        self._state = app_state.toggle_dark_mode(self._state)
        self._repo.save_dark_mode(self._state.dark_mode)
        return self._state.dark_mode

    def on_event_moved(
        self,
        occurrence: OccurrenceEntity,
        new_start: datetime | date,
        new_end: datetime | date | None,
        all_day: bool,
    ) -> TaskEntity:
        update = self._projector.reverse_map(occurrence, new_start, new_end, all_day)
        return self.apply_update(update)

    def on_event_resized(
        self,
        occurrence: OccurrenceEntity,
        new_end: datetime | date,
        all_day: bool | None = None,
    ) -> TaskEntity:
        update = self._projector.resize_map(occurrence, new_end, all_day)
        return self.apply_update(update)

    def on_event_clicked(self, occurrence: OccurrenceEntity) -> TaskEntity:
        return self.get_task(occurrence.task_id) or occurrence.task

    @staticmethod
    def on_date_clicked(value: datetime | date) -> dict:
        if isinstance(value, datetime):
            draft = {"start_date": value.date()}
            if value.time() != time.min:
                draft["start_time"] = format_time(value)
            return draft
        return {"start_date": value}

    def export_ics(self) -> str:
        return export_ics(self._state.tasks, self._projector)

    def _require(self, task_id: str) -> TaskEntity:
        task = self._state.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def _commit(self, new_state: AppState) -> None:
        self._repo.save_tasks(list(new_state.tasks))
        self._state = new_state
        self._auto_export_ics()

    def _auto_export_ics(self) -> None:
        if not self._ics_export_path:
            return
        try:
            self._ics_export_path.write_text(self.export_ics(), encoding="utf-8")
        except OSError:
            logger.exception("Auto export to %s failed", self._ics_export_path)


def _task_values(task: TaskEntity) -> dict:
    return {
        "start_date": task.start_date,
        "end_date": task.end_date,
        "start_time": task.start_time,
        "end_time": task.end_time,
    }


def _with_timestamps(changes: dict, merged: dict) -> dict:
    """Recompute combined timestamps from the date/time pairs they derive from.

    Explicit timestamps in ``changes`` win; otherwise a timestamp is
    rebuilt whenever one of its source fields changes.
    """
    values = dict(changes)
    if "start_datetime" not in values and START_FIELDS & values.keys():
        values["start_datetime"] = combined_start(merged.get("start_date"), merged.get("start_time"))
    if "end_datetime" not in values and END_FIELDS & values.keys():
        values["end_datetime"] = combined_end(
            merged.get("start_date"), merged.get("end_date"), merged.get("end_time")
        )
    return values
