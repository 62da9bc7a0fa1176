from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from taskgrid.domain.colors import TEXT_COLOR, resolve_color
from taskgrid.domain.entities import OccurrenceEntity, TaskEntity, TaskUpdate
from taskgrid.domain.enums import RecurrenceType
from taskgrid.domain.state import coerce_interval
from taskgrid.domain.timing import (
    DEFAULT_DURATION,
    AllDay,
    format_time,
    resolve_timing,
    start_of_day,
)

from .recurrence import MAX_OCCURRENCES, add_months, expand


class EventProjector:
    """Turns tasks into calendar occurrences and calendar edits back into task updates."""

    def __init__(
        self,
        default_duration: timedelta = DEFAULT_DURATION,
        max_occurrences: int = MAX_OCCURRENCES,
    ) -> None:
        self.default_duration = default_duration
        self.max_occurrences = max_occurrences

    def project_all(self, tasks: Iterable[TaskEntity]) -> list[OccurrenceEntity]:
        occurrences: list[OccurrenceEntity] = []
        for task in tasks:
            occurrences.extend(self.project(task))
        return occurrences

    def project(self, task: TaskEntity) -> list[OccurrenceEntity]:
        timing = resolve_timing(task, self.default_duration)
        if timing is None:
            return []

        if isinstance(timing, AllDay):
            start = start_of_day(timing.start)
            end = start_of_day(timing.end) if timing.end else start + timedelta(days=1)
        else:
            start, end = timing.start, timing.end
        all_day = isinstance(timing, AllDay)
        color = resolve_color(task)

        anchor = start.date()
        dates = expand(
            task.recurrence_type,
            task.recurrence_interval,
            anchor,
            task.recurrence_end_date,
            self.max_occurrences,
        )
        occurrences = []
        for index, day in enumerate(dates):
            shift = day - anchor
            occurrences.append(
                OccurrenceEntity(
                    id=task.id if index == 0 else f"{task.id}_{index}",
                    title=task.title,
                    start=start + shift,
                    end=end + shift,
                    all_day=all_day,
                    background_color=color,
                    border_color=color,
                    text_color=TEXT_COLOR,
                    task=task,
                    is_recurrence=index > 0,
                    occurrence_index=index,
                )
            )
        return occurrences

    def reverse_map(
        self,
        occurrence: OccurrenceEntity,
        new_start: datetime | date,
        new_end: datetime | date | None,
        all_day: bool,
    ) -> TaskUpdate:
        """Map a dropped occurrence onto the fields of its source task.

        Recurrence instances move their whole series. The anchor is placed
        so that re-expanding the series puts the dragged instance on
        ``new_start``.
        """
        start = _as_datetime(new_start)
        end = _as_datetime(new_end) if new_end is not None else None
        if occurrence.is_recurrence:
            anchor_start, anchor_end = self._anchor_bounds(occurrence)
            shifted_start = self._series_start(occurrence, start, anchor_start)
            if end is not None:
                end = shifted_start + (end - start)
            elif not all_day:
                end = shifted_start + (anchor_end - anchor_start)
            start = shifted_start

        if all_day:
            changes = {
                "start_date": start.date(),
                "end_date": end.date() if end is not None else None,
                "start_time": None,
                "end_time": None,
                "start_datetime": None,
                "end_datetime": None,
            }
        else:
            if end is None:
                end = start + self.default_duration
            changes = {
                "start_date": start.date(),
                "start_time": format_time(start),
                "start_datetime": start,
                **_timed_end_fields(end),
            }
        return TaskUpdate(task_id=occurrence.task_id, changes=changes)

    def resize_map(
        self,
        occurrence: OccurrenceEntity,
        new_end: datetime | date,
        all_day: bool | None = None,
    ) -> TaskUpdate:
        """Map a resized occurrence onto the end-side fields of its source task."""
        if all_day is None:
            all_day = occurrence.all_day
        end = _as_datetime(new_end)
        if occurrence.is_recurrence:
            anchor_start, _ = self._anchor_bounds(occurrence)
            end = anchor_start + (end - occurrence.start)

        if all_day:
            changes = {"end_date": end.date(), "end_time": None, "end_datetime": None}
        else:
            changes = _timed_end_fields(end)
        return TaskUpdate(task_id=occurrence.task_id, changes=changes)

    def _series_start(
        self,
        occurrence: OccurrenceEntity,
        start: datetime,
        anchor_start: datetime,
    ) -> datetime:
        task = occurrence.task
        if task.recurrence_type == RecurrenceType.MONTHLY:
            # month-end clamping makes day deltas lossy; count back whole months
            months = occurrence.occurrence_index * coerce_interval(task.recurrence_interval)
            return datetime.combine(add_months(start.date(), -months), start.time())
        return anchor_start + (start - occurrence.start)

    def _anchor_bounds(self, occurrence: OccurrenceEntity) -> tuple[datetime, datetime]:
        anchor = self.project(occurrence.task)
        if anchor:
            return anchor[0].start, anchor[0].end
        return occurrence.start, occurrence.end


def _timed_end_fields(end: datetime) -> dict:
    return {
        "end_date": end.date(),
        "end_time": format_time(end),
        "end_datetime": end,
    }


def _as_datetime(value: datetime | date) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return start_of_day(value)
