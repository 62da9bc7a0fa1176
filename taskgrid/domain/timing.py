from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from .entities import TaskEntity

logger = logging.getLogger(__name__)

DEFAULT_DURATION = timedelta(hours=1)
TIME_FORMAT = "%H:%M"


@dataclass(frozen=True)
class AllDay:
    start: date
    end: Optional[date] = None


@dataclass(frozen=True)
class Timed:
    start: datetime
    end: datetime


Timing = Union[AllDay, Timed]


def parse_time(value: str | None) -> time:
    """Parse an ``HH:MM`` (or ``HH:MM:SS``) string; anything else is midnight."""
    if not value:
        return time.min
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        logger.debug("Unparseable time of day %r, using midnight", value)
        return time.min


def format_time(value: datetime | time) -> str:
    return value.strftime(TIME_FORMAT)


def combine(day: date, time_of_day: str | None) -> datetime:
    return datetime.combine(day, parse_time(time_of_day))


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def is_timed(task: TaskEntity) -> bool:
    if task.start_datetime is not None:
        return True
    return task.start_date is not None and bool(task.start_time)


def resolve_timing(task: TaskEntity, default_duration: timedelta = DEFAULT_DURATION) -> Timing | None:
    """Normalize the task's date/time fields into one timing value.

    Returns ``None`` when the task has nothing to anchor it on the
    calendar (no start date, no start timestamp and no creation time).
    """
    if is_timed(task):
        start = task.start_datetime or combine(task.start_date, task.start_time)
        return Timed(start=start, end=_resolve_timed_end(task, start, default_duration))

    if task.start_date is not None:
        return AllDay(start=task.start_date, end=task.end_date)
    if task.created_at is not None:
        return AllDay(start=task.created_at.date(), end=task.end_date)
    return None


def _resolve_timed_end(task: TaskEntity, start: datetime, default_duration: timedelta) -> datetime:
    if task.end_datetime is not None:
        return task.end_datetime
    if task.end_time:
        return combine(task.end_date or start.date(), task.end_time)
    if task.end_date is not None:
        return datetime.combine(task.end_date, start.time()) + default_duration
    return start + default_duration


def combined_start(start_date: date | None, start_time: str | None) -> datetime | None:
    if start_date is None or not start_time:
        return None
    return combine(start_date, start_time)


def combined_end(
    start_date: date | None,
    end_date: date | None,
    end_time: str | None,
) -> datetime | None:
    day = end_date or start_date
    if day is None or not end_time:
        return None
    return combine(day, end_time)
