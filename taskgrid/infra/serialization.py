from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from taskgrid.domain.entities import TaskEntity
from taskgrid.domain.enums import Priority, RecurrenceType
from taskgrid.domain.state import coerce_interval

logger = logging.getLogger(__name__)


def task_to_record(task: TaskEntity) -> dict:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "startDate": _iso(task.start_date),
        "endDate": _iso(task.end_date),
        "startTime": task.start_time,
        "endTime": task.end_time,
        "startDateTime": _iso(task.start_datetime),
        "endDateTime": _iso(task.end_datetime),
        "priority": task.priority.value,
        "color": task.color,
        "completed": task.completed,
        "recurrenceType": task.recurrence_type.value,
        "recurrenceInterval": task.recurrence_interval,
        "recurrenceEndDate": _iso(task.recurrence_end_date),
        "createdAt": _iso(task.created_at),
    }


def task_from_record(record: dict) -> TaskEntity:
    """Build a task from a stored record, degrading bad optional fields to defaults."""
    return TaskEntity(
        id=str(record["id"]),
        title=record.get("title") or "",
        description=record.get("description") or "",
        start_date=_parse_date(record.get("startDate")),
        end_date=_parse_date(record.get("endDate")),
        start_time=record.get("startTime") or None,
        end_time=record.get("endTime") or None,
        start_datetime=_parse_datetime(record.get("startDateTime")),
        end_datetime=_parse_datetime(record.get("endDateTime")),
        priority=Priority.coerce(record.get("priority")),
        color=record.get("color") or None,
        completed=bool(record.get("completed", False)),
        recurrence_type=RecurrenceType.coerce(record.get("recurrenceType")),
        recurrence_interval=coerce_interval(record.get("recurrenceInterval")),
        recurrence_end_date=_parse_date(record.get("recurrenceEndDate")),
        created_at=_parse_datetime(record.get("createdAt")),
    )


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_date(value: str | None) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.warning("Ignoring malformed date %r", value)
        return None


def _parse_datetime(value: str | None) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring malformed timestamp %r", value)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
