from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from taskgrid.domain.entities import TaskEntity

from .projection import EventProjector
from .recurrence import DATE_UNTIL_FORMAT, FLOATING_UNTIL_FORMAT, to_rule_string


def export_ics(
    tasks: Iterable[TaskEntity],
    projector: EventProjector | None = None,
    now: datetime | None = None,
) -> str:
    projector = projector or EventProjector()
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Taskgrid//UA",
        "CALSCALE:GREGORIAN",
    ]
    for task in tasks:
        occurrences = projector.project(task)
        if not occurrences:
            continue
        anchor = occurrences[0]
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:task-{task.id}@taskgrid",
                f"DTSTAMP:{stamp}",
            ]
        )
        if anchor.all_day:
            lines.append(f"DTSTART;VALUE=DATE:{anchor.start.strftime('%Y%m%d')}")
            lines.append(f"DTEND;VALUE=DATE:{anchor.end.strftime('%Y%m%d')}")
        else:
            lines.append(f"DTSTART:{anchor.start.strftime('%Y%m%dT%H%M%S')}")
            lines.append(f"DTEND:{anchor.end.strftime('%Y%m%dT%H%M%S')}")
        lines.append(f"SUMMARY:{_escape_ics(task.title)}")
        if task.description:
            lines.append(f"DESCRIPTION:{_escape_ics(task.description)}")
        # UNTIL takes the same floating form as DTSTART
        rule = to_rule_string(task, DATE_UNTIL_FORMAT if anchor.all_day else FLOATING_UNTIL_FORMAT)
        if rule:
            lines.append(f"RRULE:{rule}")
        if task.completed:
            lines.append("STATUS:COMPLETED")
        lines.append("END:VEVENT")
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


def _escape_ics(value: str) -> str:
    return value.replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,").replace("\n", "\\n")
