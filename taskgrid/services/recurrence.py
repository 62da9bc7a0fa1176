from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from taskgrid.domain.entities import TaskEntity
from taskgrid.domain.enums import RecurrenceType
from taskgrid.domain.state import coerce_interval

logger = logging.getLogger(__name__)

MAX_OCCURRENCES = 100

RULE_FREQUENCIES = {
    RecurrenceType.DAILY: "DAILY",
    RecurrenceType.WEEKLY: "WEEKLY",
    RecurrenceType.MONTHLY: "MONTHLY",
}
UNTIL_FORMAT = "%Y%m%dT%H%M%SZ"
FLOATING_UNTIL_FORMAT = "%Y%m%dT%H%M%S"
DATE_UNTIL_FORMAT = "%Y%m%d"


@dataclass(frozen=True)
class RecurrenceRule:
    recurrence_type: RecurrenceType
    interval: int = 1
    until: Optional[date] = None


def expand(
    recurrence_type: RecurrenceType | str | None,
    interval: object,
    anchor: date,
    end_bound: Optional[date] = None,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[date]:
    """Return the occurrence dates of a rule, anchor first.

    The list stops before the first date past ``end_bound`` and never
    grows beyond ``max_occurrences`` entries.
    """
    limit = int(max_occurrences)
    if limit <= 0:
        return []
    rule = RecurrenceType.coerce(recurrence_type)
    if rule == RecurrenceType.NONE:
        return [anchor]

    step = coerce_interval(interval)
    occurrences = [anchor]
    while len(occurrences) < limit:
        candidate = _nth_occurrence(anchor, rule, step, len(occurrences))
        if end_bound is not None and candidate > end_bound:
            break
        occurrences.append(candidate)
    else:
        logger.debug("Recurrence from %s truncated at %d occurrences", anchor, limit)
    return occurrences


def _nth_occurrence(anchor: date, rule: RecurrenceType, interval: int, index: int) -> date:
    if rule == RecurrenceType.DAILY:
        return anchor + timedelta(days=interval * index)
    if rule == RecurrenceType.WEEKLY:
        return anchor + timedelta(weeks=interval * index)
    return add_months(anchor, interval * index)


def add_months(base: date, months: int) -> date:
    year = base.year + (base.month - 1 + months) // 12
    month = (base.month - 1 + months) % 12 + 1
    day = min(base.day, _days_in_month(year, month))
    return date(year, month, day)


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - timedelta(days=1)).day


def to_rule_string(task: TaskEntity, until_format: str = UNTIL_FORMAT) -> str | None:
    """Format the recurrence of ``task`` as a ``FREQ=...;INTERVAL=...`` rule.

    ``UNTIL`` is the last day of the series at 23:59:59. The default
    format stamps it with ``Z`` as the stored rule string always has;
    calendar exports pass a floating or date-only format instead.
    """
    if task.recurrence_type not in RULE_FREQUENCIES:
        return None
    parts = [
        f"FREQ={RULE_FREQUENCIES[task.recurrence_type]}",
        f"INTERVAL={coerce_interval(task.recurrence_interval)}",
    ]
    if task.recurrence_end_date:
        until = datetime.combine(task.recurrence_end_date, time(23, 59, 59))
        parts.append(f"UNTIL={until.strftime(until_format)}")
    return ";".join(parts)


def parse_rule_string(value: str | None) -> RecurrenceRule:
    """Read a ``FREQ=...;INTERVAL=...;UNTIL=...`` string.

    Unknown keys are ignored; an unknown or missing frequency yields a
    non-recurring rule.
    """
    if not value:
        return RecurrenceRule(RecurrenceType.NONE)
    pairs = {}
    for part in value.strip().removeprefix("RRULE:").split(";"):
        key, sep, raw = part.partition("=")
        if sep:
            pairs[key.strip().upper()] = raw.strip()

    frequencies = {name: rule for rule, name in RULE_FREQUENCIES.items()}
    rule = frequencies.get(pairs.get("FREQ", "").upper(), RecurrenceType.NONE)
    until = None
    if pairs.get("UNTIL"):
        until = _parse_until(pairs["UNTIL"])
        if until is None:
            logger.warning("Ignoring malformed UNTIL in rule %r", value)
    return RecurrenceRule(rule, coerce_interval(pairs.get("INTERVAL")), until)


def _parse_until(value: str) -> Optional[date]:
    for fmt in (UNTIL_FORMAT, FLOATING_UNTIL_FORMAT, DATE_UNTIL_FORMAT):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None
