from __future__ import annotations

from datetime import date

from taskgrid.domain.entities import TaskEntity
from taskgrid.domain.enums import RecurrenceType
from taskgrid.services.recurrence import (
    add_months,
    expand,
    parse_rule_string,
    to_rule_string,
)


def test_non_recurring_yields_anchor_only() -> None:
    assert expand(RecurrenceType.NONE, 3, date(2024, 5, 1)) == [date(2024, 5, 1)]
    assert expand(None, None, date(2024, 5, 1)) == [date(2024, 5, 1)]


def test_weekly_every_two_weeks_respects_end_bound() -> None:
    dates = expand(RecurrenceType.WEEKLY, 2, date(2024, 1, 1), date(2024, 1, 20))

    assert dates == [date(2024, 1, 1), date(2024, 1, 15)]


def test_daily_interval() -> None:
    dates = expand("daily", 3, date(2024, 2, 27), date(2024, 3, 6))

    assert dates == [date(2024, 2, 27), date(2024, 3, 1), date(2024, 3, 4)]


def test_end_bound_date_itself_is_included() -> None:
    dates = expand(RecurrenceType.DAILY, 1, date(2024, 1, 1), date(2024, 1, 3))

    assert dates[-1] == date(2024, 1, 3)
    assert len(dates) == 3


def test_anchor_is_kept_even_past_end_bound() -> None:
    dates = expand(RecurrenceType.DAILY, 1, date(2024, 6, 10), date(2024, 6, 1))

    assert dates == [date(2024, 6, 10)]


def test_unbounded_expansion_is_capped() -> None:
    for rule in (RecurrenceType.DAILY, RecurrenceType.WEEKLY, RecurrenceType.MONTHLY):
        dates = expand(rule, 1, date(2024, 1, 1))
        assert len(dates) == 100
        assert dates[0] == date(2024, 1, 1)
        assert all(later > earlier for earlier, later in zip(dates, dates[1:]))

    assert len(expand(RecurrenceType.DAILY, 1, date(2024, 1, 1), max_occurrences=5)) == 5


def test_zero_or_missing_interval_is_treated_as_one() -> None:
    for interval in (0, None, -4, "abc"):
        dates = expand(RecurrenceType.DAILY, interval, date(2024, 1, 1), max_occurrences=3)
        assert dates == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]


def test_monthly_clamps_to_month_end_without_drift() -> None:
    dates = expand(RecurrenceType.MONTHLY, 1, date(2024, 1, 31), max_occurrences=4)

    assert dates == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]


def test_add_months_crosses_year() -> None:
    assert add_months(date(2023, 11, 15), 3) == date(2024, 2, 15)
    assert add_months(date(2023, 12, 31), 2) == date(2024, 2, 29)


def test_unknown_recurrence_type_degrades_to_single_date() -> None:
    assert expand("yearly", 1, date(2024, 1, 1)) == [date(2024, 1, 1)]


def test_rule_string_for_recurring_task() -> None:
    task = TaskEntity(
        id="t1",
        title="Standup",
        start_date=date(2024, 1, 1),
        recurrence_type=RecurrenceType.WEEKLY,
        recurrence_interval=2,
        recurrence_end_date=date(2024, 3, 1),
    )

    assert to_rule_string(task) == "FREQ=WEEKLY;INTERVAL=2;UNTIL=20240301T235959Z"
    assert to_rule_string(TaskEntity(id="t2", title="Once")) is None


def test_parse_rule_string() -> None:
    rule = parse_rule_string("RRULE:FREQ=MONTHLY;INTERVAL=3;UNTIL=20241231T235959Z")

    assert rule.recurrence_type == RecurrenceType.MONTHLY
    assert rule.interval == 3
    assert rule.until == date(2024, 12, 31)


def test_parse_rule_string_degrades_gracefully() -> None:
    rule = parse_rule_string("FREQ=HOURLY;INTERVAL=0;UNTIL=garbage")

    assert rule.recurrence_type == RecurrenceType.NONE
    assert rule.interval == 1
    assert rule.until is None
    assert parse_rule_string(None).recurrence_type == RecurrenceType.NONE


def test_parse_rule_string_accepts_floating_and_date_until() -> None:
    assert parse_rule_string("FREQ=DAILY;UNTIL=20240131T235959").until == date(2024, 1, 31)
    assert parse_rule_string("FREQ=DAILY;UNTIL=20240131").until == date(2024, 1, 31)


def test_non_positive_cap_yields_no_dates() -> None:
    assert expand(RecurrenceType.DAILY, 1, date(2024, 1, 1), max_occurrences=0) == []
    assert expand(RecurrenceType.NONE, 1, date(2024, 1, 1), max_occurrences=0) == []
