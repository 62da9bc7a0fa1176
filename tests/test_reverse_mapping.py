from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta

from taskgrid.domain.entities import TaskEntity
from taskgrid.domain.enums import RecurrenceType
from taskgrid.services.projection import EventProjector

TIME_FIELDS = ("start_time", "end_time", "start_datetime", "end_datetime")


def make_task(**overrides) -> TaskEntity:
    values = {"id": "task-1", "title": "Review", "created_at": datetime(2024, 1, 5, 8, 30)}
    values.update(overrides)
    return TaskEntity(**values)


def apply(task: TaskEntity, changes: dict) -> TaskEntity:
    return replace(task, **changes)


def test_dragging_all_day_occurrence_sets_dates_and_clears_times() -> None:
    projector = EventProjector()
    occurrence = projector.project(make_task(start_date=date(2024, 3, 10)))[0]

    update = projector.reverse_map(occurrence, date(2024, 4, 1), date(2024, 4, 2), True)

    assert update.task_id == "task-1"
    assert update.changes["start_date"] == date(2024, 4, 1)
    assert update.changes["end_date"] == date(2024, 4, 2)
    for field in TIME_FIELDS:
        assert field in update.changes
        assert update.changes[field] is None


def test_moving_timed_task_to_all_day_strips_time_component() -> None:
    projector = EventProjector()
    task = make_task(
        start_date=date(2024, 3, 10),
        start_time="09:00",
        end_time="10:00",
        start_datetime=datetime(2024, 3, 10, 9, 0),
        end_datetime=datetime(2024, 3, 10, 10, 0),
    )
    occurrence = projector.project(task)[0]

    update = projector.reverse_map(occurrence, datetime(2024, 3, 12), None, True)
    moved = apply(task, update.changes)

    assert all(getattr(moved, field) is None for field in TIME_FIELDS)
    reprojected = projector.project(moved)[0]
    assert reprojected.all_day is True
    assert reprojected.start == datetime(2024, 3, 12)
    assert reprojected.end == datetime(2024, 3, 13)


def test_timed_drop_updates_all_representations_together() -> None:
    projector = EventProjector()
    occurrence = projector.project(make_task(start_date=date(2024, 3, 10)))[0]

    update = projector.reverse_map(
        occurrence, datetime(2024, 3, 11, 13, 30), datetime(2024, 3, 11, 15, 0), False
    )

    assert update.changes == {
        "start_date": date(2024, 3, 11),
        "start_time": "13:30",
        "start_datetime": datetime(2024, 3, 11, 13, 30),
        "end_date": date(2024, 3, 11),
        "end_time": "15:00",
        "end_datetime": datetime(2024, 3, 11, 15, 0),
    }


def test_timed_drop_without_end_uses_default_duration() -> None:
    projector = EventProjector(default_duration=timedelta(minutes=45))
    occurrence = projector.project(make_task(start_date=date(2024, 3, 10)))[0]

    update = projector.reverse_map(occurrence, datetime(2024, 3, 11, 8, 0), None, False)

    assert update.changes["end_datetime"] == datetime(2024, 3, 11, 8, 45)
    assert update.changes["end_time"] == "08:45"


def test_round_trip_reprojects_to_requested_placement() -> None:
    projector = EventProjector()
    task = make_task(start_date=date(2024, 3, 10), start_time="09:00")
    occurrence = projector.project(task)[0]
    placements = [
        (datetime(2024, 3, 14, 16, 0), datetime(2024, 3, 14, 18, 30), False),
        (datetime(2024, 3, 20), datetime(2024, 3, 23), True),
    ]

    for new_start, new_end, all_day in placements:
        update = projector.reverse_map(occurrence, new_start, new_end, all_day)
        reprojected = projector.project(apply(task, update.changes))[0]
        assert reprojected.start == new_start
        assert reprojected.end == new_end
        assert reprojected.all_day is all_day


def test_dragging_recurrence_instance_shifts_the_anchor() -> None:
    projector = EventProjector()
    task = make_task(
        start_date=date(2024, 1, 1),
        start_time="09:00",
        end_time="10:00",
        recurrence_type=RecurrenceType.WEEKLY,
    )
    instance = projector.project(task)[2]
    assert instance.start == datetime(2024, 1, 15, 9, 0)

    update = projector.reverse_map(
        instance, datetime(2024, 1, 17, 11, 0), datetime(2024, 1, 17, 12, 0), False
    )

    assert update.task_id == task.id
    assert update.changes["start_date"] == date(2024, 1, 3)
    assert update.changes["start_time"] == "11:00"
    assert update.changes["end_datetime"] == datetime(2024, 1, 3, 12, 0)
    reprojected = projector.project(apply(task, update.changes))
    assert reprojected[2].start == datetime(2024, 1, 17, 11, 0)
    assert reprojected[2].end == datetime(2024, 1, 17, 12, 0)


def test_dragging_all_day_recurrence_instance_keeps_exclusive_end() -> None:
    projector = EventProjector()
    task = make_task(start_date=date(2024, 1, 1), recurrence_type=RecurrenceType.DAILY)
    instance = projector.project(task)[3]

    update = projector.reverse_map(instance, date(2024, 1, 6), None, True)

    assert update.changes["start_date"] == date(2024, 1, 3)
    assert update.changes["end_date"] is None


def test_resize_only_touches_end_fields() -> None:
    projector = EventProjector()
    task = make_task(start_date=date(2024, 3, 10), start_time="09:00")
    occurrence = projector.project(task)[0]

    update = projector.resize_map(occurrence, datetime(2024, 3, 10, 12, 0))

    assert set(update.changes) == {"end_date", "end_time", "end_datetime"}
    reprojected = projector.project(apply(task, update.changes))[0]
    assert reprojected.start == datetime(2024, 3, 10, 9, 0)
    assert reprojected.end == datetime(2024, 3, 10, 12, 0)


def test_resize_all_day_clears_end_time() -> None:
    projector = EventProjector()
    task = make_task(start_date=date(2024, 3, 10))
    occurrence = projector.project(task)[0]

    update = projector.resize_map(occurrence, date(2024, 3, 14))

    assert update.changes == {"end_date": date(2024, 3, 14), "end_time": None, "end_datetime": None}


def test_resizing_recurrence_instance_changes_anchor_duration() -> None:
    projector = EventProjector()
    task = make_task(
        start_date=date(2024, 1, 1),
        start_time="09:00",
        recurrence_type=RecurrenceType.DAILY,
    )
    instance = projector.project(task)[4]

    update = projector.resize_map(instance, instance.start + timedelta(hours=3))

    assert update.changes["end_datetime"] == datetime(2024, 1, 1, 12, 0)
    reprojected = projector.project(apply(task, update.changes))
    assert all(occurrence.end - occurrence.start == timedelta(hours=3) for occurrence in reprojected)


def test_dragging_clamped_monthly_instance_lands_on_drop_day() -> None:
    projector = EventProjector()
    task = make_task(start_date=date(2024, 1, 31), recurrence_type=RecurrenceType.MONTHLY)
    instance = projector.project(task)[1]
    assert instance.start == datetime(2024, 2, 29)

    update = projector.reverse_map(instance, date(2024, 2, 28), None, True)
    reprojected = projector.project(apply(task, update.changes))

    assert update.changes["start_date"] == date(2024, 1, 28)
    assert reprojected[1].start == datetime(2024, 2, 28)


def test_dragging_timed_monthly_instance_counts_back_whole_months() -> None:
    projector = EventProjector()
    task = make_task(
        start_date=date(2024, 1, 31),
        start_time="09:00",
        start_datetime=datetime(2024, 1, 31, 9, 0),
        recurrence_type=RecurrenceType.MONTHLY,
    )
    instance = projector.project(task)[2]
    assert instance.start == datetime(2024, 3, 31, 9, 0)

    update = projector.reverse_map(
        instance, datetime(2024, 3, 30, 14, 0), datetime(2024, 3, 30, 15, 0), False
    )
    reprojected = projector.project(apply(task, update.changes))

    assert update.changes["start_datetime"] == datetime(2024, 1, 30, 14, 0)
    assert reprojected[2].start == datetime(2024, 3, 30, 14, 0)
    assert reprojected[2].end == datetime(2024, 3, 30, 15, 0)
    assert reprojected[1].start == datetime(2024, 2, 29, 14, 0)
