from __future__ import annotations

import json
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskgrid.domain.entities import TaskEntity
from taskgrid.domain.enums import Priority, RecurrenceType
from taskgrid.infra.db import Base
from taskgrid.infra.models import KeyValueModel  # noqa: F401
from taskgrid.infra.repository import TASKS_KEY, KeyValueStore, TaskRepository


@pytest.fixture()
def store() -> KeyValueStore:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return KeyValueStore(sessionmaker(bind=engine, autoflush=False))


def test_store_set_overwrites_and_delete_removes(store: KeyValueStore) -> None:
    assert store.get("missing") is None

    store.set("theme", "a")
    store.set("theme", "b")
    assert store.get("theme") == "b"

    store.delete("theme")
    store.delete("theme")
    assert store.get("theme") is None


def test_tasks_survive_save_and_load(store: KeyValueStore) -> None:
    repo = TaskRepository(store)
    task = TaskEntity(
        id="t1",
        title="Звіт",
        description="Щотижневий",
        start_date=date(2024, 1, 3),
        start_time="09:30",
        start_datetime=datetime(2024, 1, 3, 9, 30),
        priority=Priority.HIGH,
        color="purple",
        recurrence_type=RecurrenceType.WEEKLY,
        recurrence_interval=2,
        recurrence_end_date=date(2024, 3, 1),
        created_at=datetime(2024, 1, 1, 12, 0),
    )

    repo.save_tasks([task])

    assert TaskRepository(store).load_tasks() == [task]


def test_tasks_are_stored_as_camel_case_records(store: KeyValueStore) -> None:
    TaskRepository(store).save_tasks([TaskEntity(id="t1", title="A", start_date=date(2024, 1, 3))])

    record = json.loads(store.get(TASKS_KEY))[0]

    assert record["startDate"] == "2024-01-03"
    assert record["recurrenceType"] == "none"
    assert record["startDateTime"] is None


def test_corrupt_payload_loads_as_empty(store: KeyValueStore) -> None:
    store.set(TASKS_KEY, "{not json")
    assert TaskRepository(store).load_tasks() == []

    store.set(TASKS_KEY, json.dumps({"id": "t1"}))
    assert TaskRepository(store).load_tasks() == []


def test_bad_fields_degrade_to_defaults(store: KeyValueStore) -> None:
    store.set(
        TASKS_KEY,
        json.dumps(
            [
                {"title": "no id"},
                {
                    "id": "t2",
                    "title": "Legacy",
                    "startDate": "2024-02-01T00:00:00.000Z",
                    "priority": "urgent",
                    "recurrenceType": "yearly",
                    "recurrenceInterval": "abc",
                    "endDate": "not a date",
                },
            ]
        ),
    )

    tasks = TaskRepository(store).load_tasks()

    assert len(tasks) == 1
    task = tasks[0]
    assert task.start_date == date(2024, 2, 1)
    assert task.end_date is None
    assert task.priority == Priority.MEDIUM
    assert task.recurrence_type == RecurrenceType.NONE
    assert task.recurrence_interval == 1


def test_dark_mode_flag(store: KeyValueStore) -> None:
    repo = TaskRepository(store)
    assert repo.load_dark_mode() is False

    repo.save_dark_mode(True)
    assert store.get("dark_mode") == "true"
    assert repo.load_dark_mode() is True
