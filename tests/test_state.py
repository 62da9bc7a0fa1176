from __future__ import annotations

from datetime import datetime

import pytest

from taskgrid.domain import state as app_state
from taskgrid.domain.enums import Priority, RecurrenceType
from taskgrid.domain.errors import TaskNotFoundError
from taskgrid.domain.state import AppState

CREATED = datetime(2024, 1, 1, 9, 0)


def test_add_task_coerces_fields_and_bumps_version() -> None:
    state, task = app_state.add_task(
        AppState(),
        {
            "title": "A",
            "priority": "bogus",
            "recurrence_type": "",
            "recurrence_interval": "0",
            "completed": True,
            "unknown": "ignored",
        },
        "t1",
        CREATED,
    )

    assert state.version == 1
    assert state.tasks == (task,)
    assert task.priority == Priority.MEDIUM
    assert task.recurrence_type == RecurrenceType.NONE
    assert task.recurrence_interval == 1
    assert task.completed is False


def test_update_keeps_identity_fields() -> None:
    state, task = app_state.add_task(AppState(), {"title": "A"}, "t1", CREATED)

    new_state, updated = app_state.update_task(
        state, "t1", {"id": "other", "created_at": datetime(2030, 1, 1), "title": "B"}
    )

    assert updated.id == "t1"
    assert updated.created_at == CREATED
    assert updated.title == "B"
    assert state.tasks == (task,)
    assert new_state.version == state.version + 1


def test_missing_task_raises() -> None:
    with pytest.raises(TaskNotFoundError):
        app_state.update_task(AppState(), "nope", {"title": "x"})
    with pytest.raises(TaskNotFoundError):
        app_state.toggle_task(AppState(), "nope")


def test_dark_mode_toggle_returns_new_snapshot() -> None:
    state = AppState()

    toggled = app_state.toggle_dark_mode(state)

    assert toggled.dark_mode is True
    assert state.dark_mode is False
