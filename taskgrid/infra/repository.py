from __future__ import annotations

import json
import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from taskgrid.domain.entities import TaskEntity

from .db import SessionLocal
from .models import KeyValueModel
from .serialization import task_from_record, task_to_record

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
DARK_MODE_KEY = "dark_mode"


class KeyValueStore:
    def __init__(self, session_factory: sessionmaker[Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            entry = session.get(KeyValueModel, key)
            return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            entry = session.get(KeyValueModel, key)
            if entry is None:
                session.add(KeyValueModel(key=key, value=value))
            else:
                entry.value = value
            session.commit()

    def delete(self, key: str) -> None:
        with self._session_factory() as session:
            entry = session.get(KeyValueModel, key)
            if not entry:
                return
            session.delete(entry)
            session.commit()


class TaskRepository:
    """Stores the whole task collection as one serialized entry."""

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self._store = store or KeyValueStore()

    def load_tasks(self) -> list[TaskEntity]:
        raw = self._store.get(TASKS_KEY)
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Stored task collection is not valid JSON, starting empty")
            return []
        if not isinstance(records, list):
            logger.error("Stored task collection is not a list, starting empty")
            return []

        tasks = []
        for record in records:
            if not isinstance(record, dict) or not record.get("id"):
                logger.warning("Skipping stored task without id: %r", record)
                continue
            tasks.append(task_from_record(record))
        return tasks

    def save_tasks(self, tasks: list[TaskEntity]) -> None:
        payload = json.dumps([task_to_record(task) for task in tasks], ensure_ascii=False)
        self._store.set(TASKS_KEY, payload)
        logger.debug("Saved %d tasks", len(tasks))

    def load_dark_mode(self) -> bool:
        return self._store.get(DARK_MODE_KEY) == "true"

    def save_dark_mode(self, enabled: bool) -> None:
        self._store.set(DARK_MODE_KEY, "true" if enabled else "false")
