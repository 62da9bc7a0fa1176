from __future__ import annotations

from taskgrid.domain.entities import TaskEntity
from taskgrid.domain.errors import TaskValidationError
from taskgrid.domain.timing import Timed, resolve_timing


def validate_task(task: TaskEntity) -> None:
    """Reject tasks the projector must never see.

    Raises ``TaskValidationError`` keyed by the offending field.
    """
    errors: dict[str, str] = {}
    if not (task.title or "").strip():
        errors["title"] = "Вкажи назву задачі."

    if task.start_date and task.end_date and task.end_date < task.start_date:
        errors["end_date"] = "Дата завершення має бути не раніше дати початку."
    else:
        timing = resolve_timing(task)
        if isinstance(timing, Timed) and timing.end < timing.start:
            errors["end_time"] = "Час завершення має бути не раніше часу початку."

    if errors:
        raise TaskValidationError(errors)
