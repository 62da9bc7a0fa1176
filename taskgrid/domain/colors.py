from __future__ import annotations

from dataclasses import dataclass

from .entities import TaskEntity
from .enums import Priority


@dataclass(frozen=True)
class TaskColor:
    id: str
    name: str
    value: str
    light: str
    dark: str


TASK_COLORS = [
    TaskColor("blue", "Синій", "#3b82f6", "#dbeafe", "#1e40af"),
    TaskColor("indigo", "Індиго", "#6366f1", "#e0e7ff", "#3730a3"),
    TaskColor("purple", "Фіолетовий", "#8b5cf6", "#ede9fe", "#5b21b6"),
    TaskColor("pink", "Рожевий", "#ec4899", "#fce7f3", "#9f1239"),
    TaskColor("red", "Червоний", "#ef4444", "#fee2e2", "#991b1b"),
    TaskColor("orange", "Помаранчевий", "#f97316", "#ffedd5", "#9a3412"),
    TaskColor("amber", "Бурштиновий", "#f59e0b", "#fef3c7", "#92400e"),
    TaskColor("yellow", "Жовтий", "#eab308", "#fef9c3", "#854d0e"),
    TaskColor("lime", "Лаймовий", "#84cc16", "#ecfccb", "#365314"),
    TaskColor("green", "Зелений", "#10b981", "#d1fae5", "#065f46"),
    TaskColor("emerald", "Смарагдовий", "#14b8a6", "#d1fae5", "#064e3b"),
    TaskColor("teal", "Бірюзовий", "#06b6d4", "#ccfbf1", "#164e63"),
]

COLORS_BY_ID = {color.id: color for color in TASK_COLORS}

COMPLETED_COLOR = "#9ca3af"
TEXT_COLOR = "#ffffff"

PRIORITY_COLOR_IDS = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "blue",
    Priority.LOW: "green",
}


def default_color_for_priority(priority: object) -> str:
    color_id = PRIORITY_COLOR_IDS[Priority.coerce(priority)]
    return COLORS_BY_ID[color_id].value


def color_by_id(color_id: str | None, priority: object = Priority.MEDIUM) -> str:
    color = COLORS_BY_ID.get(color_id or "")
    if color is None:
        return default_color_for_priority(priority)
    return color.value


def resolve_color(task: TaskEntity) -> str:
    if task.completed:
        return COMPLETED_COLOR
    if task.color:
        return color_by_id(task.color, task.priority)
    return default_color_for_priority(task.priority)
