from __future__ import annotations

from enum import StrEnum


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def coerce(cls, value: object) -> "Priority":
        try:
            return cls(value)
        except ValueError:
            return cls.MEDIUM


class RecurrenceType(StrEnum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def coerce(cls, value: object) -> "RecurrenceType":
        if not value:
            return cls.NONE
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


class StatusFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
