"""Recurrence patterns for repeating quests.

Stored as JSON in ``quests.recurrence_pattern``::

    {"type": "daily"}
    {"type": "weekly", "days": [1, 3, 5]}     # 0 = Sunday ... 6 = Saturday
    {"type": "custom", "interval": 3}

``Custom`` can be read back from older databases but never matches a date,
and :func:`validate_for_creation` refuses to store a new one.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from typing import Union

from ..dateutils import weekday_index
from ..errors import InvalidRecurrence


@dataclass(frozen=True)
class Daily:
    def matches(self, day: date) -> bool:
        return True

    def to_dict(self) -> dict:
        return {"type": "daily"}


@dataclass(frozen=True)
class Weekly:
    days: frozenset[int]

    def matches(self, day: date) -> bool:
        return weekday_index(day) in self.days

    def to_dict(self) -> dict:
        return {"type": "weekly", "days": sorted(self.days)}


@dataclass(frozen=True)
class Custom:
    interval: int | None = None

    def matches(self, day: date) -> bool:
        return False

    def to_dict(self) -> dict:
        data: dict = {"type": "custom"}
        if self.interval is not None:
            data["interval"] = self.interval
        return data


RecurrencePattern = Union[Daily, Weekly, Custom]


def weekly(*days: int) -> Weekly:
    """Convenience constructor: ``weekly(1, 3)`` for Monday and Wednesday."""
    return Weekly(frozenset(days))


def from_dict(data: dict) -> RecurrencePattern:
    kind = data.get("type")
    if kind == "daily":
        return Daily()
    if kind == "weekly":
        days = data.get("days") or []
        if any(not isinstance(d, int) or not 0 <= d <= 6 for d in days):
            raise InvalidRecurrence(
                "Weekly days must be integers 0-6", {"days": days},
            )
        return Weekly(frozenset(days))
    if kind == "custom":
        return Custom(data.get("interval"))
    raise InvalidRecurrence("Unknown recurrence type", {"type": kind})


def parse_pattern(raw: str | None) -> RecurrencePattern | None:
    """Decode the JSON column; ``None`` stays ``None``."""
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise InvalidRecurrence(
            "Malformed recurrence pattern", {"raw": raw},
        ) from exc
    if not isinstance(data, dict):
        raise InvalidRecurrence("Malformed recurrence pattern", {"raw": raw})
    return from_dict(data)


def dump_pattern(pattern: RecurrencePattern | None) -> str | None:
    if pattern is None:
        return None
    return json.dumps(pattern.to_dict())


def validate_for_creation(
    is_recurring: bool, pattern: RecurrencePattern | None,
) -> None:
    """Reject patterns that would never generate a quest."""
    if isinstance(pattern, Custom):
        raise InvalidRecurrence(
            "Custom recurrence is not supported", pattern.to_dict(),
        )
    if isinstance(pattern, Weekly) and not pattern.days:
        raise InvalidRecurrence("Weekly recurrence needs at least one day")
    if is_recurring and pattern is None:
        raise InvalidRecurrence("Recurring quests need a recurrence pattern")
