"""In-memory views of the persisted entities.

The services keep lists of these frozen records and swap whole records on
every change, so a pre-image taken before a change stays valid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Any

from ..database import models
from ..errors import InvalidRecurrence
from .recurrence import RecurrencePattern, parse_pattern
from .xp import (
    QUEST_XP,
    calculate_level,
    visual_progress,
    xp_in_current_level,
    xp_to_next_level,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerRecord:
    current_streak: int = 0
    longest_streak: int = 0
    health: int = 100
    is_debuffed: bool = False
    last_processed_date: str | None = None

    @classmethod
    def from_row(cls, row: models.Player) -> PlayerRecord:
        return cls(
            current_streak=row.current_streak,
            longest_streak=row.longest_streak,
            health=row.health,
            is_debuffed=bool(row.is_debuffed),
            last_processed_date=row.last_processed_date,
        )


@dataclass(frozen=True)
class SkillRecord:
    id: str
    name: str
    icon: str
    color: str
    total_xp: int
    total_seconds: int
    display_order: int
    is_active: bool

    @classmethod
    def from_row(cls, row: models.Skill) -> SkillRecord:
        return cls(
            id=row.id,
            name=row.name,
            icon=row.icon,
            color=row.color,
            total_xp=row.total_xp,
            total_seconds=row.total_seconds,
            display_order=row.display_order,
            is_active=bool(row.is_active),
        )

    @property
    def level(self) -> int:
        return calculate_level(self.total_xp)

    @property
    def progress(self) -> float:
        return visual_progress(self.total_xp)

    @property
    def total_hours(self) -> float:
        return self.total_seconds / 3600

    @property
    def xp_into_level(self) -> int:
        return xp_in_current_level(self.total_xp)[0]

    @property
    def xp_to_next_level(self) -> int:
        return xp_to_next_level(self.total_xp)


@dataclass(frozen=True)
class QuestRecord:
    id: str
    skill_id: str
    title: str
    difficulty: str
    is_completed: bool
    is_recurring: bool
    recurrence_pattern: RecurrencePattern | None
    due_date: str
    completed_at: str | None
    created_at: str

    @classmethod
    def from_row(cls, row: models.Quest) -> QuestRecord:
        try:
            pattern = parse_pattern(row.recurrence_pattern)
        except InvalidRecurrence as exc:
            logger.warning("Quest %s has an unreadable pattern: %s", row.id, exc)
            pattern = None
        return cls(
            id=row.id,
            skill_id=row.skill_id,
            title=row.title,
            difficulty=row.difficulty,
            is_completed=bool(row.is_completed),
            is_recurring=bool(row.is_recurring),
            recurrence_pattern=pattern,
            due_date=row.due_date,
            completed_at=row.completed_at,
            created_at=row.created_at,
        )

    @property
    def xp_reward(self) -> int:
        return QUEST_XP[self.difficulty]


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class QuestUpdate:
    """Partial update for a quest: fields left ``UNSET`` are not touched.

    ``recurrence_pattern=None`` clears the pattern, which is why absence is
    spelled ``UNSET`` rather than ``None``.
    """

    title: Any = UNSET
    skill_id: Any = UNSET
    difficulty: Any = UNSET
    due_date: Any = UNSET
    is_recurring: Any = UNSET
    recurrence_pattern: Any = UNSET

    def changes(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def merge_update(record: Any, update: QuestUpdate) -> Any:
    """Return *record* with every set field of *update* applied."""
    return replace(record, **update.changes())
