"""Skill roster: the ordered list of skills and their XP totals."""

from __future__ import annotations

from dataclasses import dataclass, replace

from sqlalchemy import select

from ..database import Skill, Store
from .records import SkillRecord


@dataclass(frozen=True)
class SkillProgress:
    skill_id: str
    skill_name: str
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


class SkillRoster:
    def __init__(self, store: Store) -> None:
        self._store = store
        self.skills: list[SkillRecord] = []

    async def fetch(self) -> list[SkillRecord]:
        def work(db):
            rows = db.scalars(
                select(Skill).order_by(Skill.display_order, Skill.name)
            ).all()
            return [SkillRecord.from_row(r) for r in rows]

        self.skills = await self._store.run(work)
        return self.skills

    def get(self, skill_id: str) -> SkillRecord | None:
        for skill in self.skills:
            if skill.id == skill_id:
                return skill
        return None

    @property
    def active_skills(self) -> list[SkillRecord]:
        return [s for s in self.skills if s.is_active]

    @property
    def overall_xp(self) -> int:
        """Sum of every skill's XP; derived, never stored."""
        return sum(s.total_xp for s in self.skills)

    def apply_totals(self, skill_id: str, total_xp: int, total_seconds: int) -> SkillProgress | None:
        """Swap in the persisted totals for one skill and report level change.

        Totals only grow, so a reply that arrives after a newer one never
        moves them back.
        """
        for index, skill in enumerate(self.skills):
            if skill.id == skill_id:
                updated = replace(
                    skill,
                    total_xp=max(skill.total_xp, total_xp),
                    total_seconds=max(skill.total_seconds, total_seconds),
                )
                self.skills[index] = updated
                return SkillProgress(
                    skill_id=skill.id,
                    skill_name=skill.name,
                    old_level=skill.level,
                    new_level=updated.level,
                )
        return None
