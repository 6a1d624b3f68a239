"""Quest book: quest CRUD and the quest completion protocol.

Completion runs in four phases::

    guard + lock      synchronous, before the first await
    optimistic flip   the in-memory quest shows as completed at once
    persist           one store transaction: quest row, skill XP, time log
    commit | rollback swap in the persisted totals, or restore the pre-image

The lock is a per-instance set of quest ids.  Because the guard and the
lock happen in the same synchronous step, two completions of the same quest
can never both get past the guard, even when scheduled together with
``asyncio.gather``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import partial

from sqlalchemy import delete, select, update

from ..database import Quest, Store, TimeLog
from ..dateutils import local_datetime_string
from ..errors import (
    AlreadyCompleted,
    AlreadyInProgress,
    Immutable,
    QuestNotFound,
    SkillNotFound,
)
from .player import PlayerState
from .records import QuestRecord, QuestUpdate, merge_update
from .recurrence import RecurrencePattern, dump_pattern, validate_for_creation
from .skills import SkillRoster
from .timelog import credit_skill
from .xp import QUEST_XP, calculate_level, calculate_quest_xp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestCompletion:
    xp_awarded: int
    skill_id: str
    skill_name: str
    leveled_up: bool
    new_level: int
    old_level: int


class CompletionSaga:
    """Pre-image and lock for one in-flight completion.

    Rollback restores only this quest, so a concurrent completion of
    another quest keeps its own optimistic state.

    Exactly one of :meth:`commit` or :meth:`rollback` ends the saga; both
    release the lock.
    """

    def __init__(self, book: QuestBook, quest: QuestRecord) -> None:
        self.quest = quest
        self._book = book
        book._completing.add(quest.id)

    def apply_optimistic(self, completed_at: str) -> None:
        self._book._replace(
            replace(self.quest, is_completed=True, completed_at=completed_at)
        )

    def commit(self) -> None:
        self._book._completing.discard(self.quest.id)

    def rollback(self) -> None:
        self._book._replace(self.quest)
        self._book._completing.discard(self.quest.id)
        logger.warning("Rolled back completion of quest %s", self.quest.id)


def _check_difficulty(difficulty: str) -> None:
    if difficulty not in QUEST_XP:
        raise ValueError(f"Unknown difficulty {difficulty!r}")


class QuestBook:
    """Owns the in-memory quest list and every write to the quests table."""

    def __init__(self, store: Store, player: PlayerState, roster: SkillRoster) -> None:
        self._store = store
        self._player = player
        self._roster = roster
        self.quests: list[QuestRecord] = []
        self._completing: set[str] = set()

    # ── lookup ───────────────────────────────────────────────────────────

    def get(self, quest_id: str) -> QuestRecord | None:
        for quest in self.quests:
            if quest.id == quest_id:
                return quest
        return None

    def is_completing(self, quest_id: str) -> bool:
        return quest_id in self._completing

    def quests_for_date(self, day: str) -> list[QuestRecord]:
        return [q for q in self.quests if q.due_date == day]

    async def fetch(self) -> list[QuestRecord]:
        def work(db):
            rows = db.scalars(
                select(Quest).order_by(Quest.due_date, Quest.created_at)
            ).all()
            return [QuestRecord.from_row(r) for r in rows]

        self.quests = await self._store.run(work)
        return self.quests

    # ── CRUD ─────────────────────────────────────────────────────────────

    async def create_quest(
        self,
        skill_id: str,
        title: str,
        difficulty: str,
        due_date: str,
        is_recurring: bool = False,
        recurrence_pattern: RecurrencePattern | None = None,
    ) -> QuestRecord:
        _check_difficulty(difficulty)
        validate_for_creation(is_recurring, recurrence_pattern)
        if self._roster.get(skill_id) is None:
            raise SkillNotFound(skill_id)

        quest_id = self._store.generate_id()
        created_at = local_datetime_string()

        def work(db):
            row = Quest(
                id=quest_id,
                skill_id=skill_id,
                title=title,
                difficulty=difficulty,
                is_completed=False,
                is_recurring=is_recurring,
                recurrence_pattern=dump_pattern(recurrence_pattern),
                due_date=due_date,
                created_at=created_at,
            )
            db.add(row)
            db.flush()
            return QuestRecord.from_row(row)

        record = await self._store.run(work)
        self.quests.append(record)
        logger.info("Created quest %s (%s) due %s", record.id, title, due_date)
        return record

    async def update_quest(self, quest_id: str, changes: QuestUpdate) -> QuestRecord:
        quest = self._editable(quest_id, "update")
        values = changes.changes()
        if "difficulty" in values:
            _check_difficulty(values["difficulty"])
        if "skill_id" in values and self._roster.get(values["skill_id"]) is None:
            raise SkillNotFound(values["skill_id"])
        updated = merge_update(quest, changes)
        if "is_recurring" in values or "recurrence_pattern" in values:
            validate_for_creation(updated.is_recurring, updated.recurrence_pattern)

        columns = dict(values)
        if "recurrence_pattern" in columns:
            columns["recurrence_pattern"] = dump_pattern(columns["recurrence_pattern"])

        def work(db):
            db.execute(update(Quest).where(Quest.id == quest_id).values(**columns))

        if columns:
            await self._store.run(work)
        self._replace(updated)
        return updated

    async def delete_quest(self, quest_id: str) -> None:
        self._editable(quest_id, "delete")

        def work(db):
            db.execute(
                delete(Quest).where(Quest.id == quest_id, Quest.is_completed.is_(False))
            )

        await self._store.run(work)
        self.quests = [q for q in self.quests if q.id != quest_id]
        logger.info("Deleted quest %s", quest_id)

    # ── completion ───────────────────────────────────────────────────────

    async def complete_quest(self, quest_id: str) -> QuestCompletion:
        """Complete a quest and award its XP to the quest's skill.

        Raises :class:`AlreadyInProgress`, :class:`QuestNotFound` or
        :class:`AlreadyCompleted` without touching any state.  A missing
        skill or a failed write rolls the in-memory state back and
        re-raises.
        """
        saga = self._begin_completion(quest_id)
        quest = saga.quest
        completed_at = local_datetime_string()
        saga.apply_optimistic(completed_at)

        skill = self._roster.get(quest.skill_id)
        if skill is None:
            saga.rollback()
            raise SkillNotFound(quest.skill_id)

        xp_awarded = calculate_quest_xp(
            quest.difficulty,
            self._player.current_streak,
            self._player.is_debuffed,
        )
        old_level = skill.level

        try:
            total_xp, total_seconds = await self._store.run(partial(
                _persist_completion,
                quest_id=quest.id,
                skill_id=skill.id,
                xp=xp_awarded,
                completed_at=completed_at,
                log_id=self._store.generate_id(),
            ))
        except BaseException:
            # Cancellation included, so the lock is never left held.
            logger.error("Failed to persist completion of quest %s", quest.id)
            saga.rollback()
            raise

        self._roster.apply_totals(skill.id, total_xp, total_seconds)
        self._player.add_today(xp_awarded)
        saga.commit()

        new_level = calculate_level(total_xp)
        logger.info(
            "Quest %s completed: +%d XP to %s", quest.id, xp_awarded, skill.id,
        )
        return QuestCompletion(
            xp_awarded=xp_awarded,
            skill_id=skill.id,
            skill_name=skill.name,
            leveled_up=new_level > old_level,
            new_level=new_level,
            old_level=old_level,
        )

    def _begin_completion(self, quest_id: str) -> CompletionSaga:
        if quest_id in self._completing:
            raise AlreadyInProgress(quest_id)
        quest = self.get(quest_id)
        if quest is None:
            raise QuestNotFound(quest_id)
        if quest.is_completed:
            raise AlreadyCompleted(quest_id)
        return CompletionSaga(self, quest)

    # ── helpers ──────────────────────────────────────────────────────────

    def _editable(self, quest_id: str, action: str) -> QuestRecord:
        if quest_id in self._completing:
            raise AlreadyInProgress(quest_id)
        quest = self.get(quest_id)
        if quest is None:
            raise QuestNotFound(quest_id)
        if quest.is_completed:
            raise Immutable(quest_id, action)
        return quest

    def _replace(self, record: QuestRecord) -> None:
        self.quests = [record if q.id == record.id else q for q in self.quests]


def _persist_completion(
    db,
    *,
    quest_id: str,
    skill_id: str,
    xp: int,
    completed_at: str,
    log_id: str,
) -> tuple[int, int]:
    """Quest row, skill XP and time log, all in the caller's transaction."""
    result = db.execute(
        update(Quest)
        .where(Quest.id == quest_id, Quest.is_completed.is_(False))
        .values(is_completed=True, completed_at=completed_at)
    )
    if result.rowcount == 0:
        if db.get(Quest, quest_id) is None:
            raise QuestNotFound(quest_id)
        raise AlreadyCompleted(quest_id)

    totals = credit_skill(db, skill_id, xp, 0, completed_at)
    db.add(TimeLog(
        id=log_id,
        skill_id=skill_id,
        duration_seconds=0,
        xp_earned=xp,
        source="quest",
        logged_at=completed_at,
    ))
    return totals
