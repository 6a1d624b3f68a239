"""Shared test helpers for ARISE."""

from __future__ import annotations

import asyncio

from sqlalchemy import func, select

from arise.database import Player, Quest, Store, TimeLog, get_session
from arise.errors import PersistenceFailure
from arise.gamification.recurrence import RecurrencePattern, dump_pattern
from arise.timer.engine import SessionTimer


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Wall clock the tests move by hand."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingStore(Store):
    """Store whose next ``run`` raises once ``fail_next`` is set."""

    def __init__(self):
        self.fail_next = False

    async def run(self, work):
        if self.fail_next:
            self.fail_next = False
            raise PersistenceFailure("Database operation failed", {"cause": "injected"})
        return await super().run(work)


class StallingStore(Store):
    """Store whose next ``run`` waits until the awaiting task is cancelled."""

    def __init__(self):
        self.stall_next = False
        self.stalled = asyncio.Event()

    async def run(self, work):
        if self.stall_next:
            self.stall_next = False
            self.stalled.set()
            await asyncio.Event().wait()
        return await super().run(work)


def run_ticks(timer: SessionTimer, clock: FakeClock, seconds: int) -> None:
    """Advance the clock one second at a time, ticking after each step."""
    for _ in range(seconds):
        clock.advance(1)
        timer.tick()


# ── direct database access ───────────────────────────────────────────────


def set_player(**values) -> None:
    with get_session() as db:
        player = db.get(Player, 1)
        for key, value in values.items():
            setattr(player, key, value)


def get_player() -> Player:
    with get_session() as db:
        return db.get(Player, 1)


def insert_quest(
    quest_id: str,
    due_date: str,
    *,
    title: str | None = None,
    skill_id: str = "ai-engineering",
    difficulty: str = "easy",
    completed: bool = False,
    pattern: RecurrencePattern | None = None,
    raw_pattern: str | None = None,
) -> None:
    with get_session() as db:
        db.add(Quest(
            id=quest_id,
            skill_id=skill_id,
            title=title or quest_id,
            difficulty=difficulty,
            is_completed=completed,
            is_recurring=pattern is not None or raw_pattern is not None,
            recurrence_pattern=raw_pattern or dump_pattern(pattern),
            due_date=due_date,
            completed_at=f"{due_date} 12:00:00" if completed else None,
            created_at=f"{due_date} 08:00:00",
        ))


def insert_time_log(log_id: str, skill_id: str, seconds: int, xp: int, logged_at: str) -> None:
    with get_session() as db:
        db.add(TimeLog(
            id=log_id,
            skill_id=skill_id,
            duration_seconds=seconds,
            xp_earned=xp,
            source="manual",
            logged_at=logged_at,
        ))


def count_rows(model, *criteria) -> int:
    with get_session() as db:
        return db.scalar(select(func.count()).select_from(model).where(*criteria))
