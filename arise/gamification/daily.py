"""Daily resolution: settle yesterday once per calendar day.

Runs at startup, before anything else reads player state.  For a new day:

1. Count yesterday's quests (total / completed).
2. Streak: increment if they were all done, reset if any was missed, leave
   alone if there were none.  Only once a previous day has been processed.
3. Health: +5 for a clean day, -5 per miss capped at -20, clamped 0-100.
4. Debuff: entered when health reaches 0 (recovery tracking starts too).
5. Snapshot yesterday (skipped on the very first run).
6. Generate today's instances of recurring quests.
7. Record today as processed.

All database work happens in one transaction with ``last_processed_date``
written last, so an interrupted run leaves nothing behind and simply runs
again on the next start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import func, select

from ..database import Player, Quest, Store
from ..dateutils import local_date_string, local_datetime_string, yesterday_string
from .recovery import RecoveryTracker
from .records import QuestRecord
from .snapshots import create_daily_snapshot, quest_counts
from .xp import (
    apply_health_change,
    calculate_daily_health_change,
    should_enter_debuff,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyResolutionResult:
    is_new_day: bool = False
    yesterday_complete: bool = False
    quests_completed: int = 0
    quests_total: int = 0
    streak_change: str = "none"       # "increment" | "reset" | "none"
    new_streak: int = 0
    health_change: int = 0
    new_health: int = 100
    entered_debuff: bool = False
    quests_generated: int = 0
    snapshot_created: bool = False


def generate_recurring_quests(db, today: date, new_id) -> int:
    """Create today's instances of every matching recurring quest.

    An instance is identified by ``(title, skill_id, due_date)``; one that
    already exists is never duplicated.
    """
    day = local_date_string(today)
    stamp = local_datetime_string()
    templates = db.scalars(
        select(Quest).where(Quest.is_recurring.is_(True))
    ).all()

    generated = 0
    for template in templates:
        pattern = QuestRecord.from_row(template).recurrence_pattern
        if pattern is None or not pattern.matches(today):
            continue

        exists = db.scalar(
            select(func.count(Quest.id)).where(
                Quest.title == template.title,
                Quest.skill_id == template.skill_id,
                Quest.due_date == day,
            )
        )
        if exists:
            continue

        db.add(Quest(
            id=new_id(),
            skill_id=template.skill_id,
            title=template.title,
            difficulty=template.difficulty,
            is_completed=False,
            is_recurring=True,
            recurrence_pattern=template.recurrence_pattern,
            due_date=day,
            created_at=stamp,
        ))
        db.flush()
        generated += 1
    if generated:
        logger.info("Generated %d recurring quest(s) for %s", generated, day)
    return generated


class DailyResolver:
    def __init__(self, store: Store, recovery: RecoveryTracker) -> None:
        self._store = store
        self._recovery = recovery

    async def check_and_process_new_day(
        self, today: date | None = None,
    ) -> DailyResolutionResult:
        """Resolve the day boundary if *today* has not been processed yet.

        Never raises: any failure is logged and reported as "not a new day",
        leaving the stored state untouched.
        """
        today = today or date.today()
        try:
            result = await self._store.run(lambda db: self._resolve(db, today))
        except Exception:
            logger.exception("Daily resolution failed")
            return DailyResolutionResult()

        if result.entered_debuff:
            try:
                self._recovery.start_if_inactive()
            except OSError:
                logger.exception("Could not start recovery tracking")
        return result

    def _resolve(self, db, today: date) -> DailyResolutionResult:
        today_str = local_date_string(today)
        yesterday = yesterday_string(today)

        player = db.get(Player, 1)
        if player is None:
            player = Player(id=1)
            db.add(player)
            db.flush()

        if player.last_processed_date == today_str:
            return DailyResolutionResult(
                new_streak=player.current_streak, new_health=player.health,
            )

        first_run = player.last_processed_date is None
        total, completed = quest_counts(db, yesterday)
        all_done = total == 0 or completed == total

        streak_change = "none"
        health_change = 0
        entered_debuff = False
        if not first_run and total > 0:
            if all_done:
                player.current_streak += 1
                player.longest_streak = max(player.longest_streak, player.current_streak)
                streak_change = "increment"
            else:
                player.current_streak = 0
                streak_change = "reset"

            health_change = calculate_daily_health_change(completed, total)
            player.health = apply_health_change(player.health, health_change)
            if should_enter_debuff(player.health) and not player.is_debuffed:
                player.is_debuffed = True
                entered_debuff = True
                logger.info("Health depleted: player is now debuffed")
            player.updated_at = local_datetime_string()
            db.flush()

        snapshot_created = False
        if not first_run:
            snapshot_created = create_daily_snapshot(db, yesterday)

        generated = generate_recurring_quests(db, today, self._store.generate_id)

        player.last_processed_date = today_str
        logger.info(
            "Processed new day %s: streak %s, health %+d",
            today_str, streak_change, health_change,
        )
        return DailyResolutionResult(
            is_new_day=True,
            yesterday_complete=all_done,
            quests_completed=completed,
            quests_total=total,
            streak_change=streak_change,
            new_streak=player.current_streak,
            health_change=health_change,
            new_health=player.health,
            entered_debuff=entered_debuff,
            quests_generated=generated,
            snapshot_created=snapshot_created,
        )


def summary_lines(result: DailyResolutionResult) -> list[str]:
    """Human-readable lines describing what the day boundary changed."""
    if not result.is_new_day:
        return []
    lines: list[str] = []
    if result.quests_total > 0:
        if result.yesterday_complete:
            lines.append(
                f"All {result.quests_total} quests completed yesterday!"
            )
        else:
            lines.append(
                f"Completed {result.quests_completed}/{result.quests_total} "
                f"quests yesterday."
            )
    if result.streak_change == "increment":
        lines.append(f"Streak: {result.new_streak} days")
    elif result.streak_change == "reset":
        lines.append("Streak reset.")
    if result.health_change > 0:
        lines.append(f"+{result.health_change} HP (now {result.new_health})")
    elif result.health_change < 0:
        lines.append(f"{result.health_change} HP (now {result.new_health})")
    if result.entered_debuff:
        lines.append(
            "You are Weakened: XP is halved until you finish the recovery quest."
        )
    if result.quests_generated:
        lines.append(f"{result.quests_generated} recurring quest(s) added for today.")
    return lines
