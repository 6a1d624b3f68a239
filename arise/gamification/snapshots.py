"""Daily snapshots: the write-once history of finalized days.

Both functions take an open session so the daily resolution can run them
inside its own transaction.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy import case, func, select

from ..database import DailySnapshot, Player, Quest, Skill
from ..dateutils import local_datetime_string
from .timelog import day_totals
from .xp import STARTING_HEALTH, calculate_level

logger = logging.getLogger(__name__)


@dataclass
class SnapshotData:
    total_xp_earned: int = 0
    total_seconds_logged: int = 0
    quests_completed: int = 0
    quests_total: int = 0
    streak_count: int = 0
    health: int = STARTING_HEALTH
    skills_data: dict[str, dict[str, int]] = field(default_factory=dict)


def quest_counts(db, day: str) -> tuple[int, int]:
    """``(total, completed)`` for quests due on *day*."""
    row = db.execute(
        select(
            func.count(Quest.id),
            func.coalesce(
                func.sum(case((Quest.is_completed.is_(True), 1), else_=0)), 0,
            ),
        ).where(Quest.due_date == day)
    ).one()
    return int(row[0]), int(row[1])


def gather_snapshot_data(db, day: str) -> SnapshotData:
    """Collect the aggregates for *day* without saving anything."""
    xp, seconds = day_totals(db, day)
    total, completed = quest_counts(db, day)
    player = db.get(Player, 1)

    skills_data = {
        skill.id: {
            "xp": skill.total_xp,
            "seconds": skill.total_seconds,
            "level": calculate_level(skill.total_xp),
        }
        for skill in db.scalars(select(Skill)).all()
    }

    return SnapshotData(
        total_xp_earned=xp,
        total_seconds_logged=seconds,
        quests_completed=completed,
        quests_total=total,
        streak_count=player.current_streak if player else 0,
        health=player.health if player else STARTING_HEALTH,
        skills_data=skills_data,
    )


def create_daily_snapshot(db, day: str) -> bool:
    """Store the snapshot for *day*.  Returns False if one already exists."""
    exists = db.scalar(
        select(func.count(DailySnapshot.id))
        .where(DailySnapshot.snapshot_date == day)
    )
    if exists:
        logger.debug("Snapshot already exists for %s", day)
        return False

    data = gather_snapshot_data(db, day)
    db.add(DailySnapshot(
        id=str(uuid.uuid4()),
        snapshot_date=day,
        total_xp_earned=data.total_xp_earned,
        total_seconds_logged=data.total_seconds_logged,
        quests_completed=data.quests_completed,
        quests_total=data.quests_total,
        streak_count=data.streak_count,
        health=data.health,
        skills_data=json.dumps(data.skills_data),
        created_at=local_datetime_string(),
    ))
    db.flush()
    logger.info("Created daily snapshot for %s", day)
    return True
