"""Time logging: the append-only ``time_logs`` table.

Every XP award lands here (timer sessions, manual entries and quest
completions), which makes the table the source of truth for "today's XP"
and "today's hours".  Those aggregates are always re-summed, never cached
in the database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial

from sqlalchemy import func, select, update

from ..database import Skill, Store, TimeLog
from ..dateutils import local_datetime_string
from ..errors import SkillNotFound
from .xp import calculate_time_xp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeLogRecord:
    id: str
    skill_id: str
    duration_seconds: int
    xp_earned: int
    source: str
    logged_at: str

    @classmethod
    def from_row(cls, row: TimeLog) -> TimeLogRecord:
        return cls(
            id=row.id,
            skill_id=row.skill_id,
            duration_seconds=row.duration_seconds,
            xp_earned=row.xp_earned,
            source=row.source,
            logged_at=row.logged_at,
        )


@dataclass(frozen=True)
class LogTimeResult:
    time_log: TimeLogRecord
    xp_earned: int
    skill_total_xp: int
    skill_total_seconds: int


def credit_skill(db, skill_id: str, xp: int, seconds: int, stamp: str) -> tuple[int, int]:
    """Atomically add *xp* and *seconds* to a skill; return the new totals.

    Uses a single ``UPDATE ... SET total_xp = total_xp + :xp`` so concurrent
    writers against the same skill cannot lose each other's increments.
    """
    result = db.execute(
        update(Skill)
        .where(Skill.id == skill_id)
        .values(
            total_xp=Skill.total_xp + xp,
            total_seconds=Skill.total_seconds + seconds,
            updated_at=stamp,
        )
    )
    if result.rowcount == 0:
        raise SkillNotFound(skill_id)
    totals = db.execute(
        select(Skill.total_xp, Skill.total_seconds).where(Skill.id == skill_id)
    ).one()
    return totals.total_xp, totals.total_seconds


def _insert_time_log(
    db,
    *,
    log_id: str,
    skill_id: str,
    duration_seconds: int,
    xp_earned: int,
    source: str,
    logged_at: str,
) -> LogTimeResult:
    total_xp, total_seconds = credit_skill(
        db, skill_id, xp_earned, duration_seconds, logged_at,
    )
    row = TimeLog(
        id=log_id,
        skill_id=skill_id,
        duration_seconds=duration_seconds,
        xp_earned=xp_earned,
        source=source,
        logged_at=logged_at,
    )
    db.add(row)
    db.flush()
    return LogTimeResult(
        time_log=TimeLogRecord.from_row(row),
        xp_earned=xp_earned,
        skill_total_xp=total_xp,
        skill_total_seconds=total_seconds,
    )


async def log_time(
    store: Store,
    skill_id: str,
    duration_seconds: int,
    source: str,
    streak_days: int,
    is_debuffed: bool,
) -> LogTimeResult:
    """Record *duration_seconds* against a skill and credit the earned XP.

    The log row and the skill's totals are written in one transaction.
    """
    if source not in ("timer", "manual"):
        raise ValueError(f"Time can only be logged from timer or manual, got {source!r}")
    if duration_seconds < 0:
        raise ValueError("duration_seconds must be >= 0")

    xp_earned = calculate_time_xp(duration_seconds, streak_days, is_debuffed)
    result = await store.run(partial(
        _insert_time_log,
        log_id=store.generate_id(),
        skill_id=skill_id,
        duration_seconds=duration_seconds,
        xp_earned=xp_earned,
        source=source,
        logged_at=local_datetime_string(),
    ))
    logger.info(
        "Logged %ds (%s) to %s for %d XP",
        duration_seconds, source, skill_id, xp_earned,
    )
    return result


# ── queries ──────────────────────────────────────────────────────────────


def day_totals(db, day: str) -> tuple[int, int]:
    """``(xp_earned, seconds_logged)`` summed over logs dated *day*."""
    row = db.execute(
        select(
            func.coalesce(func.sum(TimeLog.xp_earned), 0),
            func.coalesce(func.sum(TimeLog.duration_seconds), 0),
        ).where(func.substr(TimeLog.logged_at, 1, 10) == day)
    ).one()
    return int(row[0]), int(row[1])


async def time_logs_for_day(store: Store, day: str) -> list[TimeLogRecord]:
    def work(db):
        rows = db.scalars(
            select(TimeLog)
            .where(func.substr(TimeLog.logged_at, 1, 10) == day)
            .order_by(TimeLog.logged_at.desc())
        ).all()
        return [TimeLogRecord.from_row(r) for r in rows]

    return await store.run(work)


async def time_logs_for_skill(store: Store, skill_id: str) -> list[TimeLogRecord]:
    def work(db):
        rows = db.scalars(
            select(TimeLog)
            .where(TimeLog.skill_id == skill_id)
            .order_by(TimeLog.logged_at.desc())
        ).all()
        return [TimeLogRecord.from_row(r) for r in rows]

    return await store.run(work)
