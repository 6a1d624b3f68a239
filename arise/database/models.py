"""SQLAlchemy ORM models for ARISE.

Dates are ``YYYY-MM-DD`` strings and timestamps ``YYYY-MM-DD HH:MM:SS``
strings in local time (see :mod:`arise.dateutils`).
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, Text, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import DeclarativeBase

from ..dateutils import local_datetime_string


class Base(DeclarativeBase):
    pass


class Player(Base):
    """Single-row table holding streak, health and debuff state.

    Overall XP is not stored; it is the sum of every skill's ``total_xp``.
    """

    __tablename__ = "player"
    __table_args__ = (CheckConstraint("id = 1", name="player_singleton"),)

    id = Column(Integer, primary_key=True, default=1)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    health = Column(Integer, nullable=False, default=100)
    is_debuffed = Column(Boolean, nullable=False, default=False)
    last_processed_date = Column(String(10), nullable=True)
    created_at = Column(String(19), nullable=False, default=local_datetime_string)
    updated_at = Column(String(19), nullable=False, default=local_datetime_string)

    def __repr__(self) -> str:
        return (
            f"<Player streak={self.current_streak} health={self.health} "
            f"debuffed={self.is_debuffed}>"
        )


class Skill(Base):
    """A tracked activity accumulating its own XP and time."""

    __tablename__ = "skills"

    id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=False)
    icon = Column(String(16), nullable=False, default="")
    color = Column(String(16), nullable=False, default="#8B5CF6")
    total_xp = Column(Integer, nullable=False, default=0)
    total_seconds = Column(Integer, nullable=False, default=0)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(String(19), nullable=False, default=local_datetime_string)
    updated_at = Column(String(19), nullable=False, default=local_datetime_string)

    def __repr__(self) -> str:
        return f"<Skill id={self.id} xp={self.total_xp}>"


class Quest(Base):
    """A completable task tied to a skill and a due date."""

    __tablename__ = "quests"
    __table_args__ = (
        CheckConstraint(
            "difficulty IN ('easy', 'medium', 'hard')", name="quest_difficulty",
        ),
        Index("idx_quests_due_date", "due_date"),
        Index("idx_quests_skill_id", "skill_id"),
    )

    id = Column(String(36), primary_key=True)
    skill_id = Column(String(64), ForeignKey("skills.id"), nullable=False)
    title = Column(String(255), nullable=False)
    difficulty = Column(String(10), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_pattern = Column(Text, nullable=True)  # JSON
    due_date = Column(String(10), nullable=False)
    completed_at = Column(String(19), nullable=True)
    created_at = Column(String(19), nullable=False, default=local_datetime_string)

    def __repr__(self) -> str:
        return (
            f"<Quest id={self.id} title={self.title!r} "
            f"completed={self.is_completed}>"
        )


class TimeLog(Base):
    """Append-only record of time and XP credited to a skill."""

    __tablename__ = "time_logs"
    __table_args__ = (
        CheckConstraint(
            "source IN ('timer', 'manual', 'quest')", name="time_log_source",
        ),
        Index("idx_time_logs_skill_id", "skill_id"),
        Index("idx_time_logs_logged_at", "logged_at"),
    )

    id = Column(String(36), primary_key=True)
    skill_id = Column(String(64), ForeignKey("skills.id"), nullable=False)
    duration_seconds = Column(Integer, nullable=False, default=0)
    xp_earned = Column(Integer, nullable=False, default=0)
    source = Column(String(10), nullable=False)
    logged_at = Column(String(19), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<TimeLog skill={self.skill_id} source={self.source} "
            f"xp={self.xp_earned}>"
        )


class DailySnapshot(Base):
    """Write-once aggregate of a finalized day."""

    __tablename__ = "daily_snapshots"

    id = Column(String(36), primary_key=True)
    snapshot_date = Column(String(10), nullable=False, unique=True)
    total_xp_earned = Column(Integer, nullable=False, default=0)
    total_seconds_logged = Column(Integer, nullable=False, default=0)
    quests_completed = Column(Integer, nullable=False, default=0)
    quests_total = Column(Integer, nullable=False, default=0)
    streak_count = Column(Integer, nullable=False, default=0)
    health = Column(Integer, nullable=False, default=100)
    skills_data = Column(Text, nullable=False)  # JSON {skill_id: {xp, seconds, level}}
    created_at = Column(String(19), nullable=False, default=local_datetime_string)

    def __repr__(self) -> str:
        return (
            f"<DailySnapshot date={self.snapshot_date} "
            f"quests={self.quests_completed}/{self.quests_total}>"
        )


class JournalEntry(Base):
    """Free-text note for one calendar day; at most one row per date."""

    __tablename__ = "journal_entries"

    id = Column(String(36), primary_key=True)
    content = Column(Text, nullable=False)
    entry_date = Column(String(10), nullable=False, unique=True)
    created_at = Column(String(19), nullable=False, default=local_datetime_string)
    updated_at = Column(String(19), nullable=False, default=local_datetime_string)

    def __repr__(self) -> str:
        return f"<JournalEntry date={self.entry_date} chars={len(self.content or '')}>"
