"""Gamification package."""

from .xp import (
    QUEST_XP,
    award_xp,
    calculate_level,
    calculate_quest_xp,
    calculate_time_xp,
    get_streak_multiplier,
    level_progress,
    visual_progress,
    xp_required_for_level,
)
from .recurrence import Daily, Weekly, Custom, RecurrencePattern, weekly
from .records import PlayerRecord, SkillRecord, QuestRecord, QuestUpdate, merge_update
from .recovery import RecoveryProgress, RecoveryStorage, RecoveryTracker
from .player import PlayerState
from .skills import SkillProgress, SkillRoster
from .quests import CompletionSaga, QuestBook, QuestCompletion
from .timelog import LogTimeResult, TimeLogRecord, log_time
from .daily import DailyResolutionResult, DailyResolver, summary_lines
from .journal import Journal, JournalRecord

__all__ = [
    "QUEST_XP",
    "award_xp",
    "calculate_level",
    "calculate_quest_xp",
    "calculate_time_xp",
    "get_streak_multiplier",
    "level_progress",
    "visual_progress",
    "xp_required_for_level",
    "Daily",
    "Weekly",
    "Custom",
    "RecurrencePattern",
    "weekly",
    "PlayerRecord",
    "SkillRecord",
    "QuestRecord",
    "QuestUpdate",
    "merge_update",
    "RecoveryProgress",
    "RecoveryStorage",
    "RecoveryTracker",
    "PlayerState",
    "SkillProgress",
    "SkillRoster",
    "CompletionSaga",
    "QuestBook",
    "QuestCompletion",
    "LogTimeResult",
    "TimeLogRecord",
    "log_time",
    "DailyResolutionResult",
    "DailyResolver",
    "summary_lines",
    "Journal",
    "JournalRecord",
]
