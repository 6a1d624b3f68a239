"""Database package."""

from .db import configure_engine, get_session, init_db, INITIAL_SKILLS
from .models import Player, Skill, Quest, TimeLog, DailySnapshot, JournalEntry
from .store import Store

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "INITIAL_SKILLS",
    "Player",
    "Skill",
    "Quest",
    "TimeLog",
    "DailySnapshot",
    "JournalEntry",
    "Store",
]
