"""ARISE: skill XP, quests, streaks and recovery."""

__version__ = "0.1.0"
