"""Exception hierarchy for the ARISE core.

Guard failures (``NotFound``, ``AlreadyCompleted``, ``AlreadyInProgress``,
``Immutable``) are raised before any state is touched.  ``PersistenceFailure``
wraps anything the database rejected; callers that applied optimistic state
roll it back before re-raising.
"""

from __future__ import annotations

from typing import Any


class AriseError(Exception):
    """Base class.  Carries a message and structured ``details``."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"{self.message}{details_str}"


class NotFound(AriseError):
    """An entity id did not resolve."""


class QuestNotFound(NotFound):
    def __init__(self, quest_id: str) -> None:
        super().__init__("Quest not found", {"quest_id": quest_id})


class AlreadyCompleted(AriseError):
    """The quest is already in its terminal state."""

    def __init__(self, quest_id: str) -> None:
        super().__init__("Quest already completed", {"quest_id": quest_id})


class AlreadyInProgress(AriseError):
    """Another completion holds the lock for this quest."""

    def __init__(self, quest_id: str) -> None:
        super().__init__(
            "Quest completion already in progress", {"quest_id": quest_id},
        )


class Immutable(AriseError):
    """Completed quests cannot be edited or deleted."""

    def __init__(self, quest_id: str, action: str) -> None:
        super().__init__(
            f"Cannot {action} a completed quest",
            {"quest_id": quest_id, "action": action},
        )


class ConsistencyError(AriseError):
    """Stored data contradicts itself (e.g. a quest pointing at no skill)."""


class SkillNotFound(ConsistencyError):
    def __init__(self, skill_id: str) -> None:
        super().__init__("Skill not found", {"skill_id": skill_id})


class InvalidRecurrence(AriseError):
    """A recurrence pattern that cannot be stored."""


class PersistenceFailure(AriseError):
    """The durable store rejected or failed a read/write."""
