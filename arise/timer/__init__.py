"""Timer package."""

from .engine import SessionTimer, TimerState, TimerStopResult

__all__ = [
    "SessionTimer",
    "TimerState",
    "TimerStopResult",
]
