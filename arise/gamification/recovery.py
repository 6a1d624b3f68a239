"""Recovery quest: the way out of the debuffed state.

While debuffed, every timer session adds its elapsed seconds to a recovery
accumulator.  Reaching the required total (8 hours by default) lifts the
debuff.  A session that contained a single pause longer than the allowed
maximum (5 minutes by default) wipes the accumulator instead, and the count
starts over from zero.  Manually logged time never counts.

The accumulator lives in a small JSON record next to the database::

    {"start_time": "2026-10-16 09:12:03", "accumulated_seconds": 5400}

A missing file means no recovery is in progress.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from ..dateutils import local_datetime_string
from ..settings import APP_SUPPORT_DIR, Settings

logger = logging.getLogger(__name__)

RECOVERY_PATH = APP_SUPPORT_DIR / "recovery.json"


@dataclass
class RecoveryState:
    start_time: str
    accumulated_seconds: int = 0


@dataclass(frozen=True)
class RecoveryProgress:
    accumulated_seconds: int
    is_complete: bool
    percent: float
    remaining_seconds: int
    is_active: bool


class RecoveryStorage:
    """JSON file holding the current :class:`RecoveryState`."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or RECOVERY_PATH

    def load(self) -> RecoveryState | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return RecoveryState(
                start_time=str(data["start_time"]),
                accumulated_seconds=int(data.get("accumulated_seconds", 0)),
            )
        except (OSError, ValueError, TypeError, KeyError) as exc:
            logger.warning("Ignoring unreadable recovery record %s: %s", self.path, exc)
            return None

    def save(self, state: RecoveryState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(state)) + "\n", encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class RecoveryTracker:
    """Accumulates recovery seconds against the configured threshold."""

    def __init__(
        self,
        storage: RecoveryStorage | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings()
        self._storage = storage or RecoveryStorage()
        self.required_seconds = settings.recovery_required_seconds
        self.max_pause_seconds = settings.recovery_max_pause_seconds

    @property
    def is_active(self) -> bool:
        return self._storage.load() is not None

    def start_if_inactive(self) -> bool:
        """Begin tracking unless a recovery is already running."""
        if self._storage.load() is not None:
            return False
        self._storage.save(RecoveryState(start_time=local_datetime_string()))
        logger.info("Recovery tracking started")
        return True

    def record_session(self, seconds: int, pause_exceeded: bool) -> RecoveryProgress:
        """Count one finished timer session toward recovery.

        A session with an over-long pause resets the accumulator to zero.
        Tracking starts implicitly if no record exists yet.
        """
        state = self._storage.load()
        if pause_exceeded:
            logger.info("Recovery reset: a pause exceeded %ds", self.max_pause_seconds)
            self._storage.clear()
            state = None
        if state is None:
            state = RecoveryState(start_time=local_datetime_string())

        if not pause_exceeded:
            state.accumulated_seconds += max(0, int(seconds))
        self._storage.save(state)
        return self._progress_for(state)

    def progress(self) -> RecoveryProgress:
        return self._progress_for(self._storage.load())

    def reset(self) -> None:
        """Drop the record entirely (used when recovery completes)."""
        self._storage.clear()

    def _progress_for(self, state: RecoveryState | None) -> RecoveryProgress:
        accumulated = state.accumulated_seconds if state else 0
        required = max(1, self.required_seconds)
        return RecoveryProgress(
            accumulated_seconds=accumulated,
            is_complete=accumulated >= required,
            percent=min(100.0, accumulated / required * 100),
            remaining_seconds=max(0, required - accumulated),
            is_active=state is not None,
        )
