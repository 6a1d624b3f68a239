"""Session timer for ARISE.

States
------
STOPPED   No session.
RUNNING   Counting up, one second per tick.
PAUSED    Frozen; the pause duration is being measured.

Transitions
-----------
STOPPED → RUNNING              (start)
RUNNING → PAUSED               (pause, or a detected system sleep)
PAUSED  → RUNNING              (resume)
RUNNING | PAUSED → STOPPED     (stop / reset)

Sleep detection
---------------
Each tick compares the wall clock with the previous tick.  A gap larger
than ``sleep_threshold_seconds`` means the machine was suspended, so the
tick does not count: the timer auto-pauses, and the pause is dated from the
last good tick.  Elapsed time therefore never includes sleep.

Recovery mode
-------------
While the player is debuffed, sessions count toward the recovery quest.
In that mode any single pause longer than ``max_pause_seconds`` marks the
session, and :meth:`SessionTimer.stop` reports it so the recovery
accumulator can reset.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..settings import Settings

logger = logging.getLogger(__name__)


# ── enums / results ───────────────────────────────────────────────────────


class TimerState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class TimerStopResult:
    skill_id: str
    elapsed_seconds: int
    total_pause_seconds: int
    pause_exceeded: bool


# ── engine ────────────────────────────────────────────────────────────────


class SessionTimer(QObject):
    """Count-up session timer with pause tracking and sleep detection.

    Signals
    -------
    ticked(elapsed_seconds: int)
        Emitted after every counted second.
    state_changed(new_state: TimerState)
        Emitted on every state transition.
    sleep_detected(gap_seconds: float)
        Emitted when a tick gap triggers the automatic pause.
    """

    ticked = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    sleep_detected = pyqtSignal(float)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(parent)
        settings = settings or Settings()

        # ── configuration ─────────────────────────────────────────────
        self._clock = clock
        self._sleep_threshold: float = settings.sleep_threshold_seconds
        self._max_pause_seconds: int = settings.recovery_max_pause_seconds
        self._recovery_mode: bool = False

        # ── session state ─────────────────────────────────────────────
        self._state: TimerState = TimerState.STOPPED
        self._skill_id: str | None = None
        self._elapsed: int = 0
        self._last_tick_at: float | None = None
        self._pause_started_at: float | None = None
        self._total_pause: float = 0.0
        self._pause_exceeded: bool = False

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(settings.tick_interval_ms)
        self._qt_timer.timeout.connect(self.tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def skill_id(self) -> str | None:
        return self._skill_id

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def total_pause_seconds(self) -> int:
        return int(self._total_pause)

    @property
    def pause_exceeded(self) -> bool:
        return self._pause_exceeded

    @property
    def is_running(self) -> bool:
        return self._state == TimerState.RUNNING

    @property
    def recovery_mode(self) -> bool:
        return self._recovery_mode

    @recovery_mode.setter
    def recovery_mode(self, value: bool) -> None:
        self._recovery_mode = value

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, skill_id: str) -> None:
        """Begin a session for *skill_id*.  Only valid from STOPPED."""
        if self._state != TimerState.STOPPED:
            return
        self._clear_session()
        self._skill_id = skill_id
        self._last_tick_at = self._clock()
        self._set_state(TimerState.RUNNING)
        self._qt_timer.start()

    def pause(self) -> None:
        if self._state != TimerState.RUNNING:
            return
        self._enter_pause(self._clock())

    def resume(self) -> None:
        if self._state != TimerState.PAUSED:
            return
        now = self._clock()
        self._close_pause(now)
        self._last_tick_at = now
        self._set_state(TimerState.RUNNING)
        self._qt_timer.start()

    def stop(self) -> TimerStopResult | None:
        """End the session and return its totals.  ``None`` when STOPPED.

        Stopping while paused closes out the open pause first.
        """
        if self._state == TimerState.STOPPED:
            return None
        self._qt_timer.stop()
        if self._state == TimerState.PAUSED:
            self._close_pause(self._clock())

        result = TimerStopResult(
            skill_id=self._skill_id or "",
            elapsed_seconds=self._elapsed,
            total_pause_seconds=int(self._total_pause),
            pause_exceeded=self._pause_exceeded,
        )
        self._clear_session()
        self._set_state(TimerState.STOPPED)
        logger.debug(
            "Session stopped: %ds elapsed, %ds paused",
            result.elapsed_seconds, result.total_pause_seconds,
        )
        return result

    def reset(self) -> None:
        """Discard the current session without reporting it."""
        self._qt_timer.stop()
        self._clear_session()
        if self._state != TimerState.STOPPED:
            self._set_state(TimerState.STOPPED)

    def tick(self) -> None:
        """Count one second, unless the gap since the last tick was a sleep."""
        if self._state != TimerState.RUNNING:
            return
        now = self._clock()
        last = self._last_tick_at if self._last_tick_at is not None else now
        gap = now - last
        if gap > self._sleep_threshold:
            logger.info("System sleep detected (%.1fs gap), pausing timer", gap)
            self._enter_pause(last)
            self.sleep_detected.emit(gap)
            return

        self._last_tick_at = now
        self._elapsed += 1
        self.ticked.emit(self._elapsed)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _enter_pause(self, started_at: float) -> None:
        self._qt_timer.stop()
        self._pause_started_at = started_at
        self._set_state(TimerState.PAUSED)

    def _close_pause(self, now: float) -> None:
        if self._pause_started_at is None:
            return
        duration = max(0.0, now - self._pause_started_at)
        self._total_pause += duration
        self._pause_started_at = None
        if self._recovery_mode and duration > self._max_pause_seconds:
            self._pause_exceeded = True

    def _clear_session(self) -> None:
        self._skill_id = None
        self._elapsed = 0
        self._last_tick_at = None
        self._pause_started_at = None
        self._total_pause = 0.0
        self._pause_exceeded = False

    def _set_state(self, new_state: TimerState) -> None:
        self._state = new_state
        self.state_changed.emit(new_state)
