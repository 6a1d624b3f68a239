"""ARISE core facade.

``AriseCore`` wires the services together and is the only object a UI
needs.  It owns the event-loop side of things (quest completion, time
logging, daily resolution) and the Qt side (the session timer and the
signals the UI listens to).

    core = AriseCore()
    await core.startup()
    completion = await core.complete_quest(quest_id)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from .database import Store
from .errors import SkillNotFound
from .gamification.daily import DailyResolutionResult, DailyResolver
from .gamification.journal import Journal
from .gamification.player import PlayerState
from .gamification.quests import QuestBook, QuestCompletion
from .gamification.recovery import RecoveryProgress, RecoveryStorage, RecoveryTracker
from .gamification.skills import SkillProgress, SkillRoster
from .gamification.timelog import LogTimeResult, log_time
from .gamification.xp import overall_level
from .settings import Settings, load_settings
from .timer.engine import SessionTimer, TimerStopResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerSessionOutcome:
    stop: TimerStopResult
    log: LogTimeResult | None
    recovery: RecoveryProgress | None


class AriseCore(QObject):
    """Facade over the player, skills, quests, recovery and timer.

    Signals
    -------
    quest_completed(completion: QuestCompletion)
        Emitted after a quest completion is persisted.
    xp_awarded(data: dict)
        Emitted after every XP award.  Keys: ``amount``, ``source``,
        ``skill_id``, ``skill_total_xp``, ``level``.
    level_up(data: dict)
        Emitted when a skill reaches a new level.  Keys: ``skill_id``,
        ``skill_name``, ``old_level``, ``new_level``.
    recovery_completed()
        Emitted when the recovery quest lifts the debuff.
    recovery_reset()
        Emitted when an over-long pause wipes recovery progress.
    day_resolved(result: DailyResolutionResult)
        Emitted when a new day was processed.
    """

    quest_completed = pyqtSignal(object)
    xp_awarded = pyqtSignal(object)
    level_up = pyqtSignal(object)
    recovery_completed = pyqtSignal()
    recovery_reset = pyqtSignal()
    day_resolved = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        store: Store | None = None,
        recovery_storage: RecoveryStorage | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(parent)
        self.settings = settings or load_settings()

        self.store = store or Store()
        self.player = PlayerState(self.store)
        self.skills = SkillRoster(self.store)
        self.quests = QuestBook(self.store, self.player, self.skills)
        self.recovery = RecoveryTracker(recovery_storage, self.settings)
        self.daily = DailyResolver(self.store, self.recovery)
        self.journal = Journal(self.store)
        self.timer = SessionTimer(self, settings=self.settings, clock=clock)

    # ══════════════════════════════════════════════════════════════════
    #  LIFECYCLE
    # ══════════════════════════════════════════════════════════════════

    async def startup(self, today: date | None = None) -> DailyResolutionResult:
        """Resolve the day boundary, then load everything."""
        result = await self.check_and_process_new_day(today)
        if not result.is_new_day:
            await self.refresh()
        return result

    async def refresh(self) -> None:
        await self.player.fetch()
        await self.skills.fetch()
        await self.quests.fetch()

    async def check_and_process_new_day(
        self, today: date | None = None,
    ) -> DailyResolutionResult:
        result = await self.daily.check_and_process_new_day(today)
        if result.is_new_day:
            await self.refresh()
            self.day_resolved.emit(result)
        return result

    # ══════════════════════════════════════════════════════════════════
    #  PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def overall_xp(self) -> int:
        return self.skills.overall_xp

    @property
    def overall_level(self) -> int:
        return overall_level(self.overall_xp)

    # ══════════════════════════════════════════════════════════════════
    #  XP FLOWS
    # ══════════════════════════════════════════════════════════════════

    async def complete_quest(self, quest_id: str) -> QuestCompletion:
        completion = await self.quests.complete_quest(quest_id)
        self.quest_completed.emit(completion)
        skill = self.skills.get(completion.skill_id)
        self._announce(
            amount=completion.xp_awarded,
            source="quest",
            skill_total_xp=skill.total_xp if skill else 0,
            progress=SkillProgress(
                skill_id=completion.skill_id,
                skill_name=completion.skill_name,
                old_level=completion.old_level,
                new_level=completion.new_level,
            ),
        )
        return completion

    async def log_time(
        self, skill_id: str, seconds: int, source: str = "manual",
    ) -> LogTimeResult:
        """Credit *seconds* to a skill.  Manual entries never count toward recovery."""
        result = await log_time(
            self.store,
            skill_id,
            seconds,
            source,
            self.player.current_streak,
            self.player.is_debuffed,
        )
        progress = self.skills.apply_totals(
            skill_id, result.skill_total_xp, result.skill_total_seconds,
        )
        self.player.add_today(result.xp_earned, seconds)
        self._announce(
            amount=result.xp_earned,
            source=source,
            skill_total_xp=result.skill_total_xp,
            progress=progress,
        )
        return result

    def _announce(
        self,
        *,
        amount: int,
        source: str,
        skill_total_xp: int,
        progress: SkillProgress | None,
    ) -> None:
        if progress is None:
            return
        self.xp_awarded.emit({
            "amount": amount,
            "source": source,
            "skill_id": progress.skill_id,
            "skill_total_xp": skill_total_xp,
            "level": progress.new_level,
        })
        if progress.leveled_up:
            logger.info(
                "%s reached level %d", progress.skill_name, progress.new_level,
            )
            self.level_up.emit({
                "skill_id": progress.skill_id,
                "skill_name": progress.skill_name,
                "old_level": progress.old_level,
                "new_level": progress.new_level,
            })

    # ══════════════════════════════════════════════════════════════════
    #  TIMER
    # ══════════════════════════════════════════════════════════════════

    def start_timer(self, skill_id: str) -> None:
        if self.skills.get(skill_id) is None:
            raise SkillNotFound(skill_id)
        self.timer.recovery_mode = self.player.is_debuffed
        self.timer.start(skill_id)

    def pause_timer(self) -> None:
        self.timer.pause()

    def resume_timer(self) -> None:
        self.timer.resume()

    async def stop_timer(self) -> TimerSessionOutcome | None:
        """Stop the timer, log the session and count it toward recovery."""
        result = self.timer.stop()
        if result is None:
            return None
        return await self.finish_timer_session(result)

    async def finish_timer_session(self, result: TimerStopResult) -> TimerSessionOutcome:
        logged = None
        if result.elapsed_seconds > 0:
            logged = await self.log_time(result.skill_id, result.elapsed_seconds, "timer")

        recovery = None
        if self.player.is_debuffed:
            recovery = await self._advance_recovery(result)
        return TimerSessionOutcome(stop=result, log=logged, recovery=recovery)

    async def _advance_recovery(self, result: TimerStopResult) -> RecoveryProgress:
        progress = self.recovery.record_session(
            result.elapsed_seconds, result.pause_exceeded,
        )
        if result.pause_exceeded:
            self.recovery_reset.emit()
        if progress.is_complete:
            await self.player.finish_recovery(self.settings.recovery_health)
            self.recovery.reset()
            self.recovery_completed.emit()
        return progress
