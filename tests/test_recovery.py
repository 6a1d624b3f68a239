"""Tests for the recovery quest.

Covers: the JSON record, accumulation toward the threshold, the pause
reset, and the full debuff-to-healthy flow through AriseCore.
"""

import pytest

from arise.gamification.recovery import RecoveryState
from arise.timer.engine import TimerStopResult

from helpers import SignalCollector, get_player, run_ticks, set_player


def _session(seconds, pause_exceeded=False):
    return TimerStopResult(
        skill_id="physical-conditioning",
        elapsed_seconds=seconds,
        total_pause_seconds=0,
        pause_exceeded=pause_exceeded,
    )


# ═══════════════════════════════════════════════════════════════════════════
#  STORAGE
# ═══════════════════════════════════════════════════════════════════════════


class TestStorage:

    def test_missing_file_means_inactive(self, recovery_storage):
        assert recovery_storage.load() is None

    def test_save_and_load(self, recovery_storage):
        recovery_storage.save(RecoveryState("2026-03-04 09:00:00", 120))
        assert recovery_storage.load() == RecoveryState("2026-03-04 09:00:00", 120)

    def test_clear(self, recovery_storage):
        recovery_storage.save(RecoveryState("2026-03-04 09:00:00", 120))
        recovery_storage.clear()
        assert recovery_storage.load() is None

    def test_clear_without_file(self, recovery_storage):
        recovery_storage.clear()

    def test_corrupt_file_reads_as_inactive(self, recovery_storage):
        recovery_storage.path.write_text("{oops")
        assert recovery_storage.load() is None


# ═══════════════════════════════════════════════════════════════════════════
#  TRACKER
# ═══════════════════════════════════════════════════════════════════════════


class TestTracker:

    def test_inactive_progress(self, tracker):
        progress = tracker.progress()
        assert progress.is_active is False
        assert progress.accumulated_seconds == 0
        assert progress.remaining_seconds == 28800

    def test_start_only_once(self, tracker):
        assert tracker.start_if_inactive() is True
        tracker.record_session(600, False)
        assert tracker.start_if_inactive() is False
        assert tracker.progress().accumulated_seconds == 600

    def test_sessions_accumulate(self, tracker):
        tracker.start_if_inactive()
        tracker.record_session(3600, False)
        progress = tracker.record_session(1800, False)
        assert progress.accumulated_seconds == 5400
        assert progress.is_complete is False
        assert progress.percent == pytest.approx(18.75)

    def test_completes_at_threshold(self, tracker):
        tracker.start_if_inactive()
        for _ in range(3):
            tracker.record_session(7200, False)
        progress = tracker.record_session(7200, False)
        assert progress.is_complete is True
        assert progress.percent == 100.0
        assert progress.remaining_seconds == 0

    def test_pause_overrun_resets_to_zero(self, tracker):
        tracker.start_if_inactive()
        tracker.record_session(20000, False)
        progress = tracker.record_session(9000, True)
        assert progress.accumulated_seconds == 0
        assert progress.is_complete is False
        assert progress.is_active is True

    def test_session_without_start_begins_tracking(self, tracker):
        progress = tracker.record_session(100, False)
        assert progress.is_active is True
        assert progress.accumulated_seconds == 100

    def test_reset_clears(self, tracker):
        tracker.start_if_inactive()
        tracker.reset()
        assert tracker.is_active is False


# ═══════════════════════════════════════════════════════════════════════════
#  CORE FLOW
# ═══════════════════════════════════════════════════════════════════════════


class TestRecoveryFlow:

    @pytest.mark.asyncio
    async def test_eight_hours_of_sessions_lift_debuff(self, core):
        set_player(is_debuffed=True, health=0)
        await core.startup()
        core.recovery.start_if_inactive()
        completed = SignalCollector()
        core.recovery_completed.connect(completed)

        for _ in range(4):
            outcome = await core.finish_timer_session(_session(7200))

        assert outcome.recovery.is_complete is True
        assert len(completed) == 1
        assert core.player.is_debuffed is False
        assert core.player.health == 50
        assert core.recovery.is_active is False

        player = get_player()
        assert player.is_debuffed is False
        assert player.health == 50

    @pytest.mark.asyncio
    async def test_pause_overrun_resets_without_completing(self, core):
        set_player(is_debuffed=True, health=0)
        await core.startup()
        resets = SignalCollector()
        core.recovery_reset.connect(resets)

        await core.finish_timer_session(_session(25000))
        outcome = await core.finish_timer_session(_session(7200, pause_exceeded=True))

        assert outcome.recovery.accumulated_seconds == 0
        assert outcome.recovery.is_complete is False
        assert len(resets) == 1
        assert get_player().is_debuffed is True

    @pytest.mark.asyncio
    async def test_timer_with_301_second_pause_resets(self, core, clock):
        set_player(is_debuffed=True, health=0)
        await core.startup()
        core.recovery.record_session(3000, False)

        core.start_timer("physical-conditioning")
        assert core.timer.recovery_mode is True
        run_ticks(core.timer, clock, 60)
        core.pause_timer()
        clock.advance(301)
        core.resume_timer()
        run_ticks(core.timer, clock, 60)
        outcome = await core.stop_timer()

        assert outcome.stop.pause_exceeded is True
        assert outcome.stop.elapsed_seconds == 120
        assert outcome.recovery.accumulated_seconds == 0

    @pytest.mark.asyncio
    async def test_timer_sessions_count_while_debuffed(self, core, clock):
        set_player(is_debuffed=True, health=0)
        await core.startup()

        core.start_timer("physical-conditioning")
        run_ticks(core.timer, clock, 90)
        outcome = await core.stop_timer()

        assert outcome.recovery.accumulated_seconds == 90
        # debuffed XP: floor(floor(90/3600*100) * 0.5) = floor(2 * 0.5) = 1
        assert outcome.log.xp_earned == 1

    @pytest.mark.asyncio
    async def test_manual_time_never_counts(self, core):
        set_player(is_debuffed=True, health=0)
        await core.startup()
        core.recovery.start_if_inactive()

        await core.log_time("physical-conditioning", 28800, "manual")

        assert core.recovery.progress().accumulated_seconds == 0
        assert core.player.is_debuffed is True

    @pytest.mark.asyncio
    async def test_sessions_ignored_when_healthy(self, core):
        await core.startup()
        outcome = await core.finish_timer_session(_session(3600))
        assert outcome.recovery is None
        assert core.recovery.is_active is False
