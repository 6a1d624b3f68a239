"""Tests for the ARISE XP, leveling and health math.

Covers: leveling curve, level progress and the endowed-progress floor,
streak multipliers, the double-floor award formula, time XP, health
deltas, debuff entry, and display formatting.
"""

import math

import pytest

from arise.gamification.xp import (
    QUEST_XP,
    apply_health_change,
    award_xp,
    calculate_daily_health_change,
    calculate_level,
    calculate_quest_xp,
    calculate_time_xp,
    format_time,
    format_xp,
    get_streak_multiplier,
    level_progress,
    overall_level,
    should_enter_debuff,
    visual_progress,
    xp_in_current_level,
    xp_required_for_level,
    xp_to_next_level,
)


# ═══════════════════════════════════════════════════════════════════════════
#  LEVELING CURVE
# ═══════════════════════════════════════════════════════════════════════════


class TestLevelingCurve:

    def test_level_zero_at_zero_xp(self):
        assert calculate_level(0) == 0

    def test_negative_xp_is_level_zero(self):
        assert calculate_level(-10) == 0

    def test_thresholds(self):
        assert xp_required_for_level(1) == 50
        assert xp_required_for_level(2) == 200
        assert xp_required_for_level(3) == 450

    def test_level_matches_floor_sqrt(self):
        for xp in range(0, 20_000, 37):
            assert calculate_level(xp) == math.floor(math.sqrt(xp / 50))

    def test_threshold_round_trip(self):
        for level in range(0, 300):
            assert calculate_level(xp_required_for_level(level)) == level

    def test_one_below_threshold_is_previous_level(self):
        for level in range(1, 100):
            assert calculate_level(xp_required_for_level(level) - 1) == level - 1

    def test_xp_in_current_level(self):
        # level 2 spans 200..450
        assert xp_in_current_level(250) == (50, 250)

    def test_xp_to_next_level(self):
        assert xp_to_next_level(0) == 50
        assert xp_to_next_level(200) == 250

    def test_overall_level_starts_at_one(self):
        assert overall_level(0) == 1
        assert overall_level(200) == 3


# ═══════════════════════════════════════════════════════════════════════════
#  PROGRESS
# ═══════════════════════════════════════════════════════════════════════════


class TestProgress:

    def test_level_progress_halfway(self):
        # level 1 spans 50..200
        assert level_progress(125) == pytest.approx(50.0)

    def test_level_progress_at_threshold_is_zero(self):
        assert level_progress(200) == 0.0

    def test_visual_progress_never_below_five(self):
        for xp in range(0, 5_000, 7):
            assert visual_progress(xp) >= 5

    def test_visual_progress_equals_real_progress_above_floor(self):
        for xp in range(0, 5_000, 7):
            if level_progress(xp) >= 5:
                assert visual_progress(xp) == level_progress(xp)

    def test_visual_progress_floor_applies_at_zero(self):
        assert visual_progress(0) == 5.0


# ═══════════════════════════════════════════════════════════════════════════
#  MULTIPLIERS & AWARDS
# ═══════════════════════════════════════════════════════════════════════════


class TestStreakMultiplier:

    @pytest.mark.parametrize("days, expected", [
        (0, 1.0),
        (6, 1.0),
        (7, 1.25),
        (13, 1.25),
        (14, 1.5),
        (29, 1.5),
        (30, 2.0),
        (365, 2.0),
    ])
    def test_breakpoints(self, days, expected):
        assert get_streak_multiplier(days) == expected

    def test_monotonic(self):
        previous = 0.0
        for days in range(0, 60):
            current = get_streak_multiplier(days)
            assert current >= previous
            previous = current


class TestAwards:

    def test_quest_xp_table(self):
        assert QUEST_XP == {"easy": 50, "medium": 150, "hard": 300}

    def test_medium_quest_with_streak(self):
        """floor(150 * 1.25) = 187."""
        assert calculate_quest_xp("medium", 10, False) == 187

    def test_medium_quest_with_streak_and_debuff(self):
        """floor(187 * 0.5) = 93."""
        assert calculate_quest_xp("medium", 10, True) == 93

    def test_floors_are_sequential(self):
        # floor(floor(75 * 1.25) * 0.5) = floor(93 * 0.5) = 46
        assert award_xp(75, 7, True) == 46

    def test_no_bonus_without_streak(self):
        assert award_xp(300, 0) == 300

    def test_time_xp_one_hour(self):
        assert calculate_time_xp(3600) == 100

    def test_time_xp_floors(self):
        # 25 minutes = 41.66… XP
        assert calculate_time_xp(25 * 60) == 41

    def test_time_xp_streak_and_debuff(self):
        assert calculate_time_xp(1800, 7, False) == 62
        assert calculate_time_xp(1800, 7, True) == 31

    def test_zero_seconds_is_zero_xp(self):
        assert calculate_time_xp(0, 30, False) == 0


# ═══════════════════════════════════════════════════════════════════════════
#  HEALTH
# ═══════════════════════════════════════════════════════════════════════════


class TestHealth:

    def test_rest_day_no_change(self):
        assert calculate_daily_health_change(0, 0) == 0

    def test_all_done_rewards(self):
        assert calculate_daily_health_change(3, 3) == 5

    def test_per_missed_quest_penalty(self):
        assert calculate_daily_health_change(1, 3) == -10

    def test_penalty_capped(self):
        """Five misses would be -25; the cap holds it at -20."""
        assert calculate_daily_health_change(0, 5) == -20

    def test_apply_clamps_high(self):
        assert apply_health_change(98, 5) == 100

    def test_apply_clamps_low(self):
        assert apply_health_change(10, -20) == 0

    def test_debuff_threshold(self):
        assert should_enter_debuff(0) is True
        assert should_enter_debuff(1) is False


# ═══════════════════════════════════════════════════════════════════════════
#  FORMATTING
# ═══════════════════════════════════════════════════════════════════════════


class TestFormatting:

    def test_format_time(self):
        assert format_time(3725) == "01:02:05"
        assert format_time(0) == "00:00:00"

    def test_format_xp(self):
        assert format_xp(12345) == "12,345"
