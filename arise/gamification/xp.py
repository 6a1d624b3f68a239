"""XP, leveling and health math for ARISE.

Everything here is pure: no database, no clock.

XP Awards
---------
- Quest (easy / medium / hard):   50 / 150 / 300 XP
- Logged time:                   100 XP per hour
- Streak multiplier:             7d 1.25x, 14d 1.5x, 30d 2.0x
- Debuff (Weakened):             0.5x, applied after the streak multiplier

Both multipliers floor separately::

    xp = floor(base * streak_multiplier)
    if debuffed:
        xp = floor(xp * 0.5)

Leveling Curve
--------------
Reaching level ``L`` needs ``50 * L**2`` total XP, so level 0 starts at
0 XP, level 1 at 50, level 2 at 200, level 3 at 450 ...

Health
------
Health runs 0-100.  A day with quests that were all completed earns +5; each
missed quest costs 5, but a day never costs more than 20.  Health at 0 puts
the player in the debuffed state.
"""

from __future__ import annotations

import math

# ── award constants (easy to adjust) ─────────────────────────────────────

QUEST_XP: dict[str, int] = {
    "easy": 50,
    "medium": 150,
    "hard": 300,
}

TIME_XP_RATE = 100          # XP per hour logged
DEBUFF_MULTIPLIER = 0.5

# Ordered descending so the first match wins.
STREAK_MULTIPLIERS: list[tuple[int, float]] = [
    (30, 2.0),
    (14, 1.5),
    (7, 1.25),
]

# ── health constants ─────────────────────────────────────────────────────

MAX_HEALTH = 100
STARTING_HEALTH = 100
PER_QUEST_PENALTY = -5
MAX_DAILY_PENALTY = -20     # keeps one bad day from becoming a despair spiral
DAILY_REWARD = 5
DEBUFF_THRESHOLD = 0

# ── leveling constants ───────────────────────────────────────────────────

XP_CURVE_FACTOR = 50
MIN_VISUAL_PROGRESS = 5.0   # endowed progress: the bar is never empty


# ── level math ───────────────────────────────────────────────────────────


def xp_required_for_level(level: int) -> int:
    """Total cumulative XP required to *reach* the given level."""
    return XP_CURVE_FACTOR * level * level


def calculate_level(total_xp: int) -> int:
    """Return the level for *total_xp* (level 0 at 0 XP)."""
    if total_xp <= 0:
        return 0
    return math.floor(math.sqrt(total_xp / XP_CURVE_FACTOR))


def level_progress(total_xp: int) -> float:
    """Percent (0-100) of the way from the current level to the next."""
    level = calculate_level(total_xp)
    floor = xp_required_for_level(level)
    ceiling = xp_required_for_level(level + 1)
    if ceiling == floor:
        return 0.0
    return (total_xp - floor) / (ceiling - floor) * 100


def visual_progress(total_xp: int) -> float:
    """:func:`level_progress`, but never below 5%."""
    return max(MIN_VISUAL_PROGRESS, level_progress(total_xp))


def xp_in_current_level(total_xp: int) -> tuple[int, int]:
    """Return ``(earned_in_level, needed_for_level)``."""
    level = calculate_level(total_xp)
    floor = xp_required_for_level(level)
    ceiling = xp_required_for_level(level + 1)
    return total_xp - floor, ceiling - floor


def xp_to_next_level(total_xp: int) -> int:
    """XP still needed to reach the next level."""
    return xp_required_for_level(calculate_level(total_xp) + 1) - total_xp


def overall_level(total_xp: int) -> int:
    """Player-facing overall level, which starts counting at 1."""
    return calculate_level(total_xp) + 1


# ── multipliers & awards ─────────────────────────────────────────────────


def get_streak_multiplier(streak_days: int) -> float:
    for threshold, multiplier in STREAK_MULTIPLIERS:
        if streak_days >= threshold:
            return multiplier
    return 1.0


def award_xp(base_xp: float, streak_days: int, is_debuffed: bool = False) -> int:
    """Apply the streak then the debuff multiplier, flooring after each."""
    xp = math.floor(base_xp * get_streak_multiplier(streak_days))
    if is_debuffed:
        xp = math.floor(xp * DEBUFF_MULTIPLIER)
    return xp


def calculate_quest_xp(
    difficulty: str, streak_days: int = 0, is_debuffed: bool = False,
) -> int:
    return award_xp(QUEST_XP[difficulty], streak_days, is_debuffed)


def calculate_time_xp(
    duration_seconds: int, streak_days: int = 0, is_debuffed: bool = False,
) -> int:
    """XP for *duration_seconds* of logged time with all multipliers."""
    hours = duration_seconds / 3600
    return award_xp(hours * TIME_XP_RATE, streak_days, is_debuffed)


# ── health ───────────────────────────────────────────────────────────────


def calculate_daily_health_change(quests_completed: int, quests_total: int) -> int:
    """Health delta for a finished day.

    - No quests that day: 0 (rest day)
    - All quests completed: +5
    - Otherwise: -5 per missed quest, never worse than -20
    """
    if quests_total == 0:
        return 0
    if quests_completed >= quests_total:
        return DAILY_REWARD
    missed = quests_total - quests_completed
    return max(missed * PER_QUEST_PENALTY, MAX_DAILY_PENALTY)


def apply_health_change(current_health: int, health_change: int) -> int:
    """Add *health_change* and clamp to 0-100."""
    return max(0, min(MAX_HEALTH, current_health + health_change))


def should_enter_debuff(health: int) -> bool:
    return health <= DEBUFF_THRESHOLD


# ── formatting ───────────────────────────────────────────────────────────


def format_time(seconds: int) -> str:
    """``HH:MM:SS`` for a duration in seconds."""
    hours, rest = divmod(max(0, int(seconds)), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_xp(xp: int) -> str:
    return f"{xp:,}"
