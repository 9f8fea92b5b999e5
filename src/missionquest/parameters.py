"""Tunable constants and rule presets for Mission Quest.

This module is the SINGLE SOURCE OF TRUTH for game constants. The three
mission variants (classic, free, season) differ only in the values collected
here; the engine has one code path for all of them.

Parameter Categories:
- Timing and lives: per-question clock and mistake budget
- Gate: pass threshold as a share of the questions asked
- Bonus economy: cost of buying back a life with banked seconds
- Progression: XP, level and carry-over constants used by result sinks
- Presets: complete MissionRules for each variant

Usage:
    from missionquest.parameters import get_preset

    rules = get_preset("season")
"""

from __future__ import annotations

import math

from missionquest.models.rules import MissionRules

# =============================================================================
# TIMING AND LIVES
# =============================================================================

DEFAULT_SECONDS_PER_QUESTION = 120
"""Clock duration for each question, in seconds.

Every mission variant uses a two-minute timer. Seconds left
on the clock at a correct answer are banked as bonus seconds.
"""

CLASSIC_LIVES = 5
"""Lives for the classic variant.

The classic variant counted errors but never ended an attempt on them. Five
lives for four questions reproduces that: the lives can never run out.
"""

FREE_LIVES = 2
"""Lives for the free variant.

Only the opening scene question is forgiving; the other two are critical, so
a second life is never actually spent.
"""

SEASON_LIVES = 3
"""Lives for season missions (``gameplay.rules.lives`` default)."""

STANDARD_LIVES = 2
"""Lives for the standard preset."""


# =============================================================================
# GATE
# =============================================================================

GATE_RATIO = 0.8
"""Share of questions that must be answered correctly to pass.

Threshold = ceil(total * GATE_RATIO):
    - 5 questions  -> 4
    - 7 questions  -> 6
    - 10 questions -> 8
"""


def gate_threshold_for(total: int) -> int:
    """Minimum correct answers needed to pass ``total`` questions."""
    return math.ceil(total * GATE_RATIO)


# =============================================================================
# BONUS ECONOMY
# =============================================================================

SEASON_BONUS_COST = 60
"""Banked seconds per life for season and free missions
(``bonus_seconds_exchange_rate``)."""

STANDARD_BONUS_COST = 120
"""Banked seconds per life for the standard preset: one full question's
worth of time."""


# =============================================================================
# PROGRESSION
# =============================================================================

XP_BASE = 50
"""XP granted for any completed attempt."""

XP_PER_CORRECT = 25
"""XP per correct answer."""

XP_PERFECTION_BONUS = 50
"""Extra XP when every question was answered correctly."""

STREAK_MULTIPLIER_STEP = 0.1
"""XP multiplier gained per consecutive successful mission."""

STREAK_MULTIPLIER_CAP = 1.5
"""Maximum streak multiplier (reached at a streak of 5)."""

FREE_MISSION_XP = 150
"""Fixed XP for a free mission, whatever the score."""

XP_PER_LEVEL = 200
"""XP needed per level. Level = xp // XP_PER_LEVEL + 1."""

LIFE_TO_BONUS_SECONDS = 60
"""Bonus seconds granted per banked life when lives carry over between seasons."""


# =============================================================================
# PRESETS
# =============================================================================

FREE_CATEGORIES = ("A", "B", "C")
"""Free mission categories: A = scene choice, B = logic puzzle, C = strategic
final question. B and C are critical."""

PRESETS: dict[str, dict] = {
    "classic": {
        "question_count": 4,
        "min_correct_to_pass": 0,
        "starting_lives": CLASSIC_LIVES,
        "seconds_per_question": DEFAULT_SECONDS_PER_QUESTION,
        "bonus_redemption_cost": STANDARD_BONUS_COST,
    },
    "free": {
        "question_count": 3,
        "min_correct_to_pass": 2,
        "starting_lives": FREE_LIVES,
        "seconds_per_question": DEFAULT_SECONDS_PER_QUESTION,
        "bonus_redemption_cost": SEASON_BONUS_COST,
        "distribution": {category: 1 for category in FREE_CATEGORIES},
        "shuffle_working_set": False,
        "shuffle_choices": True,
    },
    "season": {
        "question_count": 7,
        "min_correct_to_pass": gate_threshold_for(7),
        "starting_lives": SEASON_LIVES,
        "seconds_per_question": DEFAULT_SECONDS_PER_QUESTION,
        "bonus_redemption_cost": SEASON_BONUS_COST,
        "shuffle_working_set": False,
    },
    "standard": {
        "question_count": 6,
        "min_correct_to_pass": 5,
        "starting_lives": STANDARD_LIVES,
        "seconds_per_question": DEFAULT_SECONDS_PER_QUESTION,
        "bonus_redemption_cost": STANDARD_BONUS_COST,
    },
}


def get_preset(name: str, **overrides) -> MissionRules:
    """Build MissionRules from a named preset.

    Args:
        name: One of "classic", "free", "season", "standard" (case-insensitive)
        **overrides: Field values replacing the preset's values

    Returns:
        Validated MissionRules

    Raises:
        ValueError: If the preset name is unknown
    """
    key = name.lower()
    if key not in PRESETS:
        raise ValueError(f"Unknown rules preset '{name}'. Valid presets: {sorted(PRESETS)}")
    return MissionRules(**{**PRESETS[key], **overrides})
