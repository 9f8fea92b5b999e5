"""Player progression applied by result sinks.

The engine never computes XP or streaks; it emits an AttemptResult and a
sink decides what the player earns. This module holds the progression rules
the game applies after a successful mission, so that sinks agree on
them.

Formulas:
- XP = floor((50 + 25 * score + time_bonus + perfection) * multiplier)
  where perfection = 50 for a perfect score and
  multiplier = min(1 + 0.1 * streak, 1.5)
- Level = xp // 200 + 1
- Carry-over: each banked life becomes 60 bonus seconds
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

from missionquest.models.attempt import AttemptResult
from missionquest.parameters import (
    LIFE_TO_BONUS_SECONDS,
    STREAK_MULTIPLIER_CAP,
    STREAK_MULTIPLIER_STEP,
    XP_BASE,
    XP_PER_CORRECT,
    XP_PER_LEVEL,
    XP_PERFECTION_BONUS,
)


def streak_multiplier(streak: int) -> float:
    """XP multiplier for a streak of consecutive successful missions."""
    return min(1.0 + STREAK_MULTIPLIER_STEP * max(0, streak), STREAK_MULTIPLIER_CAP)


def calculate_xp(score: int, total: int, time_bonus: int = 0, streak: int = 0) -> int:
    """XP for a mission with ``score`` correct answers out of ``total``.

    Examples:
        >>> calculate_xp(0, 7)
        50
        >>> calculate_xp(7, 7)
        275
        >>> calculate_xp(7, 7, streak=10)
        412
    """
    perfection = XP_PERFECTION_BONUS if score == total else 0
    raw = XP_BASE + score * XP_PER_CORRECT + time_bonus + perfection
    return math.floor(raw * streak_multiplier(streak))


def calculate_level(xp: int) -> int:
    """Level for a total XP amount (level 1 at 0 XP)."""
    return max(0, xp) // XP_PER_LEVEL + 1


def carry_over_lives(lives_banked: int, existing_bonus: int) -> tuple[int, int]:
    """Convert banked lives into bonus seconds between seasons.

    Returns:
        Tuple of (bonus_seconds_banked, lives_banked), lives always 0
    """
    return existing_bonus + max(0, lives_banked) * LIFE_TO_BONUS_SECONDS, 0


class PlayerProfile(BaseModel):
    """Progression record for one player.

    Attributes:
        player_id: Player identifier
        xp: Total XP
        level: Level derived from XP
        streak: Consecutive successful missions
        longest_streak: Best streak so far
        bonus_seconds_banked: Bonus seconds left at the end of the last mission
        lives_banked: Lives left at the end of the last mission
        completed_missions: Mission ids completed at least once
    """

    player_id: str = Field(min_length=1)
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    bonus_seconds_banked: int = Field(default=0, ge=0)
    lives_banked: int = Field(default=0, ge=0)
    completed_missions: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize profile to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> PlayerProfile:
        """Deserialize profile from dictionary."""
        return cls.model_validate(data)


def apply_result(profile: PlayerProfile, result: AttemptResult) -> PlayerProfile:
    """Return a new profile with a passed attempt applied.

    The streak always grows. XP is granted only the first time a mission is
    completed; replays still bank their remaining bonus seconds and lives.
    """
    streak = profile.streak + 1
    xp = profile.xp
    completed = list(profile.completed_missions)

    if result.mission_id not in completed:
        if result.reward is not None and result.reward.xp is not None:
            xp += result.reward.xp
        else:
            xp += calculate_xp(result.correct_count, result.total_questions, streak=profile.streak)
        completed.append(result.mission_id)

    return profile.model_copy(
        update={
            "xp": xp,
            "level": calculate_level(xp),
            "streak": streak,
            "longest_streak": max(profile.longest_streak, streak),
            "bonus_seconds_banked": result.bonus_seconds_remaining,
            "lives_banked": result.lives_remaining,
            "completed_missions": completed,
        }
    )


def begin_season(profile: PlayerProfile) -> PlayerProfile:
    """Return a new profile with banked lives converted for a new season.

    The converted seconds are what a host passes as
    ``MissionSession(initial_bonus_seconds=...)`` for the season's missions.
    """
    bonus, lives = carry_over_lives(profile.lives_banked, profile.bonus_seconds_banked)
    return profile.model_copy(update={"bonus_seconds_banked": bonus, "lives_banked": lives})
