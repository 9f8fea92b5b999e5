"""Exception types raised by the mission attempt engine.

Content and selection problems are surfaced to the host, which decides
whether to try another content source or abort. Rescue misuse and clock
double-arming are programming errors in the caller.
"""

from __future__ import annotations


class MissionQuestError(Exception):
    """Base class for all engine errors."""


class InsufficientQuestionsError(MissionQuestError, ValueError):
    """A category in the pool has fewer questions than the rules require.

    Attributes:
        category: Category that could not be filled (None for a flat draw)
        required: Number of questions the rules asked for
        available: Number of questions present in the pool
    """

    def __init__(self, category: str | None, required: int, available: int) -> None:
        self.category = category
        self.required = required
        self.available = available
        where = f"category '{category}'" if category is not None else "pool"
        super().__init__(
            f"Not enough questions in {where}: required {required}, available {available}"
        )


class ContentUnavailableError(MissionQuestError):
    """Mission content could not be obtained from a content source."""

    def __init__(self, mission_id: str, reason: str = "") -> None:
        self.mission_id = mission_id
        self.reason = reason
        message = f"Mission content unavailable: {mission_id}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ContentFormatError(ContentUnavailableError):
    """Mission content exists but does not match any known format."""


class InsufficientBonusError(MissionQuestError):
    """Bonus redemption requested out of turn or without enough banked seconds."""

    def __init__(self, message: str, bonus_seconds: int, cost: int, phase: object) -> None:
        self.bonus_seconds = bonus_seconds
        self.cost = cost
        self.phase = phase
        super().__init__(message)


class ClockStateError(MissionQuestError, RuntimeError):
    """A clock was armed while already armed."""


class ResultSinkError(MissionQuestError):
    """An attempt result could not be recorded."""
