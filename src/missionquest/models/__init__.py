"""Mission Quest data models.

This module exports the core data structures used by the engine.
"""

from .attempt import (
    TERMINAL_PHASES,
    AttemptPhase,
    AttemptResult,
    AttemptState,
)
from .question import (
    MAX_CHOICES,
    MIN_CHOICES,
    Criticality,
    Question,
)
from .rules import (
    MissionContent,
    MissionReward,
    MissionRules,
)

__all__ = [
    # Enums
    "AttemptPhase",
    "Criticality",
    # Content models
    "Question",
    "MissionRules",
    "MissionReward",
    "MissionContent",
    # Attempt models
    "AttemptState",
    "AttemptResult",
    # Constants
    "MIN_CHOICES",
    "MAX_CHOICES",
    "TERMINAL_PHASES",
]
