"""Pass/fail gate evaluated once per attempt."""

from __future__ import annotations

from enum import Enum

from missionquest.models.rules import MissionRules


class GateOutcome(Enum):
    """Result of the gate check."""

    PASS = "pass"
    FAIL = "fail"


def evaluate(correct_count: int, rules: MissionRules) -> GateOutcome:
    """Compare the correct-answer count with the rules' threshold.

    Remaining lives play no part: a player with lives left but too few
    correct answers fails, and one who scraped through on a rescue passes.
    """
    if correct_count >= rules.min_correct_to_pass:
        return GateOutcome.PASS
    return GateOutcome.FAIL


def threshold_reached(correct_count: int, rules: MissionRules) -> bool:
    """True once enough correct answers are banked to pass."""
    return evaluate(correct_count, rules) == GateOutcome.PASS
