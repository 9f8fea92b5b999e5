"""Question model for mission attempts.

A question is one multiple-choice prompt. The correct entry is tracked by
its position in ``choices``, never by its text, so two choices with the same
wording can never make the correct answer ambiguous after a shuffle.
"""

from __future__ import annotations

import random
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

MIN_CHOICES = 2
MAX_CHOICES = 6


class Criticality(Enum):
    """How a wrong answer on this question is treated."""

    NORMAL = "normal"
    CRITICAL = "critical"  # Any miss fails the attempt, lives are ignored


class Question(BaseModel):
    """A single timed multiple-choice prompt.

    Attributes:
        id: Stable identifier, unique within a mission's pool
        category: Draw category used by the selector's distribution
        criticality: NORMAL or CRITICAL
        prompt: Question text shown to the player
        choices: Ordered answer texts (2-6 entries)
        correct_index: Index of the correct entry in ``choices``
        narrative_unlock: Story text revealed once after a correct answer
        explanation: Feedback text shown after the answer is revealed
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    category: str = Field(default="normal")
    criticality: Criticality = Field(default=Criticality.NORMAL)
    prompt: str
    choices: list[str] = Field(min_length=MIN_CHOICES, max_length=MAX_CHOICES)
    correct_index: int = Field(ge=0)
    narrative_unlock: str | None = Field(default=None)
    explanation: str | None = Field(default=None)

    @model_validator(mode="after")
    def validate_correct_index(self) -> "Question":
        """The correct index must point at one of the choices."""
        if self.correct_index >= len(self.choices):
            raise ValueError(
                f"Question {self.id}: correct_index {self.correct_index} is out of range "
                f"for {len(self.choices)} choices"
            )
        return self

    @property
    def is_critical(self) -> bool:
        """True if a miss on this question fails the attempt outright."""
        return self.criticality == Criticality.CRITICAL

    @property
    def correct_choice(self) -> str:
        """Text of the correct choice."""
        return self.choices[self.correct_index]

    def is_correct(self, choice_index: int) -> bool:
        """Check whether ``choice_index`` selects the correct entry."""
        return choice_index == self.correct_index

    def shuffled(self, rng: random.Random) -> Question:
        """Return a copy with the choices permuted.

        The permutation is applied to positions, and ``correct_index`` follows
        the entry that was correct before the shuffle.
        """
        order = list(range(len(self.choices)))
        rng.shuffle(order)
        return self.model_copy(
            update={
                "choices": [self.choices[i] for i in order],
                "correct_index": order.index(self.correct_index),
            }
        )
