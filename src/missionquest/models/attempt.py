"""Attempt state and result models.

AttemptState is the single mutable record for one run of the engine. Only
MissionSession writes to it; the economy helpers in
``missionquest.engine.economy`` are called by the session and operate on its
fields rather than owning state of their own.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from missionquest.models.question import Question
from missionquest.models.rules import MissionReward


class AttemptPhase(Enum):
    """Phase of a mission attempt."""

    INTRO = "intro"
    IN_PROGRESS = "in_progress"
    NARRATIVE_INTERSTITIAL = "narrative_interstitial"
    GATE_CHECK = "gate_check"
    RESCUE_OFFERED = "rescue_offered"
    PASSED = "passed"
    FAILED = "failed"
    ABANDONED = "abandoned"


TERMINAL_PHASES = frozenset({AttemptPhase.PASSED, AttemptPhase.FAILED, AttemptPhase.ABANDONED})


class AttemptState(BaseModel):
    """Complete state of one attempt.

    Attributes:
        attempt_id: Unique id for this attempt (new on every retry)
        working_set: Questions drawn for this attempt, fixed once drawn
        current_index: Index of the active question in working_set
        correct_count: Correct answers so far
        lives_remaining: Mistakes left before the attempt is lost
        bonus_seconds: Unused seconds banked from correct answers
        phase: Current phase
        pending_narrative: Narrative waiting to be shown before advancing
        time_remaining: Seconds left on the active question's clock
        answer_revealed: True between an answer/timeout and the next advance
        unlocked_narrative_ids: Ids of questions whose narrative was unlocked
        gate_evaluations: How many times the gate ran (0 or 1)
        started_at: When start() was called
        ended_at: When a terminal phase was reached
    """

    attempt_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    working_set: tuple[Question, ...] = Field(default=())
    current_index: int = Field(default=0, ge=0)
    correct_count: int = Field(default=0, ge=0)
    lives_remaining: int = Field(default=1, ge=0)
    bonus_seconds: int = Field(default=0, ge=0)
    phase: AttemptPhase = Field(default=AttemptPhase.INTRO)
    pending_narrative: str | None = Field(default=None)
    time_remaining: int = Field(default=0, ge=0)
    answer_revealed: bool = Field(default=False)
    unlocked_narrative_ids: set[str] = Field(default_factory=set)
    gate_evaluations: int = Field(default=0, ge=0)
    started_at: datetime | None = Field(default=None)
    ended_at: datetime | None = Field(default=None)

    @property
    def current_question(self) -> Question | None:
        """The active question, or None once the bank is exhausted."""
        if 0 <= self.current_index < len(self.working_set):
            return self.working_set[self.current_index]
        return None

    @property
    def total_questions(self) -> int:
        """Size of the working set."""
        return len(self.working_set)

    @property
    def is_last_question(self) -> bool:
        """True when the active question is the last one in the working set."""
        return self.current_index + 1 >= len(self.working_set)

    @property
    def is_terminal(self) -> bool:
        """True once the attempt has passed, failed or been abandoned."""
        return self.phase in TERMINAL_PHASES

    def to_dict(self) -> dict:
        """Serialize state to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


class AttemptResult(BaseModel):
    """Summary of a passed attempt, handed to the result sink exactly once.

    Attributes:
        correct_count: Correct answers in the attempt
        total_questions: Size of the working set
        lives_remaining: Lives left at the end
        bonus_seconds_remaining: Banked seconds left at the end
        unlocked_narrative_ids: Questions whose narrative was unlocked
        mission_id: Mission the attempt belongs to
        attempt_id: Attempt identifier
        player_id: Player who made the attempt, if known
        elapsed_seconds: Wall time from start() to the gate
        reward: Reward declared by the mission content
    """

    model_config = ConfigDict(frozen=True)

    correct_count: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    lives_remaining: int = Field(ge=0)
    bonus_seconds_remaining: int = Field(ge=0)
    unlocked_narrative_ids: frozenset[str] = Field(default_factory=frozenset)
    mission_id: str = Field(default="")
    attempt_id: str = Field(default="")
    player_id: str | None = Field(default=None)
    elapsed_seconds: int = Field(default=0, ge=0)
    reward: MissionReward | None = Field(default=None)

    @property
    def is_perfect(self) -> bool:
        """True if every question in the working set was answered correctly."""
        return self.total_questions > 0 and self.correct_count == self.total_questions

    def to_dict(self) -> dict:
        """Serialize result to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")
