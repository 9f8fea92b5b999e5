"""Mission rules and content models.

MissionRules is the only configuration the engine reads. The classic, free
and season variants are presets built from ``missionquest.parameters``, and
every variant runs through the same engine.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from missionquest.models.question import Question


class MissionRules(BaseModel):
    """Rules for one mission attempt.

    Attributes:
        question_count: Size of the working set drawn for one attempt
        min_correct_to_pass: Gate threshold checked once the bank is exhausted
        starting_lives: Mistakes allowed before the attempt is lost
        seconds_per_question: Clock duration for each question
        bonus_redemption_cost: Banked seconds needed to buy back one life
        distribution: Questions to draw per category (None = flat draw)
        early_exit_on_threshold: Run the gate as soon as the threshold is met
        shuffle_working_set: Shuffle the drawn questions (False keeps the
            distribution's category order)
        shuffle_choices: Shuffle each drawn question's choices once at draw time
    """

    model_config = ConfigDict(frozen=True)

    question_count: int = Field(ge=1)
    min_correct_to_pass: int = Field(ge=0)
    starting_lives: int = Field(ge=1)
    seconds_per_question: int = Field(gt=0)
    bonus_redemption_cost: int = Field(ge=0)
    distribution: dict[str, int] | None = Field(default=None)
    early_exit_on_threshold: bool = Field(default=False)
    shuffle_working_set: bool = Field(default=True)
    shuffle_choices: bool = Field(default=False)

    @model_validator(mode="after")
    def validate_threshold(self) -> "MissionRules":
        """The gate threshold cannot exceed the number of questions asked."""
        if self.min_correct_to_pass > self.question_count:
            raise ValueError(
                f"min_correct_to_pass ({self.min_correct_to_pass}) must be <= "
                f"question_count ({self.question_count})"
            )
        return self

    @model_validator(mode="after")
    def validate_distribution(self) -> "MissionRules":
        """Distribution counts must be non-negative and add up to question_count."""
        if self.distribution is None:
            return self
        negative = {k: v for k, v in self.distribution.items() if v < 0}
        if negative:
            raise ValueError(f"Distribution counts must be >= 0, got {negative}")
        total = sum(self.distribution.values())
        if total != self.question_count:
            raise ValueError(
                f"Distribution counts sum to {total}, expected question_count "
                f"({self.question_count})"
            )
        return self


class MissionReward(BaseModel):
    """What a successful attempt grants. Passed through to the result sink.

    Attributes:
        fragment_id: Puzzle fragment or letter token identifier
        label: Display label (e.g. the letter itself)
        xp: Fixed XP for this mission (None = computed from the score)
    """

    model_config = ConfigDict(frozen=True)

    fragment_id: str | None = Field(default=None)
    label: str = Field(default="")
    xp: int | None = Field(default=None, ge=0)


class MissionContent(BaseModel):
    """Normalised mission content handed to the engine by a content source."""

    model_config = ConfigDict(frozen=True)

    mission_id: str = Field(min_length=1)
    title: str = Field(default="")
    intro: str = Field(default="")
    rules: MissionRules
    question_pool: list[Question] = Field(default_factory=list)
    reward: MissionReward | None = Field(default=None)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "MissionContent":
        """Question ids are used to track unlocked narratives, so they must be unique."""
        seen: set[str] = set()
        for question in self.question_pool:
            if question.id in seen:
                raise ValueError(f"Duplicate question id in pool: {question.id}")
            seen.add(question.id)
        return self
