"""Content normalisation for the mission formats in circulation.

Missions were authored in several JSON shapes over the life of the game.
This module turns each of them into the uniform MissionContent the engine
expects, so the engine itself never sees a format difference.

Formats:
- season: ``gameplay.rules`` + ``gameplay.questions`` with option ids
- free: ``question_bank`` of A/B/C typed questions (B and C are critical)
- classic: generated ``enigmes`` whose answer is the correct choice text
- native: ``rules`` + ``questions`` matching the models field for field
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from missionquest.errors import ContentFormatError
from missionquest.models.question import Criticality, Question
from missionquest.models.rules import MissionContent, MissionReward, MissionRules
from missionquest.parameters import (
    CLASSIC_LIVES,
    FREE_CATEGORIES,
    FREE_MISSION_XP,
    get_preset,
)

logger = logging.getLogger(__name__)

SEASON_FORMAT = "season"
FREE_FORMAT = "free"
CLASSIC_FORMAT = "classic"
NATIVE_FORMAT = "native"

FREE_CRITICAL_CATEGORIES = frozenset({"B", "C"})


def detect_format(data: dict) -> str:
    """Identify which authoring format ``data`` uses.

    Raises:
        ContentFormatError: If no known format matches
    """
    if not isinstance(data, dict):
        raise ContentFormatError("<unknown>", f"expected a JSON object, got {type(data).__name__}")
    if isinstance(data.get("gameplay"), dict):
        return SEASON_FORMAT
    if "question_bank" in data:
        return FREE_FORMAT
    if "enigmes" in data:
        return CLASSIC_FORMAT
    if "rules" in data and "questions" in data:
        return NATIVE_FORMAT
    raise ContentFormatError(
        str(data.get("id", "<unknown>")),
        f"unrecognised content keys: {sorted(data)[:10]}",
    )


def normalize_content(
    mission_id: str,
    data: dict,
    rules: Optional[MissionRules] = None,
) -> MissionContent:
    """Convert raw mission JSON into MissionContent.

    Args:
        mission_id: Identifier to give the mission
        data: Parsed JSON in any supported format
        rules: Rules that replace the ones derived from the content

    Raises:
        ContentFormatError: If the data cannot be normalised
    """
    fmt = detect_format(data)
    normalizers = {
        SEASON_FORMAT: _normalize_season,
        FREE_FORMAT: _normalize_free,
        CLASSIC_FORMAT: _normalize_classic,
        NATIVE_FORMAT: _normalize_native,
    }

    try:
        content = normalizers[fmt](mission_id, data)
        if rules is not None:
            content = content.model_copy(update={"rules": rules})
    except ContentFormatError:
        raise
    except (ValidationError, KeyError, TypeError, ValueError) as e:
        raise ContentFormatError(mission_id, f"invalid {fmt} content: {e}") from e

    logger.debug(
        f"Normalised {fmt} mission {mission_id}: {len(content.question_pool)} questions"
    )
    return content


def _normalize_season(mission_id: str, data: dict) -> MissionContent:
    """Season missions: authored order, option ids, per-mission rules."""
    gameplay = data["gameplay"]
    raw_rules = gameplay.get("rules", {})
    story = data.get("story", {})
    rewards = data.get("rewards", {})

    raw_questions = sorted(gameplay.get("questions", []), key=lambda q: q.get("order", 0))
    questions = []
    for raw in raw_questions:
        if raw.get("type", "mcq") != "mcq":
            logger.warning(
                f"Mission {mission_id}: skipping non-multiple-choice question {raw.get('id')}"
            )
            continue
        questions.append(_season_question(raw))

    question_count = min(raw_rules.get("gate_total", len(questions)), len(questions))
    threshold = raw_rules.get("gate_threshold", question_count)
    if threshold > question_count:
        raise ContentFormatError(
            mission_id,
            f"gate threshold {threshold} exceeds the {question_count} playable "
            f"multiple-choice questions",
        )

    rules = get_preset(
        "season",
        question_count=question_count,
        min_correct_to_pass=threshold,
        starting_lives=raw_rules.get("lives", get_preset("season").starting_lives),
        seconds_per_question=raw_rules.get(
            "timer_seconds", get_preset("season").seconds_per_question
        ),
        bonus_redemption_cost=raw_rules.get(
            "bonus_seconds_exchange_rate", get_preset("season").bonus_redemption_cost
        ),
    )

    fragment = rewards.get("fragment", {})
    token = rewards.get("token", {})
    reward = MissionReward(
        fragment_id=fragment.get("id"),
        label=token.get("value", fragment.get("label", "")),
        xp=rewards.get("xp_mission_complete"),
    )

    return MissionContent(
        mission_id=mission_id,
        title=story.get("mission_title", ""),
        intro=story.get("intro", ""),
        rules=rules,
        question_pool=questions,
        reward=reward,
    )


def _season_question(raw: dict) -> Question:
    options = raw["options"]
    option_ids = [option["id"] for option in options]
    if raw["correct_answer"] not in option_ids:
        raise ValueError(
            f"question {raw.get('id')}: correct_answer '{raw['correct_answer']}' "
            f"is not one of {option_ids}"
        )
    feedback = raw.get("feedback", {})
    return Question(
        id=str(raw["id"]),
        category=raw.get("category", "normal"),
        criticality=Criticality.CRITICAL if raw.get("critical") else Criticality.NORMAL,
        prompt=raw["prompt"],
        choices=[option["text"] for option in options],
        correct_index=option_ids.index(raw["correct_answer"]),
        narrative_unlock=raw.get("narrative_unlock"),
        explanation=feedback.get("wrong") or feedback.get("correct"),
    )


def _normalize_free(mission_id: str, data: dict) -> MissionContent:
    """Free missions: one scene (A), logic (B) and strategic (C) question."""
    mission = data.get("mission", {})
    questions = [
        Question(
            id=str(raw["id"]),
            category=raw["type"],
            criticality=(
                Criticality.CRITICAL
                if raw["type"] in FREE_CRITICAL_CATEGORIES
                else Criticality.NORMAL
            ),
            prompt=raw["question"],
            choices=list(raw["choices"]),
            correct_index=int(raw["answer_index"]),
            narrative_unlock=raw.get("narrative_unlock"),
        )
        for raw in data["question_bank"]
    ]

    unknown = {q.category for q in questions} - set(FREE_CATEGORIES)
    if unknown:
        logger.warning(f"Mission {mission_id}: ignoring unknown question types {sorted(unknown)}")

    fragment = data.get("fragment_reward", {})
    reward = MissionReward(
        fragment_id=fragment.get("id"),
        label=fragment.get("name", ""),
        xp=FREE_MISSION_XP,
    )

    return MissionContent(
        mission_id=mission_id,
        title=mission.get("mission_title", ""),
        intro=mission.get("intro", ""),
        rules=get_preset("free"),
        question_pool=questions,
        reward=reward,
    )


def _normalize_classic(mission_id: str, data: dict) -> MissionContent:
    """Classic generated missions: answers given as choice text."""
    questions = []
    for i, raw in enumerate(data["enigmes"]):
        choices = list(raw["choices"])
        if raw["answer"] not in choices:
            raise ValueError(f"enigme {i + 1}: answer '{raw['answer']}' is not one of the choices")
        questions.append(
            Question(
                id=f"{mission_id}-{i + 1}",
                category=raw.get("type", "normal"),
                prompt=raw["question"],
                choices=choices,
                correct_index=choices.index(raw["answer"]),
            )
        )

    count = len(questions)
    rules = get_preset(
        "classic",
        question_count=count,
        starting_lives=max(CLASSIC_LIVES, count + 1),
        shuffle_working_set=False,
    )
    return MissionContent(
        mission_id=mission_id,
        title=data.get("mission_title", ""),
        intro=data.get("intro", ""),
        rules=rules,
        question_pool=questions,
    )


def _normalize_native(mission_id: str, data: dict) -> MissionContent:
    """Content already shaped like the models."""
    payload: dict[str, Any] = {
        "mission_id": mission_id,
        "title": data.get("title", ""),
        "intro": data.get("intro", ""),
        "rules": data["rules"],
        "question_pool": data["questions"],
        "reward": data.get("reward"),
    }
    return MissionContent.model_validate(payload)
