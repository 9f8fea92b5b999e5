"""Question bank selection.

Draws the working set for one attempt from a mission's question pool:

1. Partition the pool by category
2. Check every requested category has enough questions (all-or-nothing)
3. Shuffle each partition (Fisher-Yates via ``random.Random.shuffle``)
4. Take the requested count from each partition, in distribution order
5. Shuffle the concatenated result unless the rules keep category order

Without a distribution, ``question_count`` questions are taken at random
from the whole pool; with ``shuffle_working_set`` off they keep pool order.
The selector never invents questions; a short pool raises
InsufficientQuestionsError and the host must find other content.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from missionquest.errors import InsufficientQuestionsError
from missionquest.models.question import Question
from missionquest.models.rules import MissionRules

logger = logging.getLogger(__name__)


def partition_by_category(pool: Sequence[Question]) -> dict[str, list[Question]]:
    """Group questions by category, preserving pool order within each group."""
    partitions: dict[str, list[Question]] = {}
    for question in pool:
        partitions.setdefault(question.category, []).append(question)
    return partitions


def check_pool(pool: Sequence[Question], rules: MissionRules) -> None:
    """Verify that ``pool`` can satisfy ``rules``.

    Raises:
        InsufficientQuestionsError: For the first category that falls short
    """
    if rules.distribution is None:
        if len(pool) < rules.question_count:
            raise InsufficientQuestionsError(None, rules.question_count, len(pool))
        return

    partitions = partition_by_category(pool)
    for category, required in rules.distribution.items():
        available = len(partitions.get(category, []))
        if available < required:
            raise InsufficientQuestionsError(category, required, available)


def draw(
    pool: Sequence[Question],
    rules: MissionRules,
    rng: Optional[random.Random] = None,
) -> tuple[Question, ...]:
    """Draw the working set for one attempt.

    Args:
        pool: All questions available for the mission
        rules: Mission rules (question_count, distribution, shuffle flags)
        rng: Random source; pass a seeded Random for a reproducible draw

    Returns:
        Tuple of exactly ``rules.question_count`` questions

    Raises:
        InsufficientQuestionsError: If any category has too few questions.
            Nothing is drawn in that case.
    """
    if rng is None:
        rng = random.Random()

    check_pool(pool, rules)

    if rules.distribution is None and not rules.shuffle_working_set:
        # Random subset, kept in authored order
        picked = sorted(rng.sample(range(len(pool)), rules.question_count))
        selected = [pool[i] for i in picked]
    elif rules.distribution is None:
        candidates = list(pool)
        rng.shuffle(candidates)
        selected = candidates[: rules.question_count]
    else:
        partitions = partition_by_category(pool)
        selected = []
        for category, count in rules.distribution.items():
            if count == 0:
                continue
            bucket = list(partitions[category])
            rng.shuffle(bucket)
            selected.extend(bucket[:count])

    if rules.shuffle_working_set:
        rng.shuffle(selected)

    if rules.shuffle_choices:
        selected = [question.shuffled(rng) for question in selected]

    logger.debug(
        f"Drew {len(selected)} of {len(pool)} questions: {[q.id for q in selected]}"
    )
    return tuple(selected)
