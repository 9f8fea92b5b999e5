"""Shared pytest fixtures and markers for all tests."""

import pytest

from missionquest.models import Criticality, MissionContent, MissionRules, Question


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def make_question():
    """Factory for questions with four choices, the correct one at index 1."""

    def _make(qid, category="normal", critical=False, narrative=None, correct_index=1):
        return Question(
            id=qid,
            category=category,
            criticality=Criticality.CRITICAL if critical else Criticality.NORMAL,
            prompt=f"Prompt for {qid}?",
            choices=["alpha", "bravo", "charlie", "delta"],
            correct_index=correct_index,
            narrative_unlock=narrative,
            explanation=f"Because of {qid}.",
        )

    return _make


@pytest.fixture
def standard_rules():
    """Six questions, five to pass, two lives, 120s clock, 120s per life."""
    return MissionRules(
        question_count=6,
        min_correct_to_pass=5,
        starting_lives=2,
        seconds_per_question=120,
        bonus_redemption_cost=120,
    )


@pytest.fixture
def ordered_rules(standard_rules):
    """Standard rules with the working set kept in pool order."""
    return standard_rules.model_copy(update={"shuffle_working_set": False})


@pytest.fixture
def make_content(make_question):
    """Factory for mission content with ``size`` plain questions.

    ``critical`` and ``narratives`` are keyed by question id ("q1".."qN").
    """

    def _make(rules, size=None, critical=(), narratives=None, reward=None):
        narratives = narratives or {}
        pool = [
            make_question(f"q{i}", critical=f"q{i}" in critical, narrative=narratives.get(f"q{i}"))
            for i in range(1, (size or rules.question_count) + 1)
        ]
        return MissionContent(
            mission_id="TEST",
            title="Test Mission",
            rules=rules,
            question_pool=pool,
            reward=reward,
        )

    return _make
