"""Tests for working-set selection."""

import random

import pytest

from missionquest.engine.selector import check_pool, draw, partition_by_category
from missionquest.errors import InsufficientQuestionsError
from missionquest.models import MissionRules


def _rules(count, distribution=None, **kwargs):
    return MissionRules(
        question_count=count,
        min_correct_to_pass=0,
        starting_lives=1,
        seconds_per_question=10,
        bonus_redemption_cost=10,
        distribution=distribution,
        **kwargs,
    )


class TestDraw:
    """Tests for draw()."""

    def test_flat_draw_takes_question_count(self, make_question):
        pool = [make_question(f"q{i}") for i in range(10)]
        working_set = draw(pool, _rules(4), random.Random(1))

        assert len(working_set) == 4
        assert len({q.id for q in working_set}) == 4

    def test_distribution_draws_per_category(self, make_question):
        pool = [make_question(f"a{i}", category="A") for i in range(5)]
        pool += [make_question(f"b{i}", category="B") for i in range(5)]
        working_set = draw(pool, _rules(5, {"A": 2, "B": 3}), random.Random(7))

        categories = [q.category for q in working_set]
        assert categories.count("A") == 2
        assert categories.count("B") == 3

    def test_fixed_order_keeps_distribution_order(self, make_question):
        pool = [make_question("c", category="C"), make_question("b", category="B"),
                make_question("a", category="A")]
        rules = _rules(3, {"A": 1, "B": 1, "C": 1}, shuffle_working_set=False)

        working_set = draw(pool, rules, random.Random(0))

        assert [q.category for q in working_set] == ["A", "B", "C"]

    def test_fixed_order_flat_draw_keeps_pool_order(self, make_question):
        pool = [make_question(f"q{i:02d}") for i in range(12)]
        rules = _rules(5, shuffle_working_set=False)

        for seed in range(10):
            ids = [q.id for q in draw(pool, rules, random.Random(seed))]
            assert ids == sorted(ids)
            assert len(ids) == 5

    def test_seeded_draw_is_reproducible(self, make_question):
        pool = [make_question(f"q{i}") for i in range(20)]
        first = draw(pool, _rules(6), random.Random(42))
        second = draw(pool, _rules(6), random.Random(42))
        assert [q.id for q in first] == [q.id for q in second]

    def test_shuffle_choices_keeps_correct_answer(self, make_question):
        pool = [make_question(f"q{i}") for i in range(6)]
        working_set = draw(pool, _rules(6, shuffle_choices=True), random.Random(5))
        assert all(q.correct_choice == "bravo" for q in working_set)

    def test_zero_count_category_may_be_missing(self, make_question):
        pool = [make_question(f"a{i}", category="A") for i in range(2)]
        working_set = draw(pool, _rules(2, {"A": 2, "Z": 0}), random.Random(0))
        assert len(working_set) == 2


class TestInsufficientPool:
    """All-or-nothing failure when the pool is short."""

    def test_short_category_raises_without_partial_result(self, make_question):
        """3 questions in a category that requires 4."""
        pool = [make_question(f"a{i}", category="A") for i in range(3)]
        pool += [make_question(f"b{i}", category="B") for i in range(4)]
        rules = _rules(6, {"B": 2, "A": 4})

        working_set = None
        with pytest.raises(InsufficientQuestionsError) as exc_info:
            working_set = draw(pool, rules, random.Random(0))

        assert working_set is None
        assert exc_info.value.category == "A"
        assert exc_info.value.required == 4
        assert exc_info.value.available == 3

    def test_check_pool_does_not_consume_randomness(self, make_question):
        pool = [make_question(f"a{i}", category="A") for i in range(3)]
        rng = random.Random(9)
        before = rng.getstate()

        with pytest.raises(InsufficientQuestionsError):
            draw(pool, _rules(4, {"A": 4}), rng)

        assert rng.getstate() == before

    def test_flat_pool_too_small(self, make_question):
        pool = [make_question("q1"), make_question("q2")]
        with pytest.raises(InsufficientQuestionsError) as exc_info:
            check_pool(pool, _rules(3))
        assert exc_info.value.category is None

    def test_error_is_a_value_error(self, make_question):
        with pytest.raises(ValueError):
            check_pool([make_question("q1")], _rules(2))


def test_partition_preserves_pool_order(make_question):
    pool = [make_question("a1", category="A"), make_question("b1", category="B"),
            make_question("a2", category="A")]
    partitions = partition_by_category(pool)
    assert [q.id for q in partitions["A"]] == ["a1", "a2"]
    assert [q.id for q in partitions["B"]] == ["b1"]
