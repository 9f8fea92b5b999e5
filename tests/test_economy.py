"""Tests for the lives and bonus economy and the gate."""

import pytest

from missionquest.engine import economy
from missionquest.engine.gate import GateOutcome, evaluate, threshold_reached
from missionquest.errors import InsufficientBonusError
from missionquest.models import AttemptPhase, AttemptState


class TestEconomy:
    """Tests for economy operations on AttemptState."""

    def test_register_correct_banks_seconds(self):
        state = AttemptState(lives_remaining=2)
        assert economy.register_correct(state, 90) == 90
        assert economy.register_correct(state, 30) == 30
        assert state.correct_count == 2
        assert state.bonus_seconds == 120

    def test_register_correct_never_banks_negative(self):
        state = AttemptState(lives_remaining=2)
        assert economy.register_correct(state, -5) == 0
        assert state.bonus_seconds == 0

    def test_register_mistake_costs_one_life(self):
        state = AttemptState(lives_remaining=2)
        assert economy.register_mistake(state) == 1
        assert economy.is_critical(state)
        assert economy.register_mistake(state) == 0
        assert economy.is_exhausted(state)
        assert economy.register_mistake(state) == 0

    def test_redeem_outside_rescue_raises(self, standard_rules):
        state = AttemptState(lives_remaining=0, bonus_seconds=500, phase=AttemptPhase.IN_PROGRESS)
        with pytest.raises(InsufficientBonusError) as exc_info:
            economy.redeem_bonus(state, standard_rules)
        assert exc_info.value.phase == AttemptPhase.IN_PROGRESS
        assert state.bonus_seconds == 500

    def test_redeem_short_bank_raises(self, standard_rules):
        state = AttemptState(lives_remaining=0, bonus_seconds=119, phase=AttemptPhase.RESCUE_OFFERED)
        with pytest.raises(InsufficientBonusError) as exc_info:
            economy.redeem_bonus(state, standard_rules)
        assert exc_info.value.bonus_seconds == 119
        assert exc_info.value.cost == 120
        assert state.lives_remaining == 0

    def test_redeem_restores_one_life(self, standard_rules):
        state = AttemptState(lives_remaining=0, bonus_seconds=130, phase=AttemptPhase.RESCUE_OFFERED)
        economy.redeem_bonus(state, standard_rules)
        assert state.lives_remaining == 1
        assert state.bonus_seconds == 10
        assert state.phase == AttemptPhase.RESCUE_OFFERED


class TestGate:
    """Tests for the pass/fail gate."""

    def test_pass_at_threshold(self, standard_rules):
        assert evaluate(5, standard_rules) == GateOutcome.PASS
        assert evaluate(6, standard_rules) == GateOutcome.PASS

    def test_fail_below_threshold(self, standard_rules):
        assert evaluate(4, standard_rules) == GateOutcome.FAIL
        assert not threshold_reached(4, standard_rules)

    def test_zero_threshold_always_passes(self, standard_rules):
        rules = standard_rules.model_copy(update={"min_correct_to_pass": 0})
        assert evaluate(0, rules) == GateOutcome.PASS
