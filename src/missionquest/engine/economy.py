"""Lives and bonus-seconds economy.

These are operations over AttemptState fields, not objects with their own
lifecycle. They never change ``state.phase``; the session decides the
transition from what they report.

Rules:
- A correct answer banks the seconds left on the clock (uncapped)
- A mistake on a normal question costs exactly one life
- A mistake on a critical question fails the attempt without touching lives
  (handled by the session, which never calls register_mistake for it)
- When lives reach zero, a rescue is offered only if the bank covers
  ``bonus_redemption_cost``
- Redeeming subtracts the cost and restores exactly one life
"""

from __future__ import annotations

import logging

from missionquest.errors import InsufficientBonusError
from missionquest.models.attempt import AttemptPhase, AttemptState
from missionquest.models.rules import MissionRules

logger = logging.getLogger(__name__)


def register_correct(state: AttemptState, seconds_left: int) -> int:
    """Record a correct answer and bank the unused seconds.

    Returns:
        Seconds added to the bank
    """
    banked = max(0, seconds_left)
    state.correct_count += 1
    state.bonus_seconds += banked
    return banked


def register_mistake(state: AttemptState) -> int:
    """Spend one life for a wrong answer or timeout on a normal question.

    Returns:
        Lives remaining after the mistake
    """
    state.lives_remaining = max(0, state.lives_remaining - 1)
    return state.lives_remaining


def is_critical(state: AttemptState) -> bool:
    """True when exactly one life is left."""
    return state.lives_remaining == 1


def is_exhausted(state: AttemptState) -> bool:
    """True when no lives are left."""
    return state.lives_remaining <= 0


def can_redeem(state: AttemptState, rules: MissionRules) -> bool:
    """True if the bank covers one life."""
    return state.bonus_seconds >= rules.bonus_redemption_cost


def redeem_bonus(state: AttemptState, rules: MissionRules) -> None:
    """Exchange banked seconds for one life during a rescue offer.

    Sets ``lives_remaining`` to 1 and subtracts the redemption cost. The
    caller moves the phase back to IN_PROGRESS.

    Raises:
        InsufficientBonusError: Outside RESCUE_OFFERED or with too few banked
            seconds. State is left untouched.
    """
    cost = rules.bonus_redemption_cost
    if state.phase != AttemptPhase.RESCUE_OFFERED:
        raise InsufficientBonusError(
            f"Bonus can only be redeemed during a rescue offer (phase: {state.phase.value})",
            bonus_seconds=state.bonus_seconds,
            cost=cost,
            phase=state.phase,
        )
    if not can_redeem(state, rules):
        raise InsufficientBonusError(
            f"Not enough bonus seconds: have {state.bonus_seconds}, need {cost}",
            bonus_seconds=state.bonus_seconds,
            cost=cost,
            phase=state.phase,
        )

    state.bonus_seconds -= cost
    state.lives_remaining = 1
    logger.info(f"Redeemed {cost}s of bonus for one life ({state.bonus_seconds}s left)")
