"""Mission attempt engine for Mission Quest.

This module contains the attempt logic including:
- clock: Per-question countdown with arm/disarm discipline
- selector: Working-set draw from a question pool
- economy: Lives and bonus-seconds operations
- gate: Pass/fail threshold check
- narrative: Pending narrative unlocks
- session: The attempt state machine

Usage:
    from missionquest.engine import create_session
    from missionquest.models import AttemptPhase
    from missionquest.storage import get_content_repository, get_result_sink

    session = create_session("CH", get_content_repository(), get_result_sink())
    session.start()

    # Answer the active question
    outcome = session.answer(1)

    # Move on (or run the gate after the last question)
    session.advance()

    if session.phase == AttemptPhase.RESCUE_OFFERED:
        session.redeem_bonus()
"""

from missionquest.engine.clock import (
    AsyncioClock,
    Clock,
    ManualClock,
)
from missionquest.engine.economy import (
    can_redeem,
    is_critical,
    is_exhausted,
    redeem_bonus,
    register_correct,
    register_mistake,
)
from missionquest.engine.gate import (
    GateOutcome,
    evaluate,
    threshold_reached,
)
from missionquest.engine.narrative import NarrativeQueue
from missionquest.engine.selector import (
    check_pool,
    draw,
    partition_by_category,
)
from missionquest.engine.session import (
    AnswerOutcome,
    MissionSession,
    TransitionResult,
    create_session,
)

__all__ = [
    # Session
    "MissionSession",
    "AnswerOutcome",
    "TransitionResult",
    "create_session",
    # Clocks
    "Clock",
    "ManualClock",
    "AsyncioClock",
    # Selection
    "draw",
    "check_pool",
    "partition_by_category",
    # Economy
    "register_correct",
    "register_mistake",
    "is_critical",
    "is_exhausted",
    "can_redeem",
    "redeem_bonus",
    # Gate
    "GateOutcome",
    "evaluate",
    "threshold_reached",
    # Narrative
    "NarrativeQueue",
]
