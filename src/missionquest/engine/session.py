"""Mission attempt session controller.

MissionSession runs one mission attempt from INTRO to PASSED or FAILED. It
owns the AttemptState and the question clock. It is the only writer of
``state.phase``.

Phase flow:
    INTRO --start--> IN_PROGRESS
    IN_PROGRESS --answer/timeout--> IN_PROGRESS (revealed) | NARRATIVE_INTERSTITIAL
                                    | RESCUE_OFFERED | FAILED
    NARRATIVE_INTERSTITIAL --advance--> IN_PROGRESS | GATE_CHECK
    IN_PROGRESS (revealed) --advance--> IN_PROGRESS | GATE_CHECK
    GATE_CHECK --(auto)--> PASSED | FAILED
    RESCUE_OFFERED --redeem_bonus--> IN_PROGRESS (same question)
    RESCUE_OFFERED --decline--> FAILED

Clock discipline: the clock is disarmed on every phase exit (start, each
reveal, rescue offer, terminal phases, abandon). ``_arm_clock`` disarms
first and then checks that nothing is armed before arming, so two countdowns
can never overlap.

Operations called in a phase that does not accept them are rejected with
``TransitionResult(accepted=False)`` and change nothing. Duplicate UI events
such as a double click are absorbed this way. The exception is
``redeem_bonus``, which raises InsufficientBonusError.

Usage:
    from missionquest.engine import create_session
    from missionquest.storage import get_content_repository

    session = create_session("CH", get_content_repository())
    session.start()
    result = session.answer(2)
    if result.answer.correct:
        ...
    session.advance()
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Optional

from missionquest.engine import economy
from missionquest.engine.clock import Clock, ManualClock
from missionquest.engine.gate import GateOutcome, evaluate, threshold_reached
from missionquest.engine.narrative import NarrativeQueue
from missionquest.engine.selector import draw
from missionquest.errors import ClockStateError, InsufficientBonusError, ResultSinkError
from missionquest.models.attempt import (
    TERMINAL_PHASES,
    AttemptPhase,
    AttemptResult,
    AttemptState,
)
from missionquest.models.question import Question
from missionquest.models.rules import MissionContent, MissionRules

if TYPE_CHECKING:
    from missionquest.storage import AttemptResultSink, MissionContentRepository

logger = logging.getLogger(__name__)

PhaseListener = Callable[[AttemptPhase, AttemptPhase], None]
TickListener = Callable[[int], None]


@dataclass
class AnswerOutcome:
    """What happened when a question was answered or timed out.

    Attributes:
        question_id: Question that was answered
        correct: Whether the answer was correct
        timed_out: True if the clock ran out instead of an answer
        chosen_index: Index picked by the player (None on timeout)
        correct_index: Index of the correct choice
        explanation: Feedback text for the question, if any
        narrative: Narrative unlocked by a correct answer, if any
        seconds_banked: Seconds added to the bonus bank
        lives_remaining: Lives after this answer
        critical_failure: True if a critical question ended the attempt
    """

    question_id: str
    correct: bool
    timed_out: bool
    chosen_index: Optional[int]
    correct_index: int
    explanation: Optional[str] = None
    narrative: Optional[str] = None
    seconds_banked: int = 0
    lives_remaining: int = 0
    critical_failure: bool = False


@dataclass
class TransitionResult:
    """Result of calling a session operation.

    Attributes:
        accepted: False if the operation was rejected (nothing changed)
        phase: Phase after the operation
        previous_phase: Phase before the operation
        answer: Outcome of an answer or timeout
        gate: Gate outcome, if the gate ran during this operation
        result: AttemptResult, if the attempt passed during this operation
        error: Reason for rejection
    """

    accepted: bool
    phase: AttemptPhase
    previous_phase: Optional[AttemptPhase] = None
    answer: Optional[AnswerOutcome] = None
    gate: Optional[GateOutcome] = None
    result: Optional[AttemptResult] = None
    error: Optional[str] = None


class MissionSession:
    """Controller for one mission attempt and its retries.

    Attributes:
        content: Mission content (rules and question pool)
        rules: Rules for every attempt of this session
        state: Current AttemptState (None after abandon)
        result: AttemptResult of the last passed attempt
        result_recorded: Whether the sink accepted the result (None if no
            sink was called)
        history: Answer outcomes for the current attempt
    """

    def __init__(
        self,
        content: MissionContent,
        clock: Optional[Clock] = None,
        result_sink: Optional[AttemptResultSink] = None,
        player_id: Optional[str] = None,
        initial_bonus_seconds: int = 0,
        random_seed: Optional[int] = None,
        on_tick: Optional[TickListener] = None,
        on_phase_change: Optional[PhaseListener] = None,
    ) -> None:
        """Create a session and draw the first attempt's working set.

        Args:
            content: Normalised mission content
            clock: Question clock (default: ManualClock)
            result_sink: Receives the AttemptResult of a passed attempt
            player_id: Player identifier copied into results
            initial_bonus_seconds: Bonus bank at the start of each attempt
                (e.g. seconds carried over from an earlier season)
            random_seed: Seed for question drawing (for reproducibility)
            on_tick: Called with the seconds remaining on each clock tick
            on_phase_change: Called with (old, new) on every phase change

        Raises:
            InsufficientQuestionsError: If the pool cannot satisfy the rules
        """
        if initial_bonus_seconds < 0:
            raise ValueError(f"initial_bonus_seconds must be >= 0, got {initial_bonus_seconds}")

        self.content = content
        self.rules: MissionRules = content.rules
        self.player_id = player_id
        self.initial_bonus_seconds = initial_bonus_seconds
        self._random = random.Random(random_seed)
        self._clock = clock or ManualClock()
        self._sink = result_sink
        self._on_tick = on_tick
        self._on_phase_change = on_phase_change

        self.result: Optional[AttemptResult] = None
        self.result_recorded: Optional[bool] = None
        self.history: list[AnswerOutcome] = []
        self.state: Optional[AttemptState] = self._new_attempt()
        self._narratives = NarrativeQueue(self.state)

    def _new_attempt(self) -> AttemptState:
        """Draw a working set and build a fresh state in INTRO."""
        working_set = draw(self.content.question_pool, self.rules, self._random)
        state = AttemptState(
            working_set=working_set,
            lives_remaining=self.rules.starting_lives,
            bonus_seconds=self.initial_bonus_seconds,
            time_remaining=self.rules.seconds_per_question,
        )
        logger.info(
            f"New attempt {state.attempt_id} for mission {self.content.mission_id}: "
            f"{len(working_set)} questions, {state.lives_remaining} lives"
        )
        return state

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def phase(self) -> AttemptPhase:
        """Current phase (ABANDONED once the state has been dropped)."""
        if self.state is None:
            return AttemptPhase.ABANDONED
        return self.state.phase

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def current_question(self) -> Optional[Question]:
        """The active question, or None."""
        if self.state is None:
            return None
        return self.state.current_question

    @property
    def pending_narrative(self) -> Optional[str]:
        if self.state is None:
            return None
        return self.state.pending_narrative

    def can_redeem(self) -> bool:
        """True if ``redeem_bonus()`` would succeed right now."""
        return (
            self.state is not None
            and self.state.phase == AttemptPhase.RESCUE_OFFERED
            and economy.can_redeem(self.state, self.rules)
        )

    def start(self) -> TransitionResult:
        """Leave the intro and arm the clock for the first question.

        The clock is armed before anything else changes, so a clock that
        cannot be armed leaves the attempt in INTRO.
        """
        if self.phase != AttemptPhase.INTRO:
            return self._reject("start", "Attempt has already started")

        previous = self.state.phase
        self.state.current_index = 0
        self._arm_clock()
        self.state.started_at = datetime.now(timezone.utc)
        self.state.answer_revealed = False
        self._set_phase(AttemptPhase.IN_PROGRESS)
        return TransitionResult(accepted=True, phase=self.phase, previous_phase=previous)

    def answer(self, choice_index: int) -> TransitionResult:
        """Answer the active question with the choice at ``choice_index``."""
        error = self._check_answerable()
        if error:
            return self._reject("answer", error)

        question = self.state.current_question
        if not 0 <= choice_index < len(question.choices):
            return self._reject(
                "answer",
                f"Choice {choice_index} out of range for {len(question.choices)} choices",
            )

        return self._resolve(question, question.is_correct(choice_index), choice_index)

    def timeout(self) -> TransitionResult:
        """Treat the active question as missed because time ran out."""
        error = self._check_answerable()
        if error:
            return self._reject("timeout", error)

        return self._resolve(self.state.current_question, False, None)

    def advance(self) -> TransitionResult:
        """Move past a revealed answer or a narrative interstitial.

        Goes to the next question (re-arming the clock), or runs the gate
        when the working set is exhausted.

        Raises:
            Exception: Whatever a result sink raises other than
                ResultSinkError, after the attempt has reached PASSED
        """
        if self.state is None:
            return self._reject("advance", "Attempt was abandoned")

        previous = self.state.phase
        if previous == AttemptPhase.NARRATIVE_INTERSTITIAL:
            self._narratives.consume()
        elif not (previous == AttemptPhase.IN_PROGRESS and self.state.answer_revealed):
            return self._reject("advance", "Nothing to advance from")

        if self.rules.early_exit_on_threshold and threshold_reached(
            self.state.correct_count, self.rules
        ):
            gate, result = self._run_gate()
            return TransitionResult(
                accepted=True, phase=self.phase, previous_phase=previous, gate=gate, result=result
            )

        next_index = self.state.current_index + 1
        if next_index < self.state.total_questions:
            self.state.current_index = next_index
            self.state.answer_revealed = False
            self._set_phase(AttemptPhase.IN_PROGRESS)
            self._arm_clock()
            return TransitionResult(accepted=True, phase=self.phase, previous_phase=previous)

        self.state.current_index = self.state.total_questions
        gate, result = self._run_gate()
        return TransitionResult(
            accepted=True, phase=self.phase, previous_phase=previous, gate=gate, result=result
        )

    def redeem_bonus(self) -> TransitionResult:
        """Spend banked seconds to get one life back after running out.

        The attempt resumes on the same question with a full clock.

        Raises:
            InsufficientBonusError: Outside RESCUE_OFFERED or when the bank is
                short. Nothing changes in that case.
        """
        if self.state is None:
            raise InsufficientBonusError(
                "Attempt was abandoned",
                bonus_seconds=0,
                cost=self.rules.bonus_redemption_cost,
                phase=AttemptPhase.ABANDONED,
            )

        previous = self.state.phase
        economy.redeem_bonus(self.state, self.rules)
        self.state.answer_revealed = False
        self._set_phase(AttemptPhase.IN_PROGRESS)
        self._arm_clock()
        return TransitionResult(accepted=True, phase=self.phase, previous_phase=previous)

    def decline(self) -> TransitionResult:
        """Turn down a rescue offer, failing the attempt."""
        if self.phase != AttemptPhase.RESCUE_OFFERED:
            return self._reject("decline", "No rescue on offer")

        previous = self.state.phase
        self._set_phase(AttemptPhase.FAILED)
        return TransitionResult(accepted=True, phase=self.phase, previous_phase=previous)

    def retry(self) -> TransitionResult:
        """Start over with a brand-new attempt after a terminal phase."""
        previous = self.phase
        if previous not in TERMINAL_PHASES:
            return self._reject("retry", "Attempt is still in play")

        self._clock.disarm()
        self.state = self._new_attempt()
        self._narratives = NarrativeQueue(self.state)
        self.history = []
        self.result = None
        self.result_recorded = None
        self._notify_phase(previous, self.state.phase)
        return TransitionResult(accepted=True, phase=self.phase, previous_phase=previous)

    def abandon(self) -> TransitionResult:
        """Leave the attempt: stop the clock and drop the state."""
        if self.state is None:
            return self._reject("abandon", "Attempt was already abandoned")

        previous = self.state.phase
        self._clock.disarm()
        logger.info(f"Attempt {self.state.attempt_id} abandoned in phase {previous.value}")
        self.state = None
        self._notify_phase(previous, AttemptPhase.ABANDONED)
        return TransitionResult(accepted=True, phase=self.phase, previous_phase=previous)

    # =========================================================================
    # Answer Resolution
    # =========================================================================

    def _check_answerable(self) -> Optional[str]:
        """Return why the active question cannot be answered, or None."""
        if self.state is None:
            return "Attempt was abandoned"
        if self.state.phase != AttemptPhase.IN_PROGRESS:
            return f"Cannot answer in phase {self.state.phase.value}"
        if self.state.answer_revealed:
            return "Answer already revealed"
        if self.state.current_question is None:
            return "No active question"
        return None

    def _resolve(
        self,
        question: Question,
        correct: bool,
        chosen_index: Optional[int],
    ) -> TransitionResult:
        """Apply an answer or timeout to the state and pick the next phase."""
        state = self.state
        previous = state.phase
        timed_out = chosen_index is None
        seconds_left = 0
        if not timed_out:
            seconds_left = self._clock.remaining if self._clock.armed else state.time_remaining

        self._clock.disarm()
        state.answer_revealed = True

        outcome = AnswerOutcome(
            question_id=question.id,
            correct=correct,
            timed_out=timed_out,
            chosen_index=chosen_index,
            correct_index=question.correct_index,
            explanation=question.explanation,
        )

        if correct:
            outcome.seconds_banked = economy.register_correct(state, seconds_left)
            if self._narratives.enqueue(question):
                outcome.narrative = question.narrative_unlock
                self._set_phase(AttemptPhase.NARRATIVE_INTERSTITIAL)
        elif question.is_critical:
            outcome.critical_failure = True
            logger.info(f"Critical question {question.id} missed")
            self._set_phase(AttemptPhase.FAILED)
        else:
            economy.register_mistake(state)
            if economy.is_exhausted(state):
                if economy.can_redeem(state, self.rules):
                    self._set_phase(AttemptPhase.RESCUE_OFFERED)
                else:
                    self._set_phase(AttemptPhase.FAILED)

        outcome.lives_remaining = state.lives_remaining
        self.history.append(outcome)
        logger.debug(
            f"Question {question.id}: correct={correct} timed_out={timed_out} "
            f"lives={state.lives_remaining} bonus={state.bonus_seconds}s"
        )
        return TransitionResult(
            accepted=True, phase=self.phase, previous_phase=previous, answer=outcome
        )

    # =========================================================================
    # Gate and Results
    # =========================================================================

    def _run_gate(self) -> tuple[GateOutcome, Optional[AttemptResult]]:
        """Evaluate the gate once and move to PASSED or FAILED."""
        self._set_phase(AttemptPhase.GATE_CHECK)
        self.state.gate_evaluations += 1
        gate = evaluate(self.state.correct_count, self.rules)
        logger.info(
            f"Gate for attempt {self.state.attempt_id}: {self.state.correct_count}/"
            f"{self.rules.min_correct_to_pass} required -> {gate.value}"
        )

        if gate == GateOutcome.FAIL:
            self._set_phase(AttemptPhase.FAILED)
            return gate, None

        self._set_phase(AttemptPhase.PASSED)
        return gate, self._emit_result()

    def _emit_result(self) -> AttemptResult:
        """Build the AttemptResult and hand it to the sink.

        ``self.result`` is set before the sink is called. A ResultSinkError is
        logged and recorded as ``result_recorded = False``. Any other
        exception from the sink propagates to the caller of ``advance()``;
        the attempt is already PASSED and ``result_recorded`` stays None.
        """
        state = self.state
        elapsed = 0
        if state.started_at is not None and state.ended_at is not None:
            elapsed = int((state.ended_at - state.started_at).total_seconds())

        result = AttemptResult(
            correct_count=state.correct_count,
            total_questions=state.total_questions,
            lives_remaining=state.lives_remaining,
            bonus_seconds_remaining=state.bonus_seconds,
            unlocked_narrative_ids=frozenset(state.unlocked_narrative_ids),
            mission_id=self.content.mission_id,
            attempt_id=state.attempt_id,
            player_id=self.player_id,
            elapsed_seconds=elapsed,
            reward=self.content.reward,
        )
        self.result = result

        if self._sink is not None:
            try:
                self._sink.record_attempt(result)
                self.result_recorded = True
            except ResultSinkError as e:
                logger.warning(f"Result sink rejected attempt {state.attempt_id}: {e}")
                self.result_recorded = False

        return result

    # =========================================================================
    # Clock and Phase Bookkeeping
    # =========================================================================

    def _arm_clock(self) -> None:
        """Arm a full countdown for the active question."""
        self._clock.disarm()
        if self._clock.armed:
            raise ClockStateError("Clock still armed after disarm")
        self.state.time_remaining = self.rules.seconds_per_question
        self._clock.arm(
            self.rules.seconds_per_question,
            on_tick=self._handle_tick,
            on_expire=self._handle_expire,
        )

    def _handle_tick(self, remaining: int) -> None:
        if self.state is not None:
            self.state.time_remaining = remaining
        if self._on_tick is not None:
            self._on_tick(remaining)

    def _handle_expire(self) -> None:
        self.timeout()

    def _set_phase(self, phase: AttemptPhase) -> None:
        """Change phase, stopping the clock on terminal and rescue phases."""
        previous = self.state.phase
        if previous == phase:
            return
        self.state.phase = phase
        if phase in TERMINAL_PHASES or phase == AttemptPhase.RESCUE_OFFERED:
            self._clock.disarm()
        if phase in TERMINAL_PHASES:
            self.state.ended_at = datetime.now(timezone.utc)
        logger.info(f"Attempt {self.state.attempt_id}: {previous.value} -> {phase.value}")
        self._notify_phase(previous, phase)

    def _notify_phase(self, previous: AttemptPhase, phase: AttemptPhase) -> None:
        if self._on_phase_change is not None:
            self._on_phase_change(previous, phase)

    def _reject(self, operation: str, error: str) -> TransitionResult:
        logger.debug(f"Rejected {operation}() in phase {self.phase.value}: {error}")
        return TransitionResult(accepted=False, phase=self.phase, previous_phase=self.phase, error=error)


# =============================================================================
# Factory function for creating sessions
# =============================================================================


def create_session(
    mission_id: str,
    content_repo: MissionContentRepository,
    result_sink: Optional[AttemptResultSink] = None,
    clock: Optional[Clock] = None,
    player_id: Optional[str] = None,
    initial_bonus_seconds: int = 0,
    random_seed: Optional[int] = None,
) -> MissionSession:
    """Load mission content and create a session for it.

    Args:
        mission_id: Mission to load
        content_repo: Content source
        result_sink: Receives results of passed attempts
        clock: Question clock (default: ManualClock)
        player_id: Player identifier copied into results
        initial_bonus_seconds: Bonus bank at the start of each attempt
        random_seed: Seed for reproducible draws

    Returns:
        MissionSession in INTRO

    Raises:
        ContentUnavailableError: If the content cannot be loaded
        InsufficientQuestionsError: If the pool cannot satisfy the rules
    """
    content = content_repo.get_content(mission_id)
    return MissionSession(
        content=content,
        clock=clock,
        result_sink=result_sink,
        player_id=player_id,
        initial_bonus_seconds=initial_bonus_seconds,
        random_seed=random_seed,
    )
