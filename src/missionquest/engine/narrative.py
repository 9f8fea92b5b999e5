"""Narrative unlocks shown between a correct answer and the next question."""

from __future__ import annotations

from typing import Optional

from missionquest.models.attempt import AttemptState
from missionquest.models.question import Question


class NarrativeQueue:
    """View over an attempt's single pending-narrative slot.

    A correct answer on a question with ``narrative_unlock`` fills the slot.
    The session shows it in NARRATIVE_INTERSTITIAL and consumes it on the
    following advance, so each unlock is shown exactly once.
    """

    def __init__(self, state: AttemptState) -> None:
        self._state = state

    @property
    def pending(self) -> Optional[str]:
        """Narrative waiting to be shown, if any."""
        return self._state.pending_narrative

    def has_pending(self) -> bool:
        return self._state.pending_narrative is not None

    def enqueue(self, question: Question) -> bool:
        """Queue the question's unlock text, if it has one.

        Returns:
            True if a narrative was queued
        """
        if not question.narrative_unlock:
            return False
        self._state.pending_narrative = question.narrative_unlock
        self._state.unlocked_narrative_ids.add(question.id)
        return True

    def consume(self) -> Optional[str]:
        """Clear and return the pending narrative."""
        text = self._state.pending_narrative
        self._state.pending_narrative = None
        return text
