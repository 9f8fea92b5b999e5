"""In-memory implementations for hosts that manage their own persistence."""

from typing import Optional

from missionquest.errors import ContentUnavailableError, ResultSinkError
from missionquest.models.attempt import AttemptResult
from missionquest.models.rules import MissionContent

from .repository import AttemptResultSink, MissionContentRepository


class InMemoryContentRepository(MissionContentRepository):
    """Mission content held in a dict keyed by mission id."""

    def __init__(self, missions: Optional[list[MissionContent]] = None):
        self._missions: dict[str, MissionContent] = {}
        for content in missions or []:
            self.add(content)

    def add(self, content: MissionContent) -> None:
        """Add or replace a mission."""
        self._missions[content.mission_id] = content

    def list_missions(self) -> list[dict]:
        return sorted(
            ({"id": c.mission_id, "title": c.title or c.mission_id} for c in self._missions.values()),
            key=lambda x: x["id"],
        )

    def get_content(self, mission_id: str) -> MissionContent:
        if mission_id not in self._missions:
            raise ContentUnavailableError(mission_id, "not loaded")
        return self._missions[mission_id]


class InMemoryAttemptResultSink(AttemptResultSink):
    """Collects results in a list.

    Args:
        fail: If True, every record_attempt call raises ResultSinkError
            (results are still counted in ``calls``)
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.results: list[AttemptResult] = []
        self.calls = 0

    def record_attempt(self, result: AttemptResult) -> None:
        self.calls += 1
        if self.fail:
            raise ResultSinkError(f"Sink refused attempt {result.attempt_id}")
        self.results.append(result)
