"""Abstract interfaces for mission content and attempt results.

The engine depends only on these interfaces. Content sources return
normalised MissionContent; result sinks persist the AttemptResult of a
passed attempt (XP, streaks, fragment grants).
"""

from abc import ABC, abstractmethod

from missionquest.models.attempt import AttemptResult
from missionquest.models.rules import MissionContent


class MissionContentRepository(ABC):
    """Abstract base class for mission content sources."""

    @abstractmethod
    def list_missions(self) -> list[dict]:
        """Return metadata for all available missions.

        Returns:
            List of dicts containing: {id, title}
        """
        pass

    @abstractmethod
    def get_content(self, mission_id: str) -> MissionContent:
        """Load and normalise content for one mission.

        Args:
            mission_id: Mission identifier (e.g. a country code)

        Returns:
            Normalised MissionContent

        Raises:
            ContentUnavailableError: If the mission cannot be loaded
        """
        pass


class AttemptResultSink(ABC):
    """Abstract base class for attempt result persistence."""

    @abstractmethod
    def record_attempt(self, result: AttemptResult) -> None:
        """Persist the result of a passed attempt.

        Args:
            result: Result emitted by the engine

        Raises:
            ResultSinkError: If the result could not be recorded
        """
        pass
