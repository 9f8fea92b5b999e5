"""Content repository that falls back through several sources.

Hosts use this to put hand-authored content ahead of generated content: the
first repository that can supply a mission wins.
"""

import logging

from missionquest.errors import ContentUnavailableError
from missionquest.models.rules import MissionContent

from .repository import MissionContentRepository

logger = logging.getLogger(__name__)


class ChainedContentRepository(MissionContentRepository):
    """Try each repository in order until one supplies the mission."""

    def __init__(self, *repositories: MissionContentRepository):
        if not repositories:
            raise ValueError("ChainedContentRepository needs at least one repository")
        self.repositories = list(repositories)

    def list_missions(self) -> list[dict]:
        """Merge mission lists; earlier repositories shadow later ones."""
        seen: dict[str, dict] = {}
        for repo in self.repositories:
            for mission in repo.list_missions():
                seen.setdefault(mission["id"], mission)
        return sorted(seen.values(), key=lambda x: x["id"])

    def get_content(self, mission_id: str) -> MissionContent:
        reasons = []
        for repo in self.repositories:
            try:
                return repo.get_content(mission_id)
            except ContentUnavailableError as e:
                logger.warning(
                    f"{type(repo).__name__} could not supply mission {mission_id}, "
                    f"trying next source: {e}"
                )
                reasons.append(e.reason or str(e))
        raise ContentUnavailableError(mission_id, "; ".join(reasons))
