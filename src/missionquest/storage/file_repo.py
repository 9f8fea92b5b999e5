"""File-based implementations using JSON files.

Mission content lives in one JSON file per mission (``<mission_id>.json``) in
any of the formats handled by ``missionquest.storage.normalize``. Attempt
results are written under ``attempts/`` and player progression under
``profiles/``.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from missionquest.errors import ContentFormatError, ContentUnavailableError, ResultSinkError
from missionquest.models.attempt import AttemptResult
from missionquest.models.rules import MissionContent
from missionquest.progression import PlayerProfile, apply_result, begin_season

from .normalize import detect_format, normalize_content
from .repository import AttemptResultSink, MissionContentRepository

logger = logging.getLogger(__name__)


class FileMissionContentRepository(MissionContentRepository):
    """JSON file-based mission content repository.

    Each mission is stored as ``<content_path>/<mission_id>.json``. Mission
    ids are the file stems (for season content, a country code such as 'CH').
    """

    def __init__(self, content_path: str | Path = "content/missions"):
        """Initialize repository.

        Args:
            content_path: Path to the mission content directory
        """
        self.content_path = Path(content_path)

    def _get_mission_path(self, mission_id: str) -> Path:
        """Get path to mission file."""
        return self.content_path / f"{mission_id}.json"

    def _load_json(self, mission_id: str, path: Path) -> dict:
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ContentFormatError(mission_id, f"invalid JSON: {e}") from e
        except OSError as e:
            raise ContentUnavailableError(mission_id, str(e)) from e

    def list_missions(self) -> list[dict]:
        """Return metadata for all readable missions.

        Files that cannot be parsed are skipped with a warning.
        """
        if not self.content_path.is_dir():
            return []

        missions = []
        for path in self.content_path.glob("*.json"):
            try:
                data = self._load_json(path.stem, path)
                fmt = detect_format(data)
            except ContentUnavailableError as e:
                logger.warning(f"Skipping mission file {path.name}: {e}")
                continue
            missions.append({
                "id": path.stem,
                "title": _title_of(data) or path.stem,
                "format": fmt,
            })
        return sorted(missions, key=lambda x: x["id"])

    def get_content(self, mission_id: str) -> MissionContent:
        """Load and normalise one mission."""
        path = self._get_mission_path(mission_id)
        if not path.exists():
            raise ContentUnavailableError(mission_id, f"no file at {path}")
        data = self._load_json(mission_id, path)
        return normalize_content(mission_id, data)


def _title_of(data: dict) -> str:
    if not isinstance(data, dict):
        return ""
    for section in ("story", "mission"):
        if isinstance(data.get(section), dict) and data[section].get("mission_title"):
            return data[section]["mission_title"]
    return data.get("title") or data.get("mission_title") or ""


class FileAttemptResultSink(AttemptResultSink):
    """JSON file-based attempt result sink.

    Writes each passed attempt to ``<results_path>/attempts/<attempt_id>.json``
    and, when the result names a player, folds it into
    ``<results_path>/profiles/<player_id>.json``.
    """

    def __init__(self, results_path: str | Path = "instance/results"):
        """Initialize sink.

        Args:
            results_path: Root directory for attempts and profiles
        """
        self.results_path = Path(results_path)
        self.attempts_path = self.results_path / "attempts"
        self.profiles_path = self.results_path / "profiles"

    def _get_profile_path(self, player_id: str) -> Path:
        """Get path to profile file."""
        return self.profiles_path / f"{player_id}.json"

    def record_attempt(self, result: AttemptResult) -> None:
        """Persist an attempt and update the player's profile."""
        record = {
            **result.to_dict(),
            "unlocked_narrative_ids": sorted(result.unlocked_narrative_ids),
            "recorded_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.attempts_path.mkdir(parents=True, exist_ok=True)
            path = self.attempts_path / f"{result.attempt_id}.json"
            with open(path, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)

            if result.player_id:
                profile = self.load_profile(result.player_id) or PlayerProfile(
                    player_id=result.player_id
                )
                self.save_profile(apply_result(profile, result))
        except OSError as e:
            raise ResultSinkError(f"Failed to record attempt {result.attempt_id}: {e}") from e

        logger.info(f"Recorded attempt {result.attempt_id} for mission {result.mission_id}")

    def load_profile(self, player_id: str) -> Optional[PlayerProfile]:
        """Load a player's profile, or None if they have none yet.

        Raises:
            ResultSinkError: If the profile file is corrupt
        """
        path = self._get_profile_path(player_id)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return PlayerProfile.from_dict(json.load(f))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ResultSinkError(f"Corrupt profile for player {player_id}: {e}") from e

    def begin_season(self, player_id: str) -> PlayerProfile:
        """Convert a player's banked lives into bonus seconds and save.

        Returns:
            The updated profile (a fresh one if the player has none)

        Raises:
            ResultSinkError: If the profile cannot be read or written
        """
        profile = self.load_profile(player_id) or PlayerProfile(player_id=player_id)
        updated = begin_season(profile)
        try:
            self.save_profile(updated)
        except OSError as e:
            raise ResultSinkError(f"Failed to save profile for player {player_id}: {e}") from e
        logger.info(
            f"Player {player_id} starts the season with {updated.bonus_seconds_banked}s bonus"
        )
        return updated

    def save_profile(self, profile: PlayerProfile) -> None:
        """Write a player's profile."""
        self.profiles_path.mkdir(parents=True, exist_ok=True)
        with open(self._get_profile_path(profile.player_id), "w", encoding="utf-8") as f:
            json.dump(profile.to_dict(), f, indent=2)

    def list_attempts(self, player_id: Optional[str] = None) -> list[dict]:
        """List recorded attempts, newest first, optionally filtered by player."""
        if not self.attempts_path.is_dir():
            return []

        attempts = []
        for path in self.attempts_path.glob("*.json"):
            with open(path, encoding="utf-8") as f:
                data = json.load(f)

            if player_id is not None and data.get("player_id") != player_id:
                continue

            attempts.append(data)
        return sorted(attempts, key=lambda x: x.get("recorded_at", ""), reverse=True)
