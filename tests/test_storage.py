"""Tests for the storage module.

Tests cover:
- FileMissionContentRepository loading and error boundaries
- FileAttemptResultSink attempt records and profile updates
- ChainedContentRepository fallback
- Storage configuration functions
"""

import json

import pytest

from missionquest.engine.clock import AsyncioClock, ManualClock
from missionquest.errors import ContentFormatError, ContentUnavailableError, ResultSinkError
from missionquest.models import AttemptResult, MissionReward
from missionquest.storage import (
    ChainedContentRepository,
    ClockKind,
    FileAttemptResultSink,
    FileMissionContentRepository,
    InMemoryContentRepository,
    get_content_repository,
    get_default_rules,
    get_result_sink,
    make_clock,
)

CLASSIC = {
    "mission_title": "Classic One",
    "enigmes": [
        {"question": "One?", "choices": ["1", "2"], "answer": "1"},
        {"question": "Two?", "choices": ["1", "2"], "answer": "2"},
    ],
}


def _result(**overrides):
    values = {
        "correct_count": 6,
        "total_questions": 6,
        "lives_remaining": 2,
        "bonus_seconds_remaining": 300,
        "unlocked_narrative_ids": frozenset({"q2", "q1"}),
        "mission_id": "CH",
        "attempt_id": "abc123",
        "player_id": "player-1",
    }
    values.update(overrides)
    return AttemptResult(**values)


# ============================================================================
# FileMissionContentRepository Tests
# ============================================================================


class TestFileMissionContentRepository:
    """Tests for the file-based content repository."""

    @pytest.fixture
    def repo(self, tmp_path):
        path = tmp_path / "missions"
        path.mkdir()
        (path / "classic-1.json").write_text(json.dumps(CLASSIC), encoding="utf-8")
        return FileMissionContentRepository(path)

    def test_get_content(self, repo):
        content = repo.get_content("classic-1")
        assert content.mission_id == "classic-1"
        assert content.title == "Classic One"
        assert len(content.question_pool) == 2

    def test_missing_mission_raises(self, repo):
        with pytest.raises(ContentUnavailableError) as exc_info:
            repo.get_content("nope")
        assert exc_info.value.mission_id == "nope"

    def test_invalid_json_raises_format_error(self, repo):
        (repo.content_path / "broken.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ContentFormatError, match="invalid JSON"):
            repo.get_content("broken")

    def test_list_missions_skips_unreadable_files(self, repo):
        (repo.content_path / "broken.json").write_text("{not json", encoding="utf-8")
        (repo.content_path / "odd.json").write_text('{"foo": 1}', encoding="utf-8")

        missions = repo.list_missions()

        assert missions == [{"id": "classic-1", "title": "Classic One", "format": "classic"}]

    def test_missing_directory_lists_nothing(self, tmp_path):
        assert FileMissionContentRepository(tmp_path / "absent").list_missions() == []


# ============================================================================
# FileAttemptResultSink Tests
# ============================================================================


class TestFileAttemptResultSink:
    """Tests for the file-based result sink."""

    @pytest.fixture
    def sink(self, tmp_path):
        return FileAttemptResultSink(tmp_path / "results")

    def test_record_writes_attempt_file(self, sink):
        sink.record_attempt(_result())

        path = sink.attempts_path / "abc123.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["mission_id"] == "CH"
        assert data["unlocked_narrative_ids"] == ["q1", "q2"]
        assert "recorded_at" in data

    def test_record_updates_profile(self, sink):
        sink.record_attempt(_result())

        profile = sink.load_profile("player-1")
        assert profile.xp == 250
        assert profile.level == 2
        assert profile.streak == 1
        assert profile.bonus_seconds_banked == 300
        assert profile.lives_banked == 2
        assert profile.completed_missions == ["CH"]

    def test_replay_does_not_grant_xp_again(self, sink):
        sink.record_attempt(_result())
        sink.record_attempt(_result(attempt_id="def456", bonus_seconds_remaining=10))

        profile = sink.load_profile("player-1")
        assert profile.xp == 250
        assert profile.streak == 2
        assert profile.bonus_seconds_banked == 10
        assert len(sink.list_attempts("player-1")) == 2

    def test_reward_xp_takes_precedence(self, sink):
        sink.record_attempt(_result(reward=MissionReward(xp=150)))
        assert sink.load_profile("player-1").xp == 150

    def test_anonymous_result_has_no_profile(self, sink):
        sink.record_attempt(_result(player_id=None))
        assert not sink.profiles_path.exists()
        assert len(sink.list_attempts()) == 1

    def test_list_attempts_filters_by_player(self, sink):
        sink.record_attempt(_result())
        sink.record_attempt(_result(attempt_id="other", player_id="player-2"))
        assert [a["attempt_id"] for a in sink.list_attempts("player-2")] == ["other"]

    def test_unwritable_path_raises_sink_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        sink = FileAttemptResultSink(blocker)
        with pytest.raises(ResultSinkError):
            sink.record_attempt(_result())

    def test_corrupt_profile_raises_sink_error(self, sink):
        sink.profiles_path.mkdir(parents=True)
        (sink.profiles_path / "player-1.json").write_text("{", encoding="utf-8")
        with pytest.raises(ResultSinkError, match="Corrupt profile"):
            sink.load_profile("player-1")

    def test_begin_season_carries_lives_into_bonus(self, sink):
        sink.record_attempt(_result())

        profile = sink.begin_season("player-1")

        assert profile.bonus_seconds_banked == 420
        assert profile.lives_banked == 0
        assert sink.load_profile("player-1") == profile

    def test_begin_season_for_new_player(self, sink):
        profile = sink.begin_season("newcomer")
        assert profile.bonus_seconds_banked == 0
        assert sink.load_profile("newcomer") == profile


# ============================================================================
# ChainedContentRepository Tests
# ============================================================================


class TestChainedContentRepository:
    """Authored content first, then fallbacks."""

    def test_falls_back_to_next_source(self, tmp_path, make_content, standard_rules):
        authored = FileMissionContentRepository(tmp_path / "empty")
        generated = InMemoryContentRepository([make_content(standard_rules)])
        chained = ChainedContentRepository(authored, generated)

        assert chained.get_content("TEST").mission_id == "TEST"

    def test_all_sources_fail(self):
        chained = ChainedContentRepository(InMemoryContentRepository(), InMemoryContentRepository())
        with pytest.raises(ContentUnavailableError, match="not loaded"):
            chained.get_content("X")

    def test_list_missions_merges_sources(self, make_content, standard_rules):
        first = InMemoryContentRepository([make_content(standard_rules)])
        second = InMemoryContentRepository(
            [make_content(standard_rules).model_copy(update={"mission_id": "OTHER"})]
        )
        ids = [m["id"] for m in ChainedContentRepository(first, second).list_missions()]
        assert ids == ["OTHER", "TEST"]

    def test_requires_a_repository(self):
        with pytest.raises(ValueError):
            ChainedContentRepository()


# ============================================================================
# Config Tests
# ============================================================================


class TestStorageConfig:
    """Tests for environment-driven factories."""

    def test_defaults(self, monkeypatch):
        for name in ("MISSIONQUEST_CONTENT_PATH", "MISSIONQUEST_RESULTS_PATH",
                     "MISSIONQUEST_RULES_PRESET", "MISSIONQUEST_CLOCK"):
            monkeypatch.delenv(name, raising=False)

        assert str(get_content_repository().content_path) == "content/missions"
        assert str(get_result_sink().results_path) == "instance/results"
        assert get_default_rules().question_count == 6
        assert isinstance(make_clock(), ManualClock)

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MISSIONQUEST_CONTENT_PATH", str(tmp_path / "c"))
        monkeypatch.setenv("MISSIONQUEST_RULES_PRESET", "SEASON")
        monkeypatch.setenv("MISSIONQUEST_CLOCK", "asyncio")

        assert get_content_repository().content_path == tmp_path / "c"
        assert get_default_rules().starting_lives == 3
        assert isinstance(make_clock(), AsyncioClock)
        assert isinstance(make_clock(ClockKind.MANUAL), ManualClock)

    def test_unknown_preset_raises(self, monkeypatch):
        monkeypatch.setenv("MISSIONQUEST_RULES_PRESET", "bogus")
        with pytest.raises(ValueError, match="Unknown rules preset"):
            get_default_rules()
