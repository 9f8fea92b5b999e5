"""Storage module for Mission Quest.

This module provides the content and result interfaces the engine depends
on, their file-based and in-memory implementations, content normalisation
for every mission format, and environment-driven factories.

Usage:
    from missionquest.storage import get_content_repository, get_result_sink

    # Get repository and sink using configured paths (from environment)
    content = get_content_repository()
    sink = get_result_sink()

    # Or fall back from authored content to generated content
    from missionquest.storage import ChainedContentRepository, FileMissionContentRepository
    content = ChainedContentRepository(
        FileMissionContentRepository("content/missions"),
        FileMissionContentRepository("content/generated"),
    )

Configuration via environment variables:
    MISSIONQUEST_CONTENT_PATH: Path to mission JSON files (default: "content/missions")
    MISSIONQUEST_RESULTS_PATH: Path for attempts and profiles (default: "instance/results")
    MISSIONQUEST_RULES_PRESET: Default rules preset (default: "standard")
    MISSIONQUEST_CLOCK: "manual" or "asyncio" (default: "manual")
"""

from .chained import ChainedContentRepository
from .config import (
    ClockKind,
    get_clock_kind,
    get_content_path,
    get_content_repository,
    get_default_rules,
    get_result_sink,
    get_results_path,
    get_rules_preset,
    make_clock,
)
from .file_repo import FileAttemptResultSink, FileMissionContentRepository
from .memory_repo import InMemoryAttemptResultSink, InMemoryContentRepository
from .normalize import detect_format, normalize_content
from .repository import AttemptResultSink, MissionContentRepository

__all__ = [
    # Abstract interfaces
    "MissionContentRepository",
    "AttemptResultSink",
    # File implementations
    "FileMissionContentRepository",
    "FileAttemptResultSink",
    # In-memory implementations
    "InMemoryContentRepository",
    "InMemoryAttemptResultSink",
    # Fallback
    "ChainedContentRepository",
    # Normalisation
    "detect_format",
    "normalize_content",
    # Configuration
    "ClockKind",
    "get_content_path",
    "get_results_path",
    "get_rules_preset",
    "get_clock_kind",
    # Factory functions
    "get_content_repository",
    "get_result_sink",
    "get_default_rules",
    "make_clock",
]
