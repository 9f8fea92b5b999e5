"""Configuration for Mission Quest hosts.

This module reads configuration from the environment and provides factory
functions for the content repository, result sink, default rules and clock.
"""

import os
from enum import Enum

from missionquest.engine.clock import AsyncioClock, Clock, ManualClock
from missionquest.models.rules import MissionRules
from missionquest.parameters import get_preset

from .file_repo import FileAttemptResultSink, FileMissionContentRepository
from .repository import AttemptResultSink, MissionContentRepository


class ClockKind(Enum):
    """Available clock implementations."""

    MANUAL = "manual"
    ASYNCIO = "asyncio"


# Default configuration (can be overridden via environment variables)
DEFAULT_CONTENT_PATH = "content/missions"
DEFAULT_RESULTS_PATH = "instance/results"
DEFAULT_RULES_PRESET = "standard"
DEFAULT_CLOCK = ClockKind.MANUAL


def get_content_path() -> str:
    """Get configured mission content path from environment."""
    return os.environ.get("MISSIONQUEST_CONTENT_PATH", DEFAULT_CONTENT_PATH)


def get_results_path() -> str:
    """Get configured results path from environment."""
    return os.environ.get("MISSIONQUEST_RESULTS_PATH", DEFAULT_RESULTS_PATH)


def get_rules_preset() -> str:
    """Get configured rules preset name from environment."""
    return os.environ.get("MISSIONQUEST_RULES_PRESET", DEFAULT_RULES_PRESET)


def get_clock_kind() -> ClockKind:
    """Get configured clock kind from environment.

    Returns:
        ClockKind enum value
    """
    clock_str = os.environ.get("MISSIONQUEST_CLOCK", DEFAULT_CLOCK.value).lower()
    if clock_str == "asyncio":
        return ClockKind.ASYNCIO
    return ClockKind.MANUAL


def get_content_repository() -> MissionContentRepository:
    """Factory function to create the mission content repository."""
    return FileMissionContentRepository(get_content_path())


def get_result_sink() -> AttemptResultSink:
    """Factory function to create the attempt result sink."""
    return FileAttemptResultSink(get_results_path())


def get_default_rules(**overrides) -> MissionRules:
    """Rules from the configured preset.

    Raises:
        ValueError: If MISSIONQUEST_RULES_PRESET names an unknown preset
    """
    return get_preset(get_rules_preset(), **overrides)


def make_clock(kind: ClockKind | None = None) -> Clock:
    """Factory function to create a clock.

    Args:
        kind: Clock kind to use. If None, uses environment config.

    Returns:
        Clock instance. An AsyncioClock binds to the running event loop
        when first armed.
    """
    if kind is None:
        kind = get_clock_kind()

    if kind == ClockKind.ASYNCIO:
        return AsyncioClock()
    return ManualClock()
