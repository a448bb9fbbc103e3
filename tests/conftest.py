"""Pytest configuration and fixtures.

This module provides common fixtures used across all tests.
"""

import uuid
from collections.abc import Callable
from typing import Any

import pytest

from app.config.generation import GenerationConfig, RetryConfig
from app.config.tts import TTSVoiceConfig
from app.core.logging import setup_logging
from app.models.series import DifficultyLevel, Series, SeriesStatus

# Setup logging for tests
setup_logging()


class RecordingSleep:
    """Awaitable sleep that records requested delays instead of blocking."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Sleep replacement that never blocks.

    Returns:
        RecordingSleep instance
    """
    return RecordingSleep()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Manually advanced clock.

    Returns:
        FakeClock starting at 1000.0
    """
    return FakeClock()


@pytest.fixture
def generation_config() -> GenerationConfig:
    """Generation config without pauses between series or languages."""
    return GenerationConfig(
        content_retry=RetryConfig(max_retries=2, base_delay=5.0),
        tts_retry=RetryConfig(max_retries=3, base_delay=1.0),
        series_pause_seconds=0.0,
        language_pause_seconds=0.0,
    )


@pytest.fixture
def voice_config() -> TTSVoiceConfig:
    """Default voice configuration."""
    return TTSVoiceConfig()


@pytest.fixture
def make_series() -> Callable[..., Series]:
    """Factory for unsaved Series rows with sensible defaults.

    Returns:
        Callable accepting Series column overrides
    """

    def _make(**overrides: Any) -> Series:
        fields: dict[str, Any] = {
            "id": uuid.uuid4(),
            "name": "World Days",
            "concept": "Special days and observances around the world",
            "cover_image_url": None,
            "line_count": 5,
            "difficulty_level": DifficultyLevel.INTERMEDIATE.value,
            "ai_generation_prompt": None,
            "enable_voice_alternation": False,
            "default_voice_name": None,
            "alternate_voice_name": None,
            "gemini_tts_prompt": None,
            "gemini_tts_alt_prompt": None,
            "batch_number": 1,
            "status": SeriesStatus.ACTIVE.value,
        }
        fields.update(overrides)
        return Series(**fields)

    return _make
