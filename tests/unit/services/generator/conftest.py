"""Fixtures for generator service tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.rate_limiter import RateLimiter
from app.prompts.manager import PromptManager
from app.services.generator.tts.base import SynthesizedSpeech


@pytest.fixture
def mock_llm_client() -> MagicMock:
    """LLM client whose ``complete`` is an AsyncMock."""
    client = MagicMock()
    client.complete = AsyncMock()
    return client


@pytest.fixture
def prompt_manager() -> PromptManager:
    return PromptManager()


@pytest.fixture
def mock_tts_engine() -> MagicMock:
    """TTS engine echoing the requested voice."""
    engine = MagicMock()
    engine.name = "fake-tts"

    async def synthesize(text: str, voice_id: str, prompt: str) -> SynthesizedSpeech:
        return SynthesizedSpeech(audio=f"audio:{text}".encode(), voice_id=voice_id)

    engine.synthesize = AsyncMock(side_effect=synthesize)
    return engine


@pytest.fixture
def mock_rate_limiter() -> MagicMock:
    limiter = MagicMock(spec=RateLimiter)
    limiter.wait_if_needed = AsyncMock(return_value=0.0)
    return limiter
