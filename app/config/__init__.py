"""Generation and voice configuration models."""

from app.config.generation import (
    LANGUAGE_NAMES,
    GenerationConfig,
    RateLimitConfig,
    RetryConfig,
    TimeBudgetConfig,
    language_name,
)
from app.config.tts import FEMALE_VOICES, MALE_VOICES, VALID_VOICES, TTSVoiceConfig

__all__ = [
    # Generation
    "GenerationConfig",
    "RetryConfig",
    "RateLimitConfig",
    "TimeBudgetConfig",
    "LANGUAGE_NAMES",
    "language_name",
    # TTS
    "TTSVoiceConfig",
    "VALID_VOICES",
    "FEMALE_VOICES",
    "MALE_VOICES",
]
