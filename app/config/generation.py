"""Generation run configuration models.

Tunables for retries, provider rate limits and the execution-time budget
of one generation run. Defaults mirror the limits of the hosted providers.
"""

from pydantic import BaseModel, Field

# Display names used inside translation prompts
LANGUAGE_NAMES: dict[str, str] = {
    "ja": "Japanese",
    "fr": "French",
    "ko": "Korean",
    "zh-Hans": "Chinese (Simplified)",
    "zh-Hant": "Chinese (Traditional)",
    "es": "Spanish",
    "de": "German",
    "pt": "Portuguese",
    "it": "Italian",
    "ar": "Arabic",
    "hi": "Hindi",
}


def language_name(code: str) -> str:
    """Return the display name for a language code (the code itself if unknown)."""
    return LANGUAGE_NAMES.get(code, code)


class RetryConfig(BaseModel):
    """Retry settings for one class of provider call.

    Attributes:
        max_retries: Retries after the first attempt
        base_delay: Delay before the first retry in seconds
    """

    max_retries: int = Field(default=2, ge=0, le=10, description="Retries after first attempt")
    base_delay: float = Field(default=5.0, ge=0.0, description="Base delay in seconds")


class RateLimitConfig(BaseModel):
    """Speech-synthesis request spacing.

    Attributes:
        requests_per_minute: Provider ceiling
        safety_buffer: Extra seconds between calls
    """

    requests_per_minute: int = Field(default=10, ge=1, description="Requests per minute")
    safety_buffer: float = Field(default=1.0, ge=0.0, description="Extra spacing in seconds")


class TimeBudgetConfig(BaseModel):
    """Execution-time ceiling of a single run.

    Attributes:
        ceiling_seconds: Hard limit imposed by the host
        safety_buffer_seconds: Margin kept free at the end of the run
        seconds_per_sentence: Estimated synthesis time per sentence, including spacing
    """

    ceiling_seconds: float = Field(default=600.0, gt=0, description="Host execution ceiling")
    safety_buffer_seconds: float = Field(default=60.0, ge=0, description="Reserved margin")
    seconds_per_sentence: float = Field(default=7.0, gt=0, description="Per-sentence estimate")


class GenerationConfig(BaseModel):
    """Complete generation run configuration.

    Attributes:
        content_retry: Retry settings for text generation and translation
        tts_retry: Retry settings for speech synthesis
        rate_limit: Speech-synthesis spacing
        time_budget: Run time budget
        default_line_count: Line count when a series does not set one
        default_difficulty: Difficulty when a series does not set one
        series_pause_seconds: Pause between two series
        language_pause_seconds: Pause between two translation languages
    """

    content_retry: RetryConfig = Field(default_factory=RetryConfig)
    tts_retry: RetryConfig = Field(
        default_factory=lambda: RetryConfig(max_retries=3, base_delay=1.0)
    )
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    time_budget: TimeBudgetConfig = Field(default_factory=TimeBudgetConfig)

    default_line_count: int = Field(default=10, ge=1, le=50)
    default_difficulty: str = Field(
        default="intermediate", pattern=r"^(beginner|intermediate|advanced)$"
    )
    series_pause_seconds: float = Field(default=5.0, ge=0.0)
    language_pause_seconds: float = Field(default=2.0, ge=0.0)


__all__ = [
    "LANGUAGE_NAMES",
    "GenerationConfig",
    "RateLimitConfig",
    "RetryConfig",
    "TimeBudgetConfig",
    "language_name",
]
