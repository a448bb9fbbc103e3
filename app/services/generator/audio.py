"""Sentence-by-sentence audio synthesis.

Every lesson line becomes its own audio clip so playback can move
between sentences. Calls run strictly one after another through the
shared rate limiter; a line that still fails after retries aborts the
whole lesson so sentence order never has gaps.
"""

import asyncio
from collections import Counter
from dataclasses import dataclass

from app.config.generation import RetryConfig
from app.config.tts import TTSVoiceConfig
from app.core.exceptions import ShadowCastError, TTSError
from app.core.logging import get_logger
from app.core.rate_limiter import RateLimiter
from app.core.retry import retry_with_backoff
from app.core.types import SleepFunc
from app.models.series import Series
from app.services.generator.tts.base import BaseTTSEngine
from app.services.generator.tts.utils import estimate_audio_duration

logger = get_logger(__name__)


@dataclass(frozen=True)
class VoicePlan:
    """Voice and prompt selection for one lesson.

    Attributes:
        default_voice: Voice for even-indexed lines (all lines without alternation)
        default_prompt: Prompt paired with ``default_voice``
        alternate_voice: Voice for odd-indexed lines when alternation is on
        alternate_prompt: Prompt paired with ``alternate_voice``
    """

    default_voice: str
    default_prompt: str
    alternate_voice: str | None = None
    alternate_prompt: str | None = None

    @property
    def alternation_enabled(self) -> bool:
        return self.alternate_voice is not None

    def voice_for(self, index: int) -> tuple[str, str]:
        """Return ``(voice, prompt)`` for the line at ``index``."""
        if self.alternate_voice is not None and index % 2 == 1:
            return self.alternate_voice, self.alternate_prompt or self.default_prompt
        return self.default_voice, self.default_prompt


@dataclass
class SentenceAudio:
    """Audio clip for one lesson line.

    Attributes:
        line_index: Zero-based position of the line
        audio: Encoded audio bytes
        mime_type: MIME type of ``audio``
        file_name: Storage file name
        voice_used: Voice that produced the clip
        duration: Estimated duration in seconds
    """

    line_index: int
    audio: bytes
    mime_type: str
    file_name: str
    voice_used: str
    duration: int


def sentence_file_name(index: int) -> str:
    return f"sentence_{index}.mp3"


def resolve_voice_plan(series: Series | None, voice_config: TTSVoiceConfig) -> VoicePlan:
    """Resolve voices and prompts from a series' voice settings.

    - Unknown or missing voice names fall back to the configured defaults.
    - A series prompt is prefixed with the English instruction; without
      one the difficulty prompt is used.
    - With alternation on and no custom alternate prompt, both speakers
      use the Person A / Person B conversation prompts.

    Args:
        series: Series configuration (None for defaults)
        voice_config: Voice catalog and default prompts

    Returns:
        VoicePlan for the lesson
    """
    default_voice = voice_config.valid_voice(
        series.default_voice_name if series else None, voice_config.default_voice
    )

    custom_prompt = series.gemini_tts_prompt if series else None
    if custom_prompt:
        default_prompt = voice_config.custom_prompt_prefix + custom_prompt
    else:
        default_prompt = voice_config.prompt_for_difficulty(
            series.difficulty_level if series else None
        )

    if not (series and series.enable_voice_alternation):
        return VoicePlan(default_voice=default_voice, default_prompt=default_prompt)

    alternate_voice = voice_config.valid_voice(
        series.alternate_voice_name, voice_config.alternate_voice
    )
    if series.gemini_tts_alt_prompt:
        alternate_prompt = voice_config.custom_prompt_prefix + series.gemini_tts_alt_prompt
    else:
        default_prompt = voice_config.narrator_prompt
        alternate_prompt = voice_config.partner_prompt

    return VoicePlan(
        default_voice=default_voice,
        default_prompt=default_prompt,
        alternate_voice=alternate_voice,
        alternate_prompt=alternate_prompt,
    )


class AudioSynthesizer:
    """Produce one audio clip per lesson line.

    Example:
        >>> synthesizer = AudioSynthesizer(engine, rate_limiter, voice_config, retry_config)
        >>> clips = await synthesizer.synthesize_lines(passage.lines, series)
    """

    def __init__(
        self,
        engine: BaseTTSEngine,
        rate_limiter: RateLimiter,
        voice_config: TTSVoiceConfig,
        retry_config: RetryConfig,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize AudioSynthesizer.

        Args:
            engine: TTS engine
            rate_limiter: Limiter shared by every synthesis call of the process
            voice_config: Voice catalog and default prompts
            retry_config: Retry settings for one synthesis call
            sleep: Awaitable sleep used for retry delays
        """
        self.engine = engine
        self.rate_limiter = rate_limiter
        self.voice_config = voice_config
        self.retry_config = retry_config
        self._sleep = sleep

    async def synthesize_lines(
        self,
        lines: list[str],
        series: Series | None = None,
    ) -> list[SentenceAudio]:
        """Synthesize every line in order.

        Args:
            lines: Lesson lines
            series: Series voice configuration

        Returns:
            SentenceAudio list, one per line, in line order

        Raises:
            ShadowCastError: If any line fails after retries, tagged with its index
        """
        plan = resolve_voice_plan(series, self.voice_config)
        total = len(lines)

        logger.info(
            "Generating sentence audio",
            series_name=series.name if series else None,
            sentence_count=total,
            default_voice=plan.default_voice,
            alternate_voice=plan.alternate_voice,
            has_custom_prompt=bool(series and series.gemini_tts_prompt),
            has_custom_alt_prompt=bool(series and series.gemini_tts_alt_prompt),
        )

        clips: list[SentenceAudio] = []
        for index, text in enumerate(lines):
            voice, prompt = plan.voice_for(index)
            await self.rate_limiter.wait_if_needed()

            clips.append(await self._synthesize_line(index, total, text, voice, prompt))

        logger.info(
            "All sentence audio generated",
            total_files=len(clips),
            voice_usage=dict(Counter(clip.voice_used for clip in clips)),
            total_size_kb=round(sum(len(clip.audio) for clip in clips) / 1024, 1),
        )
        return clips

    async def _synthesize_line(
        self,
        index: int,
        total: int,
        text: str,
        voice: str,
        prompt: str,
    ) -> SentenceAudio:
        try:
            speech = await retry_with_backoff(
                lambda: self.engine.synthesize(text, voice, prompt),
                f"TTS sentence {index + 1}/{total}",
                max_retries=self.retry_config.max_retries,
                base_delay=self.retry_config.base_delay,
                sleep=self._sleep,
            )
        except ShadowCastError as e:
            logger.error(
                "Sentence synthesis failed",
                line_index=index,
                voice=voice,
                error=str(e),
            )
            e.with_context(line_index=index)
            raise
        except Exception as e:
            logger.error(
                "Sentence synthesis failed",
                line_index=index,
                voice=voice,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TTSError(
                f"Speech synthesis failed for sentence {index + 1}/{total}: {e}",
                engine=self.engine.name,
                voice_id=voice,
                line_index=index,
            ) from e

        duration = estimate_audio_duration(text)
        logger.info(
            "Sentence audio completed",
            line_index=index,
            total=total,
            voice=speech.voice_id,
            size_kb=round(len(speech.audio) / 1024, 1),
            duration=duration,
        )
        return SentenceAudio(
            line_index=index,
            audio=speech.audio,
            mime_type=speech.mime_type,
            file_name=sentence_file_name(index),
            voice_used=speech.voice_id,
            duration=duration,
        )


__all__ = [
    "AudioSynthesizer",
    "SentenceAudio",
    "VoicePlan",
    "resolve_voice_plan",
    "sentence_file_name",
]
