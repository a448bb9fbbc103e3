"""Lesson text generation.

Produces the English passage for a series and date, plus line-aligned
translations, through the LLM client. The provider returns free text; all
structure is recovered by ``parse_lines``.
"""

import asyncio
import re
from dataclasses import dataclass, field
from datetime import date

from app.config.generation import GenerationConfig, language_name
from app.core.exceptions import GenerationEmptyError, ParseEmptyError, TranslationError
from app.core.logging import get_logger
from app.core.retry import retry_with_backoff
from app.core.types import SleepFunc
from app.infrastructure.llm import LLMClient, LLMConfig
from app.models.series import Series
from app.prompts.manager import PromptManager, PromptType

logger = get_logger(__name__)

# Leading "1." / "2)" style numbering
_NUMBERING_PATTERN = re.compile(r"^\d+[.)]\s*")

DEFAULT_SERIES_NAME = "Daily Content"
DEFAULT_SERIES_CONCEPT = "Daily news content about special days and current events"


@dataclass
class Passage:
    """A title plus ordered content lines.

    Attributes:
        title: First non-empty line of the model output
        lines: Remaining lines, in order
    """

    title: str
    lines: list[str]

    @property
    def summary(self) -> str:
        return "\n".join(self.lines)


@dataclass
class GeneratedLesson:
    """English passage with its translations.

    Attributes:
        passage: English passage
        translations: Translated passages keyed by language code, in request order
    """

    passage: Passage
    translations: dict[str, Passage] = field(default_factory=dict)


def parse_lines(text: str) -> list[str]:
    """Split model output into clean lines.

    Lines are trimmed, blank lines dropped, leading ``N.`` / ``N)``
    numbering removed, and lines left empty by that removal dropped too.

    Args:
        text: Raw model output

    Returns:
        Ordered list of non-empty lines
    """
    stripped = (line.strip() for line in text.split("\n"))
    unnumbered = (_NUMBERING_PATTERN.sub("", line) for line in stripped if line)
    return [line for line in unnumbered if line]


def format_lesson_date(target: date) -> str:
    """Format a date as e.g. ``Friday, October 16, 2026``."""
    return f"{target:%A}, {target:%B} {target.day}, {target.year}"


class ContentGenerator:
    """Generate lesson passages and translations with an LLM.

    Example:
        >>> generator = ContentGenerator(llm_client, prompt_manager, config)
        >>> lesson = await generator.generate_with_translations(date.today(), series, ["ja"])
        >>> lesson.passage.title
    """

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_manager: PromptManager,
        config: GenerationConfig,
        model: str | None = None,
        timeout: int = 60,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize ContentGenerator.

        Args:
            llm_client: LLM client
            prompt_manager: Prompt template manager
            config: Generation configuration (retry settings, defaults)
            model: Model override (defaults to the one in each prompt template)
            timeout: Request timeout in seconds
            sleep: Awaitable sleep used for retry delays and language pauses
        """
        self.llm_client = llm_client
        self.prompt_manager = prompt_manager
        self.config = config
        self.model = model
        self.timeout = timeout
        self._sleep = sleep

    def _llm_config(self, prompt_type: PromptType) -> LLMConfig:
        settings = self.prompt_manager.get_llm_settings(prompt_type)
        return LLMConfig(
            model=self.model or settings.model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            timeout=self.timeout,
        )

    async def _complete(self, prompt: str, llm_config: LLMConfig, operation_name: str) -> str:
        retry = self.config.content_retry

        async def call() -> str:
            response = await self.llm_client.complete(
                config=llm_config,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.content

        return await retry_with_backoff(
            call,
            operation_name,
            max_retries=retry.max_retries,
            base_delay=retry.base_delay,
            sleep=self._sleep,
        )

    async def generate_passage(self, target_date: date, series: Series | None = None) -> Passage:
        """Generate the English passage for a date.

        Args:
            target_date: Date the lesson is about
            series: Series providing concept, difficulty and line count

        Returns:
            Parsed passage

        Raises:
            GenerationEmptyError: If the model returns no text
            ParseEmptyError: If no content lines survive parsing
            ExternalAPIError: If the provider call fails after retries
        """
        series_name = series.name if series and series.name else DEFAULT_SERIES_NAME
        line_count = (series.line_count if series else None) or self.config.default_line_count
        difficulty = (
            series.difficulty_level if series else None
        ) or self.config.default_difficulty

        prompt = self.prompt_manager.render(
            PromptType.LESSON_GENERATION,
            date_str=format_lesson_date(target_date),
            series_name=series_name,
            series_concept=(series.concept if series else None) or DEFAULT_SERIES_CONCEPT,
            line_count=line_count,
            difficulty=difficulty,
            additional_prompt=(series.ai_generation_prompt if series else None) or "",
        )
        llm_config = self._llm_config(PromptType.LESSON_GENERATION)

        logger.info(
            "Generating passage",
            series_name=series_name,
            date=target_date.isoformat(),
            line_count=line_count,
            difficulty=difficulty,
        )

        text = await self._complete(
            prompt, llm_config, f"Content generation for {series_name}"
        )
        if not text or not text.strip():
            raise GenerationEmptyError(model=llm_config.model)

        all_lines = parse_lines(text)
        if len(all_lines) < 2:
            raise ParseEmptyError(
                model=llm_config.model,
                context={"response_length": len(text)},
            )

        passage = Passage(title=all_lines[0], lines=all_lines[1:])
        logger.info(
            "Passage generated",
            series_name=series_name,
            title=passage.title,
            line_count=len(passage.lines),
            requested_lines=line_count,
            word_count=len(text.split()),
        )
        return passage

    async def translate(self, passage: Passage, language: str) -> Passage:
        """Translate a passage line by line.

        The translated line count may differ from the source; callers
        match sentences positionally.

        Args:
            passage: English passage
            language: Target language code

        Returns:
            Translated passage

        Raises:
            TranslationError: If the translation fails or yields no lines
        """
        name = language_name(language)
        prompt = self.prompt_manager.render(
            PromptType.LESSON_TRANSLATION,
            language_name=name,
            title=passage.title,
            lines=passage.lines,
        )
        llm_config = self._llm_config(PromptType.LESSON_TRANSLATION)

        logger.info("Translating passage", language=language, language_name=name)

        try:
            text = await self._complete(prompt, llm_config, f"Translation to {name}")
        except Exception as e:
            raise TranslationError(
                f"Failed to translate content to {name}: {e}", language=language
            ) from e

        if not text or not text.strip():
            raise TranslationError(
                f"Model returned empty response for {name} translation", language=language
            )

        all_lines = parse_lines(text)
        if not all_lines:
            raise TranslationError(
                f"Failed to parse {name} translation into lines", language=language
            )

        translated = Passage(title=all_lines[0], lines=all_lines[1:])
        if len(translated.lines) != len(passage.lines):
            logger.warning(
                "Translation line count differs from source",
                language=language,
                source_lines=len(passage.lines),
                translated_lines=len(translated.lines),
            )
        return translated

    async def generate_with_translations(
        self,
        target_date: date,
        series: Series | None,
        languages: list[str],
        pause_seconds: float | None = None,
    ) -> GeneratedLesson:
        """Generate the English passage and translate it into each language.

        Args:
            target_date: Date the lesson is about
            series: Series configuration
            languages: Target language codes, in order
            pause_seconds: Pause between two translations (config default if None)

        Returns:
            GeneratedLesson with translations keyed by language
        """
        pause = self.config.language_pause_seconds if pause_seconds is None else pause_seconds

        passage = await self.generate_passage(target_date, series)
        lesson = GeneratedLesson(passage=passage)

        for index, language in enumerate(languages):
            if index > 0 and pause > 0:
                await self._sleep(pause)
            lesson.translations[language] = await self.translate(passage, language)

        logger.info(
            "Lesson content ready",
            title=passage.title,
            line_count=len(passage.lines),
            translations={lang: len(p.lines) for lang, p in lesson.translations.items()},
        )
        return lesson


__all__ = [
    "ContentGenerator",
    "GeneratedLesson",
    "Passage",
    "format_lesson_date",
    "parse_lines",
]
