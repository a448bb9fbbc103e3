"""Tests for lesson text generation."""

from datetime import date

import pytest

from app.core.exceptions import (
    ErrorKind,
    ExternalAPIError,
    GenerationEmptyError,
    ParseEmptyError,
    TranslationError,
)
from app.services.generator.content import (
    ContentGenerator,
    Passage,
    format_lesson_date,
    parse_lines,
)
from app.infrastructure.llm import LLMResponse

LESSON_DATE = date(2026, 10, 16)


def llm_response(content: str) -> LLMResponse:
    return LLMResponse(content=content, model="gemini/gemini-2.5-flash", usage={})


@pytest.fixture
def generator(mock_llm_client, prompt_manager, generation_config, recording_sleep):
    return ContentGenerator(
        llm_client=mock_llm_client,
        prompt_manager=prompt_manager,
        config=generation_config,
        sleep=recording_sleep,
    )


class TestParseLines:
    """Tests for parse_lines."""

    def test_strips_blank_lines_and_whitespace(self) -> None:
        assert parse_lines("  Title \n\n Line one.\n   \nLine two.  ") == [
            "Title",
            "Line one.",
            "Line two.",
        ]

    def test_removes_numbering(self) -> None:
        assert parse_lines("1. First\n2) Second\n10.Third") == ["First", "Second", "Third"]

    def test_drops_lines_that_were_only_numbering(self) -> None:
        assert parse_lines("Title\n3.\nText") == ["Title", "Text"]

    def test_keeps_inner_numbers(self) -> None:
        assert parse_lines("In 1945 the FAO was founded.") == ["In 1945 the FAO was founded."]

    def test_empty(self) -> None:
        assert parse_lines("\n \n") == []


class TestFormatLessonDate:
    """Tests for format_lesson_date."""

    def test_format(self) -> None:
        assert format_lesson_date(LESSON_DATE) == "Friday, October 16, 2026"

    def test_no_zero_padding(self) -> None:
        assert format_lesson_date(date(2026, 3, 1)) == "Sunday, March 1, 2026"


class TestGeneratePassage:
    """Tests for ContentGenerator.generate_passage."""

    @pytest.mark.asyncio
    async def test_success(self, generator, mock_llm_client, make_series) -> None:
        """Title and lines are split from the model output."""
        mock_llm_client.complete.return_value = llm_response(
            "World Food Day\n1. Line one.\n2. Line two.\n3. Line three."
        )

        passage = await generator.generate_passage(LESSON_DATE, make_series(line_count=3))

        assert passage == Passage(
            title="World Food Day", lines=["Line one.", "Line two.", "Line three."]
        )
        prompt = mock_llm_client.complete.call_args.kwargs["messages"][0]["content"]
        assert "Friday, October 16, 2026" in prompt
        assert "EXACTLY 3 lines" in prompt
        assert '"World Days"' in prompt

    @pytest.mark.asyncio
    async def test_uses_template_llm_settings(self, generator, mock_llm_client) -> None:
        """Model parameters come from the prompt template."""
        mock_llm_client.complete.return_value = llm_response("Title\nLine.")

        await generator.generate_passage(LESSON_DATE)

        config = mock_llm_client.complete.call_args.kwargs["config"]
        assert config.model == "gemini/gemini-2.5-flash"
        assert config.max_tokens == 2000
        assert config.temperature == 0.8

    @pytest.mark.asyncio
    async def test_defaults_without_series(self, generator, mock_llm_client) -> None:
        """Default series name and line count are used without a series."""
        mock_llm_client.complete.return_value = llm_response("Title\nLine.")

        await generator.generate_passage(LESSON_DATE)

        prompt = mock_llm_client.complete.call_args.kwargs["messages"][0]["content"]
        assert '"Daily Content"' in prompt
        assert "EXACTLY 10 lines" in prompt

    @pytest.mark.asyncio
    async def test_empty_response(self, generator, mock_llm_client) -> None:
        mock_llm_client.complete.return_value = llm_response("   ")

        with pytest.raises(GenerationEmptyError):
            await generator.generate_passage(LESSON_DATE)

    @pytest.mark.asyncio
    async def test_title_only(self, generator, mock_llm_client) -> None:
        """A title without content lines is a parse failure."""
        mock_llm_client.complete.return_value = llm_response("Only a title\n\n")

        with pytest.raises(ParseEmptyError):
            await generator.generate_passage(LESSON_DATE)

    @pytest.mark.asyncio
    async def test_retries_transient_errors(
        self, generator, mock_llm_client, recording_sleep
    ) -> None:
        """Unavailable errors are retried with backoff."""
        unavailable = ExternalAPIError("llm", "503", kind=ErrorKind.UNAVAILABLE)
        mock_llm_client.complete.side_effect = [
            unavailable,
            unavailable,
            llm_response("Title\nLine."),
        ]

        passage = await generator.generate_passage(LESSON_DATE)

        assert passage.lines == ["Line."]
        assert recording_sleep.calls == [5.0, 15.0]

    @pytest.mark.asyncio
    async def test_fatal_error_not_retried(
        self, generator, mock_llm_client, recording_sleep
    ) -> None:
        mock_llm_client.complete.side_effect = ExternalAPIError(
            "llm", "bad key", kind=ErrorKind.AUTHORIZATION
        )

        with pytest.raises(ExternalAPIError):
            await generator.generate_passage(LESSON_DATE)

        assert mock_llm_client.complete.await_count == 1
        assert recording_sleep.calls == []


class TestTranslate:
    """Tests for ContentGenerator.translate."""

    PASSAGE = Passage(title="World Food Day", lines=["Line one.", "Line two."])

    @pytest.mark.asyncio
    async def test_success(self, generator, mock_llm_client) -> None:
        mock_llm_client.complete.return_value = llm_response(
            "世界食料デー\n1. 一行目。\n2. 二行目。"
        )

        translated = await generator.translate(self.PASSAGE, "ja")

        assert translated.title == "世界食料デー"
        assert translated.lines == ["一行目。", "二行目。"]
        prompt = mock_llm_client.complete.call_args.kwargs["messages"][0]["content"]
        assert "into Japanese" in prompt
        assert "1. Line one." in prompt

    @pytest.mark.asyncio
    async def test_title_only_accepted(self, generator, mock_llm_client) -> None:
        """A translation with only a title is kept with no lines."""
        mock_llm_client.complete.return_value = llm_response("Journée mondiale")

        translated = await generator.translate(self.PASSAGE, "fr")

        assert translated == Passage(title="Journée mondiale", lines=[])

    @pytest.mark.asyncio
    async def test_empty_response(self, generator, mock_llm_client) -> None:
        mock_llm_client.complete.return_value = llm_response("")

        with pytest.raises(TranslationError, match="empty response for French") as exc_info:
            await generator.translate(self.PASSAGE, "fr")

        assert exc_info.value.language == "fr"

    @pytest.mark.asyncio
    async def test_provider_failure_wrapped(self, generator, mock_llm_client) -> None:
        error = ExternalAPIError("llm", "denied", kind=ErrorKind.AUTHORIZATION)
        mock_llm_client.complete.side_effect = error

        with pytest.raises(TranslationError, match="to Japanese") as exc:
            await generator.translate(self.PASSAGE, "ja")

        assert exc.value.__cause__ is error


class TestGenerateWithTranslations:
    """Tests for ContentGenerator.generate_with_translations."""

    @pytest.mark.asyncio
    async def test_translations_in_order_with_pauses(
        self, generator, mock_llm_client, recording_sleep
    ) -> None:
        mock_llm_client.complete.side_effect = [
            llm_response("Title\nLine."),
            llm_response("タイトル\n行。"),
            llm_response("Titre\nLigne."),
        ]

        lesson = await generator.generate_with_translations(
            LESSON_DATE, None, ["ja", "fr"], pause_seconds=2.0
        )

        assert lesson.passage.title == "Title"
        assert list(lesson.translations) == ["ja", "fr"]
        assert lesson.translations["fr"].lines == ["Ligne."]
        assert recording_sleep.calls == [2.0]

    @pytest.mark.asyncio
    async def test_no_languages(self, generator, mock_llm_client) -> None:
        mock_llm_client.complete.return_value = llm_response("Title\nLine.")

        lesson = await generator.generate_with_translations(LESSON_DATE, None, [])

        assert lesson.translations == {}
        assert mock_llm_client.complete.await_count == 1
