"""E2E test fixtures and configuration.

The HTTP app runs with the real coordinator, generators, rate limiter and
lesson transaction. Only the edges are replaced: an in-memory lesson store,
a scripted LLM, a fake speech engine and local audio storage in a temp dir.
"""

import re
import uuid
from collections.abc import AsyncGenerator
from datetime import date
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from app.core.config import Config, get_config
from app.core.container import get_run_coordinator
from app.core.exceptions import RecordAlreadyExistsError, RecordNotFoundError, TTSError
from app.core.rate_limiter import RateLimiter
from app.infrastructure.llm import LLMConfig, LLMResponse
from app.infrastructure.storage import LocalAudioStorage
from app.main import app
from app.models.channel import DEFAULT_ICON_NAME, Channel
from app.models.generation_log import GenerationLog
from app.models.series import Series
from app.prompts.manager import PromptManager
from app.services.generator.audio import AudioSynthesizer
from app.services.generator.content import ContentGenerator, Passage
from app.services.generator.tts.base import BaseTTSEngine, SynthesizedSpeech, VoiceInfo
from app.services.pipeline.coordinator import RunCoordinator
from app.services.storage.transaction import LessonTransaction

API_SECRET = "e2e-secret"
LESSON_DATE = date(2026, 10, 16)

_LINE_COUNT_RE = re.compile(r"EXACTLY (\d+) lines")
_SOURCE_LINE_RE = re.compile(r"^\d+\. (.+)$", re.MULTILINE)


# =============================================================================
# In-memory fakes
# =============================================================================


class InMemoryLessonStore:
    """Dict-backed stand-in for LessonStore."""

    def __init__(self) -> None:
        self.series: dict[uuid.UUID, Series] = {}
        self.channels: dict[uuid.UUID, Channel] = {}
        self.lessons: dict[uuid.UUID, dict[str, Any]] = {}
        self.sentences: dict[uuid.UUID, list[dict[str, Any]]] = {}
        self.translations: dict[uuid.UUID, dict[str, Passage]] = {}
        self.logs: list[GenerationLog] = []
        self.fail_translations = False

    def add_series(self, series: Series) -> Series:
        self.series[series.id] = series
        return series

    async def get_series(self, series_id: uuid.UUID) -> Series | None:
        return self.series.get(series_id)

    async def list_active_series(self) -> list[Series]:
        return sorted(
            (s for s in self.series.values() if s.status == "active"), key=lambda s: s.name
        )

    async def list_series_by_batch(self, batch: int) -> list[Series]:
        return [s for s in await self.list_active_series() if s.batch_number == batch]

    async def get_or_create_channel(self, series: Series) -> Channel:
        if series.id not in self.channels:
            self.channels[series.id] = Channel(
                id=uuid.uuid4(),
                series_id=series.id,
                title=series.name,
                description=series.concept,
                icon_name=DEFAULT_ICON_NAME,
            )
        return self.channels[series.id]

    async def lesson_exists(self, channel_id: uuid.UUID, lesson_date: date) -> bool:
        return any(
            row["channel_id"] == channel_id and row["date"] == lesson_date
            for row in self.lessons.values()
        )

    async def create_lesson(
        self, channel_id: uuid.UUID, title: str, source_url: str, lesson_date: date
    ) -> uuid.UUID:
        if await self.lesson_exists(channel_id, lesson_date):
            raise RecordAlreadyExistsError("Lesson", "date", lesson_date.isoformat())
        lesson_id = uuid.uuid4()
        self.lessons[lesson_id] = {
            "channel_id": channel_id,
            "title": title,
            "source_url": source_url,
            "date": lesson_date,
        }
        return lesson_id

    async def add_sentences(self, lesson_id: uuid.UUID, records: list) -> list[uuid.UUID]:
        rows = [{"id": uuid.uuid4(), **vars(record)} for record in records]
        self.sentences[lesson_id] = rows
        return [row["id"] for row in rows]

    async def store_translations(
        self,
        lesson_id: uuid.UUID,
        sentence_ids: list[uuid.UUID],
        translations: dict[str, Passage],
    ) -> list[str]:
        if self.fail_translations:
            raise RuntimeError("translation insert failed")
        self.translations[lesson_id] = dict(translations)
        return list(translations)

    async def delete_lesson(self, lesson_id: uuid.UUID) -> None:
        if self.lessons.pop(lesson_id, None) is None:
            raise RecordNotFoundError("Lesson", str(lesson_id))
        self.sentences.pop(lesson_id, None)
        self.translations.pop(lesson_id, None)

    async def store_generation_log(self, entry: GenerationLog) -> None:
        self.logs.append(entry)


class ScriptedLLMClient:
    """Answers generation and translation prompts deterministically."""

    def __init__(self) -> None:
        self.prompts: list[str] = []

    async def complete(self, config: LLMConfig, messages: list[dict[str, str]]) -> LLMResponse:
        prompt = messages[-1]["content"]
        self.prompts.append(prompt)

        if "professional translator" in prompt:
            source = prompt.split("Lines:", 1)[1].split("Please provide", 1)[0]
            lines = _SOURCE_LINE_RE.findall(source)
            text = "\n".join(["[ja] Title", *(f"[ja] {line}" for line in lines)])
        else:
            match = _LINE_COUNT_RE.search(prompt)
            count = int(match.group(1)) if match else 3
            text = "World Food Day\n" + "\n".join(
                f"{i + 1}. Sentence number {i + 1} about food." for i in range(count)
            )
        return LLMResponse(content=text, model=config.model, usage={})


class FakeTTSEngine(BaseTTSEngine):
    """Returns a tiny fake MP3 payload; can fail on a given text."""

    name = "fake"

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail_on: str | None = None

    async def synthesize(self, text: str, voice_id: str, prompt: str) -> SynthesizedSpeech:
        self.calls.append((text, voice_id))
        if self.fail_on is not None and self.fail_on in text:
            raise TTSError("Speech response carried no audio", engine=self.name, voice_id=voice_id)
        return SynthesizedSpeech(audio=b"ID3" + text.encode(), voice_id=voice_id)

    def get_available_voices(self, language: str | None = None) -> list[VoiceInfo]:
        return []


# =============================================================================
# Wiring
# =============================================================================


@pytest.fixture
def lesson_store() -> InMemoryLessonStore:
    return InMemoryLessonStore()


@pytest.fixture
def tts_engine() -> FakeTTSEngine:
    return FakeTTSEngine()


@pytest.fixture
def llm_client() -> ScriptedLLMClient:
    return ScriptedLLMClient()


@pytest.fixture
def audio_root(tmp_path: Path) -> Path:
    return tmp_path / "outputs"


@pytest.fixture
def coordinator(
    lesson_store,
    tts_engine,
    llm_client,
    audio_root,
    generation_config,
    voice_config,
    recording_sleep,
    fake_clock,
) -> RunCoordinator:
    storage = LocalAudioStorage(audio_root, "audio-files", "http://testserver/audio")
    limiter = RateLimiter(
        requests_per_minute=10, safety_buffer=0.0, clock=fake_clock, sleep=recording_sleep
    )
    return RunCoordinator(
        store=lesson_store,
        content_generator=ContentGenerator(
            llm_client, PromptManager(), generation_config, sleep=recording_sleep
        ),
        audio_synthesizer=AudioSynthesizer(
            tts_engine, limiter, voice_config, generation_config.tts_retry, sleep=recording_sleep
        ),
        transaction=LessonTransaction(lesson_store, storage, clock=fake_clock),
        config=generation_config,
        default_languages=["ja"],
        clock=fake_clock,
        sleep=recording_sleep,
        today=lambda: LESSON_DATE,
    )


@pytest_asyncio.fixture
async def client(coordinator) -> AsyncGenerator[httpx.AsyncClient, None]:
    config = Config(_env_file=None, api_secret=API_SECRET)
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_run_coordinator] = lambda: coordinator
    async with httpx.AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
        headers={"x-api-secret": API_SECRET},
    ) as http_client:
        yield http_client
    app.dependency_overrides.clear()
