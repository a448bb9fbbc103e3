"""Generation run coordinator.

Runs one generation pass over a set of series:

    resolve series
      -> per series: idempotency check -> time budget -> text -> audio -> persist
    -> record generation log

Series are processed strictly one after another. A failing series is
recorded and the run moves on; the generation log is written on every
exit path, including when series resolution itself fails.
"""

import asyncio
import math
import platform
import time
import uuid
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from app.config.generation import GenerationConfig, TimeBudgetConfig
from app.core.exceptions import RecordAlreadyExistsError
from app.core.logging import get_logger, run_context
from app.core.types import Clock, SleepFunc
from app.models.generation_log import GenerationLog, GenerationStatus, TriggerType
from app.models.series import Series
from app.services.generator.audio import AudioSynthesizer
from app.services.generator.content import ContentGenerator
from app.services.storage.lesson_store import LessonStore
from app.services.storage.transaction import LessonTransaction

logger = get_logger(__name__)


def utc_today() -> date:
    return datetime.now(UTC).date()


def source_descriptor(series_name: str, lesson_date: date) -> str:
    """Source string stored on generated lessons, e.g. ``AI Generated - X (10/16/2026)``."""
    day = f"{lesson_date.month}/{lesson_date.day}/{lesson_date.year}"
    return f"AI Generated - {series_name} ({day})"


def determine_status(result_count: int, error_count: int) -> GenerationStatus:
    """Aggregate run status.

    ``success`` without errors, ``partial`` with errors and at least one
    result, ``failed`` otherwise.
    """
    if error_count == 0:
        return GenerationStatus.SUCCESS
    if result_count > 0:
        return GenerationStatus.PARTIAL
    return GenerationStatus.FAILED


@dataclass
class RunRequest:
    """Input of a generation run.

    Attributes:
        trigger: What started the run
        series_ids: Explicit series (takes precedence over ``batch``)
        batch: Batch number selecting series
        translation_languages: Override of the default translation languages
    """

    trigger: TriggerType = TriggerType.MANUAL
    series_ids: list[uuid.UUID] | None = None
    batch: int | None = None
    translation_languages: list[str] | None = None


@dataclass
class SeriesResult:
    """A series that got a new lesson."""

    series_id: str
    series_name: str
    lesson_id: str
    sentence_count: int
    translation_languages: list[str]


@dataclass
class SkippedSeries:
    """A series that was skipped because its lesson already exists."""

    series_id: str
    series_name: str
    reason: str


@dataclass
class RunReport:
    """Outcome of a generation run.

    Attributes:
        results: Series with a stored lesson
        errors: Per-series error messages, verbatim
        warnings: Time-budget skips and other non-fatal notices
        skipped: Series skipped because today's lesson exists
        status: Aggregate status
        duration_ms: Run duration
        series_ids: Series the run attempted
    """

    results: list[SeriesResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    skipped: list[SkippedSeries] = field(default_factory=list)
    status: GenerationStatus = GenerationStatus.SUCCESS
    duration_ms: int = 0
    series_ids: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.results) > 0

    @property
    def message(self) -> str:
        return f"Generated content for {len(self.results)} series"

    @property
    def audio_files_generated(self) -> int:
        return sum(result.sentence_count for result in self.results)

    def to_dict(self) -> dict[str, Any]:
        """Response body for the trigger endpoint."""
        body: dict[str, Any] = {
            "success": self.success,
            "status": self.status.value,
            "results": [asdict(result) for result in self.results],
            "message": self.message,
        }
        if self.errors:
            body["errors"] = self.errors
        if self.warnings:
            body["warnings"] = self.warnings
        if self.skipped:
            body["skipped"] = [asdict(skip) for skip in self.skipped]
        return body


class TimeBudget:
    """Cooperative guard against the host execution ceiling.

    Only prevents starting a series that is unlikely to finish; work in
    flight is never interrupted.
    """

    def __init__(self, config: TimeBudgetConfig, clock: Clock = time.monotonic) -> None:
        self.config = config
        self._clock = clock
        self._started = clock()

    def elapsed(self) -> float:
        return self._clock() - self._started

    def remaining(self) -> float:
        return self.config.ceiling_seconds - self.elapsed()

    def estimate(self, line_count: int) -> float:
        """Estimated synthesis seconds for ``line_count`` sentences."""
        return line_count * self.config.seconds_per_sentence

    def can_fit(self, line_count: int) -> bool:
        return self.estimate(line_count) <= self.remaining() - self.config.safety_buffer_seconds


class RunCoordinator:
    """Orchestrate a generation run.

    Example:
        >>> coordinator = RunCoordinator(store, generator, synthesizer, transaction, config, ["ja"])
        >>> report = await coordinator.run(RunRequest(trigger=TriggerType.CRON, batch=1))
        >>> report.status
    """

    def __init__(
        self,
        store: LessonStore,
        content_generator: ContentGenerator,
        audio_synthesizer: AudioSynthesizer,
        transaction: LessonTransaction,
        config: GenerationConfig,
        default_languages: list[str],
        clock: Clock = time.monotonic,
        sleep: SleepFunc = asyncio.sleep,
        today: Callable[[], date] = utc_today,
    ) -> None:
        """Initialize RunCoordinator.

        Args:
            store: Relational repository
            content_generator: Passage and translation generator
            audio_synthesizer: Sentence audio synthesizer
            transaction: Lesson writer with compensating rollback
            config: Generation configuration
            default_languages: Translation languages when a request sets none
            clock: Monotonic clock for duration and time budget
            sleep: Awaitable sleep for inter-series pauses
            today: Returns the lesson date
        """
        self.store = store
        self.content_generator = content_generator
        self.audio_synthesizer = audio_synthesizer
        self.transaction = transaction
        self.config = config
        self.default_languages = list(default_languages)
        self._clock = clock
        self._sleep = sleep
        self._today = today

    async def run(self, request: RunRequest) -> RunReport:
        """Execute a generation run.

        Args:
            request: Run input

        Returns:
            RunReport with per-series outcomes

        Raises:
            Exception: Whatever made series resolution fail; the failed run
                is logged before the error propagates
        """
        with run_context(run_id=str(uuid.uuid4()), trigger=request.trigger.value):
            return await self._run(request)

    async def _run(self, request: RunRequest) -> RunReport:
        started = self._clock()
        report = RunReport()

        logger.info(
            "Starting content generation",
            series_ids=[str(s) for s in request.series_ids or []],
            batch=request.batch,
        )

        try:
            series_ids = await self._resolve_series_ids(request)
        except Exception as e:
            report.errors.append(str(e))
            report.status = GenerationStatus.FAILED
            report.duration_ms = self._elapsed_ms(started)
            logger.error("Content generation failed", error=str(e))
            await self._record_log(request.trigger, report)
            raise

        report.series_ids = [str(s) for s in series_ids]
        languages = (
            list(request.translation_languages)
            if request.translation_languages is not None
            else self.default_languages
        )
        lesson_date = self._today()
        budget = TimeBudget(self.config.time_budget, clock=self._clock)

        logger.info("Processing series", count=len(series_ids), languages=languages)

        for index, series_id in enumerate(series_ids):
            logger.info(
                "Processing series",
                position=index + 1,
                total=len(series_ids),
                series_id=str(series_id),
            )
            try:
                generated = await self._process_series(
                    series_id, lesson_date, languages, budget, report
                )
            except Exception as e:
                message = f"Failed to generate content for series {series_id}: {e}"
                logger.error("Series failed", series_id=str(series_id), error=str(e))
                report.errors.append(message)
                generated = True

            if generated and index < len(series_ids) - 1 and self.config.series_pause_seconds > 0:
                logger.info("Pausing before next series", seconds=self.config.series_pause_seconds)
                await self._sleep(self.config.series_pause_seconds)

        report.status = determine_status(len(report.results), len(report.errors))
        report.duration_ms = self._elapsed_ms(started)

        logger.info(
            "Content generation completed",
            status=report.status.value,
            duration_ms=report.duration_ms,
            series_count=len(report.results),
            errors=len(report.errors),
            warnings=len(report.warnings),
            skipped=len(report.skipped),
        )

        await self._record_log(request.trigger, report)
        return report

    async def _resolve_series_ids(self, request: RunRequest) -> list[uuid.UUID]:
        if request.series_ids:
            logger.info("Using provided series ids", count=len(request.series_ids))
            return list(request.series_ids)

        series_list: list[Series]
        if request.batch is not None:
            series_list = await self.store.list_series_by_batch(request.batch)
            logger.info(
                "Found series for batch",
                batch=request.batch,
                count=len(series_list),
                names=[s.name for s in series_list],
            )
        else:
            series_list = await self.store.list_active_series()
            logger.info(
                "No batch or series ids provided, using all active series",
                count=len(series_list),
                names=[s.name for s in series_list],
            )
        return [s.id for s in series_list]

    async def _process_series(
        self,
        series_id: uuid.UUID,
        lesson_date: date,
        languages: list[str],
        budget: TimeBudget,
        report: RunReport,
    ) -> bool:
        """Generate and store today's lesson for one series.

        Returns:
            True if provider calls were made (the caller then pauses)
        """
        series = await self.store.get_series(series_id)
        if series is None:
            message = f"Series not found: {series_id}"
            logger.error(message)
            report.errors.append(message)
            return False

        channel = await self.store.get_or_create_channel(series)

        if await self.store.lesson_exists(channel.id, lesson_date):
            logger.info(
                "Content already exists, skipping",
                series_id=str(series_id),
                channel_id=str(channel.id),
                date=lesson_date.isoformat(),
            )
            report.skipped.append(
                SkippedSeries(str(series_id), series.name, reason="already_exists")
            )
            return False

        line_count = series.line_count or self.config.default_line_count
        if not budget.can_fit(line_count):
            estimated_minutes = math.ceil(
                (budget.estimate(line_count) + self.config.time_budget.safety_buffer_seconds) / 60
            )
            warning = (
                f"Insufficient time remaining for series {series.name}. "
                f"Estimated: {estimated_minutes}min, "
                f"Remaining: {max(int(budget.remaining() // 60), 0)}min"
            )
            logger.warning(warning, series_id=str(series_id))
            report.warnings.append(warning)
            return False

        lesson = await self.content_generator.generate_with_translations(
            lesson_date, series, languages
        )
        audio = await self.audio_synthesizer.synthesize_lines(lesson.passage.lines, series)

        try:
            stored = await self.transaction.commit(
                channel_id=channel.id,
                lesson_date=lesson_date,
                lesson=lesson,
                audio=audio,
                source_url=source_descriptor(series.name, lesson_date),
            )
        except RecordAlreadyExistsError:
            # Another run stored today's lesson while this one was generating
            logger.info("Lesson stored concurrently, skipping", series_id=str(series_id))
            report.skipped.append(SkippedSeries(str(series_id), series.name, reason="duplicate"))
            return True

        report.results.append(
            SeriesResult(
                series_id=str(series_id),
                series_name=series.name,
                lesson_id=str(stored.lesson_id),
                sentence_count=len(lesson.passage.lines),
                translation_languages=stored.translation_languages,
            )
        )
        logger.info(
            "Series completed",
            series_name=series.name,
            lesson_id=str(stored.lesson_id),
            sentences=len(lesson.passage.lines),
        )
        return True

    async def _record_log(self, trigger: TriggerType, report: RunReport) -> None:
        metadata: dict[str, Any] = {
            "python_version": platform.python_version(),
            "timestamp": datetime.now(UTC).isoformat(),
        }
        if report.warnings:
            metadata["warnings"] = report.warnings
        if report.skipped:
            metadata["skipped"] = [asdict(skip) for skip in report.skipped]

        entry = GenerationLog(
            trigger_type=trigger.value,
            series_ids=report.series_ids,
            status=report.status.value,
            duration_ms=report.duration_ms,
            results=[asdict(result) for result in report.results] or None,
            errors=report.errors or None,
            series_count=len(report.results),
            lessons_created=len(report.results),
            audio_files_generated=report.audio_files_generated,
            run_metadata=metadata,
        )
        try:
            await self.store.store_generation_log(entry)
        except Exception as e:
            logger.error(
                "Failed to store generation log", error=str(e), status=report.status.value
            )

    def _elapsed_ms(self, started: float) -> int:
        return int((self._clock() - started) * 1000)


__all__ = [
    "RunCoordinator",
    "RunReport",
    "RunRequest",
    "SeriesResult",
    "SkippedSeries",
    "TimeBudget",
    "determine_status",
    "source_descriptor",
]
