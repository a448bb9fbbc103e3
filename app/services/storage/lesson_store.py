"""Relational persistence for series, channels, lessons and run logs.

Each method opens its own session from the injected factory and commits
before returning, so a failure in one step never leaves a half-open
transaction behind for the next.
"""

import uuid
from dataclasses import dataclass
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from app.core.database import is_unique_violation
from app.core.exceptions import RecordAlreadyExistsError, RecordNotFoundError
from app.core.logging import get_logger
from app.core.types import SessionFactory
from app.models.channel import DEFAULT_ICON_NAME, Channel
from app.models.generation_log import GenerationLog
from app.models.lesson import Lesson, LessonTranslation, Sentence, SentenceTranslation
from app.models.series import Series, SeriesStatus
from app.services.generator.content import Passage

logger = get_logger(__name__)


@dataclass
class SentenceRecord:
    """Sentence row to insert.

    Attributes:
        order_index: Zero-based position in the lesson
        text: Sentence text
        audio_url: Public URL of the sentence audio
        duration: Estimated duration in seconds
        voice_used: Voice that produced the audio
    """

    order_index: int
    text: str
    audio_url: str
    duration: int
    voice_used: str | None = None


class LessonStore:
    """Repository for generation data.

    Example:
        >>> store = LessonStore(db_session_factory=session_factory)
        >>> series = await store.get_series(series_id)
        >>> channel = await store.get_or_create_channel(series)
    """

    def __init__(self, db_session_factory: SessionFactory) -> None:
        """Initialize LessonStore.

        Args:
            db_session_factory: Async session factory
        """
        self.db_session_factory = db_session_factory

    # ============================================
    # Series / Channel
    # ============================================

    async def get_series(self, series_id: uuid.UUID) -> Series | None:
        """Load a series by id (None if it does not exist)."""
        async with self.db_session_factory() as session:
            return await session.get(Series, series_id)

    async def list_active_series(self) -> list[Series]:
        """All active series ordered by name."""
        async with self.db_session_factory() as session:
            result = await session.execute(
                select(Series)
                .where(Series.status == SeriesStatus.ACTIVE.value)
                .order_by(Series.name)
            )
            return list(result.scalars().all())

    async def list_series_by_batch(self, batch: int) -> list[Series]:
        """Active series assigned to ``batch`` ordered by name."""
        async with self.db_session_factory() as session:
            result = await session.execute(
                select(Series)
                .where(Series.batch_number == batch, Series.status == SeriesStatus.ACTIVE.value)
                .order_by(Series.name)
            )
            return list(result.scalars().all())

    async def get_or_create_channel(self, series: Series) -> Channel:
        """Return the channel of a series, creating it on first use.

        Args:
            series: Series that owns the channel

        Returns:
            Existing or newly created Channel
        """
        async with self.db_session_factory() as session:
            result = await session.execute(select(Channel).where(Channel.series_id == series.id))
            channel = result.scalar_one_or_none()
            if channel is not None:
                logger.debug(
                    "Found existing channel",
                    series_id=str(series.id),
                    channel_id=str(channel.id),
                )
                return channel

            channel = Channel(
                series_id=series.id,
                title=series.name,
                description=series.concept,
                icon_name=DEFAULT_ICON_NAME,
                cover_image_url=series.cover_image_url,
            )
            session.add(channel)
            try:
                await session.commit()
            except IntegrityError as e:
                # A concurrent run created it first
                await session.rollback()
                if not is_unique_violation(e):
                    raise
                result = await session.execute(
                    select(Channel).where(Channel.series_id == series.id)
                )
                return result.scalar_one()

            logger.info("Created channel", series_id=str(series.id), channel_id=str(channel.id))
            return channel

    # ============================================
    # Lessons
    # ============================================

    async def lesson_exists(self, channel_id: uuid.UUID, lesson_date: date) -> bool:
        """Check whether the channel already has a lesson for ``lesson_date``."""
        async with self.db_session_factory() as session:
            result = await session.execute(
                select(Lesson.id)
                .where(Lesson.channel_id == channel_id, Lesson.date == lesson_date)
                .limit(1)
            )
            return result.first() is not None

    async def create_lesson(
        self,
        channel_id: uuid.UUID,
        title: str,
        source_url: str,
        lesson_date: date,
    ) -> uuid.UUID:
        """Insert a lesson row.

        Returns:
            New lesson id

        Raises:
            RecordAlreadyExistsError: If the channel already has a lesson on that date
        """
        lesson = Lesson(channel_id=channel_id, title=title, source_url=source_url, date=lesson_date)
        async with self.db_session_factory() as session:
            session.add(lesson)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if is_unique_violation(e):
                    raise RecordAlreadyExistsError(
                        model="Lesson",
                        field="date",
                        value=lesson_date.isoformat(),
                        context={"channel_id": str(channel_id)},
                    ) from e
                raise

        logger.info("Lesson created", lesson_id=str(lesson.id), channel_id=str(channel_id))
        return lesson.id

    async def add_sentences(
        self,
        lesson_id: uuid.UUID,
        records: list[SentenceRecord],
    ) -> list[uuid.UUID]:
        """Insert sentence rows for a lesson in one transaction.

        Returns:
            Sentence ids in ``records`` order
        """
        sentences = [
            Sentence(
                id=uuid.uuid4(),
                lesson_id=lesson_id,
                order_index=record.order_index,
                text=record.text,
                audio_url=record.audio_url,
                duration=record.duration,
                voice_used=record.voice_used,
            )
            for record in records
        ]
        async with self.db_session_factory() as session:
            session.add_all(sentences)
            await session.commit()

        logger.info("Sentences stored", lesson_id=str(lesson_id), count=len(sentences))
        return [sentence.id for sentence in sentences]

    async def store_translations(
        self,
        lesson_id: uuid.UUID,
        sentence_ids: list[uuid.UUID],
        translations: dict[str, Passage],
    ) -> list[str]:
        """Insert lesson-title and sentence translations.

        Sentence translations are matched by position up to the shorter of
        the two lists.

        Returns:
            Languages stored
        """
        if not translations:
            return []

        rows: list[LessonTranslation | SentenceTranslation] = []
        for language, passage in translations.items():
            rows.append(
                LessonTranslation(lesson_id=lesson_id, language=language, title=passage.title)
            )
            if len(passage.lines) != len(sentence_ids):
                logger.warning(
                    "Translation line count mismatch, truncating",
                    language=language,
                    sentences=len(sentence_ids),
                    translated_lines=len(passage.lines),
                )
            rows.extend(
                SentenceTranslation(sentence_id=sentence_id, language=language, text=text)
                for sentence_id, text in zip(sentence_ids, passage.lines)
            )

        async with self.db_session_factory() as session:
            session.add_all(rows)
            await session.commit()

        languages = list(translations)
        logger.info("Translations stored", lesson_id=str(lesson_id), languages=languages)
        return languages

    async def delete_lesson(self, lesson_id: uuid.UUID) -> None:
        """Delete a lesson; sentences and translations cascade.

        Raises:
            RecordNotFoundError: If the lesson does not exist
        """
        async with self.db_session_factory() as session:
            result = await session.execute(delete(Lesson).where(Lesson.id == lesson_id))
            await session.commit()

        if result.rowcount == 0:
            raise RecordNotFoundError(model="Lesson", record_id=str(lesson_id))
        logger.info("Lesson deleted", lesson_id=str(lesson_id))

    # ============================================
    # Generation logs
    # ============================================

    async def store_generation_log(self, entry: GenerationLog) -> None:
        """Append a generation log row."""
        async with self.db_session_factory() as session:
            session.add(entry)
            await session.commit()

        logger.info(
            "Generation log stored",
            status=entry.status,
            series_count=entry.series_count,
            lessons_created=entry.lessons_created,
            audio_files=entry.audio_files_generated,
        )


__all__ = ["LessonStore", "SentenceRecord"]
