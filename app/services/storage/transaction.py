"""Lesson write with compensating rollback.

The relational store and the blob store cannot share a transaction. The
lesson row is written first; if any later step fails, the lesson row is
deleted (sentences and translations cascade) and every audio object
uploaded so far is removed. Rollback failures are appended to the raised
error, never substituted for it.
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import date

from app.core.exceptions import AudioError, LessonPersistError
from app.core.logging import get_logger
from app.core.types import Clock
from app.infrastructure.storage import AudioStorage
from app.services.generator.audio import SentenceAudio
from app.services.generator.content import GeneratedLesson
from app.services.storage.lesson_store import LessonStore, SentenceRecord

logger = get_logger(__name__)


def audio_object_path(channel_id: uuid.UUID, lesson_id: uuid.UUID, file_name: str) -> str:
    """Blob path of a sentence clip: ``<channel_id>/<lesson_id>/<file_name>``."""
    return f"{channel_id}/{lesson_id}/{file_name}"


@dataclass
class StoredLesson:
    """Outcome of a committed lesson.

    Attributes:
        lesson_id: New lesson id
        sentence_ids: Sentence ids in order
        translation_languages: Languages whose translations were stored
        audio_paths: Uploaded blob paths in sentence order
    """

    lesson_id: uuid.UUID
    sentence_ids: list[uuid.UUID]
    translation_languages: list[str] = field(default_factory=list)
    audio_paths: list[str] = field(default_factory=list)


class LessonTransaction:
    """Write a generated lesson across the database and blob storage.

    Example:
        >>> transaction = LessonTransaction(store, storage)
        >>> stored = await transaction.commit(channel.id, today, lesson, clips, source)
    """

    def __init__(
        self,
        store: LessonStore,
        storage: AudioStorage,
        clock: Clock = time.time,
    ) -> None:
        """Initialize LessonTransaction.

        Args:
            store: Relational repository
            storage: Audio blob storage
            clock: Wall clock in seconds (drives the URL cache-busting value)
        """
        self.store = store
        self.storage = storage
        self._clock = clock

    async def commit(
        self,
        channel_id: uuid.UUID,
        lesson_date: date,
        lesson: GeneratedLesson,
        audio: list[SentenceAudio],
        source_url: str,
    ) -> StoredLesson:
        """Persist a lesson, its sentence audio and its translations.

        Args:
            channel_id: Owning channel
            lesson_date: Publication date
            lesson: Generated passage and translations
            audio: One clip per passage line
            source_url: Source descriptor

        Returns:
            StoredLesson with the new ids

        Raises:
            RecordAlreadyExistsError: If the channel already has a lesson that day
            LessonPersistError: If a step after lesson creation failed (rolled back)
        """
        passage = lesson.passage

        lesson_id = await self.store.create_lesson(
            channel_id=channel_id,
            title=passage.title,
            source_url=source_url,
            lesson_date=lesson_date,
        )

        uploaded: list[str] = []
        try:
            version = int(self._clock() * 1000)
            clips = {clip.line_index: clip for clip in audio}
            records: list[SentenceRecord] = []

            for index, text in enumerate(passage.lines):
                clip = clips.get(index)
                if clip is None:
                    raise AudioError(f"Missing audio file for sentence {index}", line_index=index)

                path = audio_object_path(channel_id, lesson_id, clip.file_name)
                await self.storage.upload(path, clip.audio, clip.mime_type)
                uploaded.append(path)

                records.append(
                    SentenceRecord(
                        order_index=index,
                        text=text,
                        audio_url=f"{self.storage.public_url(path)}?v={version}",
                        duration=clip.duration,
                        voice_used=clip.voice_used,
                    )
                )

            sentence_ids = await self.store.add_sentences(lesson_id, records)
            languages = await self.store.store_translations(
                lesson_id, sentence_ids, lesson.translations
            )
        except Exception as e:
            logger.error(
                "Lesson write failed, rolling back",
                lesson_id=str(lesson_id),
                uploaded=len(uploaded),
                error=str(e),
            )
            cleanup_errors = await self._rollback(lesson_id, uploaded)
            raise LessonPersistError(
                f"Failed to store lesson data: {e}",
                lesson_id=str(lesson_id),
                cleanup_errors=cleanup_errors,
            ) from e

        logger.info(
            "Lesson stored",
            lesson_id=str(lesson_id),
            sentences=len(sentence_ids),
            translation_languages=languages,
        )
        return StoredLesson(
            lesson_id=lesson_id,
            sentence_ids=sentence_ids,
            translation_languages=languages,
            audio_paths=uploaded,
        )

    async def _rollback(self, lesson_id: uuid.UUID, uploaded: list[str]) -> list[str]:
        """Undo a partial write and return the messages of failed cleanup steps."""
        cleanup_errors: list[str] = []

        try:
            await self.store.delete_lesson(lesson_id)
        except Exception as e:
            logger.error(
                "Rollback: failed to delete lesson", lesson_id=str(lesson_id), error=str(e)
            )
            cleanup_errors.append(f"Failed to delete lesson {lesson_id}: {e}")

        if uploaded:
            try:
                await self.storage.remove(uploaded)
            except Exception as e:
                logger.error(
                    "Rollback: failed to remove uploaded audio",
                    lesson_id=str(lesson_id),
                    paths=uploaded,
                    error=str(e),
                )
                cleanup_errors.append(f"Failed to remove {len(uploaded)} audio files: {e}")

        if not cleanup_errors:
            logger.info("Rollback complete", lesson_id=str(lesson_id), removed_files=len(uploaded))
        return cleanup_errors


__all__ = ["LessonTransaction", "StoredLesson", "audio_object_path"]
