"""SQLAlchemy ORM models.

- Series, Channel: long-lived, edited out-of-band
- Lesson, Sentence, translations: written once per generation run
- GenerationLog: one append-only record per run
"""

from app.models.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from app.models.channel import DEFAULT_ICON_NAME, Channel
from app.models.generation_log import GenerationLog, GenerationStatus, TriggerType
from app.models.lesson import Lesson, LessonTranslation, Sentence, SentenceTranslation
from app.models.series import DifficultyLevel, Series, SeriesStatus

__all__ = [
    "Base",
    "UUIDMixin",
    "CreatedAtMixin",
    "TimestampMixin",
    # Configuration
    "Series",
    "SeriesStatus",
    "DifficultyLevel",
    "Channel",
    "DEFAULT_ICON_NAME",
    # Content
    "Lesson",
    "Sentence",
    "LessonTranslation",
    "SentenceTranslation",
    # Runs
    "GenerationLog",
    "GenerationStatus",
    "TriggerType",
]
