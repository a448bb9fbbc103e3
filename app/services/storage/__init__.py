"""Lesson persistence services.

- LessonStore: relational repository (series, channels, lessons, logs)
- LessonTransaction: lesson write with compensating rollback
"""

from app.services.storage.lesson_store import LessonStore, SentenceRecord
from app.services.storage.transaction import LessonTransaction, StoredLesson, audio_object_path

__all__ = [
    "LessonStore",
    "LessonTransaction",
    "SentenceRecord",
    "StoredLesson",
    "audio_object_path",
]
