"""Lesson, Sentence and translation ORM models.

A lesson is one dated unit of content in a channel. Its sentences carry
per-sentence audio. Translations exist only for committed English content
and are removed together with their owner.
"""

import datetime as dt
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import (
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, CreatedAtMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.channel import Channel


class Lesson(Base, UUIDMixin, CreatedAtMixin):
    """One generated lesson.

    At most one lesson exists per (date, channel); the unique constraint is
    the final idempotency guard against overlapping runs.

    Attributes:
        channel_id: Owning channel
        title: English title
        source_url: Source descriptor (e.g. "AI Generated - <series> (<date>)")
        date: Publication date
        created_at: Insert time
        sentences: Ordered sentences (1:N)
        translations: Title translations (1:N)
    """

    __tablename__ = "lessons"

    channel_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("channels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    source_url: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    # Relationships
    channel: Mapped["Channel"] = relationship("Channel", back_populates="lessons")
    sentences: Mapped[list["Sentence"]] = relationship(
        "Sentence",
        back_populates="lesson",
        order_by="Sentence.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    translations: Mapped[list["LessonTranslation"]] = relationship(
        "LessonTranslation",
        back_populates="lesson",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("date", "channel_id", name="unique_lesson_per_date_channel"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Lesson(id={self.id}, date={self.date}, channel_id={self.channel_id})>"


class Sentence(Base, UUIDMixin, CreatedAtMixin):
    """One ordered line of a lesson with its audio.

    Attributes:
        lesson_id: Owning lesson
        order_index: 0-based position, contiguous within the lesson
        text: English text
        audio_url: Public audio URL with cache-busting query
        duration: Estimated duration in seconds
        voice_used: Voice that produced the audio
    """

    __tablename__ = "sentences"

    lesson_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    audio_url: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    voice_used: Mapped[str | None] = mapped_column(String(50))

    # Relationships
    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="sentences")
    translations: Mapped[list["SentenceTranslation"]] = relationship(
        "SentenceTranslation",
        back_populates="sentence",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("lesson_id", "order_index"),)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Sentence(lesson_id={self.lesson_id}, order_index={self.order_index})>"


class LessonTranslation(Base, UUIDMixin, CreatedAtMixin):
    """Translated lesson title."""

    __tablename__ = "lesson_translations"

    lesson_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
    )
    language: Mapped[str] = mapped_column(String(10), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)

    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="translations")

    __table_args__ = (
        UniqueConstraint("lesson_id", "language", name="unique_lesson_translation"),
        Index("idx_lesson_translations_lesson_lang", "lesson_id", "language"),
    )


class SentenceTranslation(Base, UUIDMixin, CreatedAtMixin):
    """Translated sentence text."""

    __tablename__ = "sentence_translations"

    sentence_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sentences.id", ondelete="CASCADE"),
        nullable=False,
    )
    language: Mapped[str] = mapped_column(String(10), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    sentence: Mapped["Sentence"] = relationship("Sentence", back_populates="translations")

    __table_args__ = (
        UniqueConstraint("sentence_id", "language", name="unique_sentence_translation"),
        Index("idx_sentence_translations_sentence_lang", "sentence_id", "language"),
    )


__all__ = [
    "Lesson",
    "LessonTranslation",
    "Sentence",
    "SentenceTranslation",
]
