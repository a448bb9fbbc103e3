"""Series ORM model.

A series is the generation template for one recurring lesson stream:
topic, tone, length and voice configuration.
"""

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.channel import Channel


class SeriesStatus(str, enum.Enum):
    """Series lifecycle status."""

    ACTIVE = "active"  # Generated daily
    PAUSED = "paused"  # Temporarily excluded from "all series" runs
    ENDED = "ended"


class DifficultyLevel(str, enum.Enum):
    """Learner difficulty tier."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Series(Base, UUIDMixin, TimestampMixin):
    """Lesson generation template.

    Read-only input to a generation run; edited out-of-band.

    Attributes:
        name: Series name
        concept: Thematic concept embedded in the generation prompt
        cover_image_url: Cover artwork copied to the channel
        line_count: Target number of sentences per lesson
        difficulty_level: Difficulty tier
        ai_generation_prompt: Extra instructions appended to the generation prompt
        enable_voice_alternation: Alternate two voices by sentence parity
        default_voice_name: Voice for even-indexed sentences
        alternate_voice_name: Voice for odd-indexed sentences
        gemini_tts_prompt: Custom speaking prompt for the default voice
        gemini_tts_alt_prompt: Custom speaking prompt for the alternate voice
        batch_number: Scheduling batch tag
        status: Lifecycle status
        channel: Publication channel (1:1, created lazily)
    """

    __tablename__ = "series"

    # Series Info
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    concept: Mapped[str] = mapped_column(Text, nullable=False)
    cover_image_url: Mapped[str | None] = mapped_column(Text)

    # Content Shape
    line_count: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    difficulty_level: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DifficultyLevel.INTERMEDIATE.value
    )
    ai_generation_prompt: Mapped[str | None] = mapped_column(Text)

    # Voice Configuration
    enable_voice_alternation: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    default_voice_name: Mapped[str | None] = mapped_column(String(50))
    alternate_voice_name: Mapped[str | None] = mapped_column(String(50))
    gemini_tts_prompt: Mapped[str | None] = mapped_column(Text)
    gemini_tts_alt_prompt: Mapped[str | None] = mapped_column(Text)

    # Scheduling
    batch_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SeriesStatus.ACTIVE.value
    )

    # Relationships
    channel: Mapped["Channel"] = relationship(
        "Channel", back_populates="series", uselist=False
    )

    __table_args__ = (
        Index("idx_series_batch", "batch_number"),
        Index("idx_series_status", "status"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Series(id={self.id}, name={self.name}, "
            f"batch={self.batch_number}, status={self.status})>"
        )

    @property
    def is_active(self) -> bool:
        """Check if series is active.

        Returns:
            True if series status is ACTIVE
        """
        return self.status == SeriesStatus.ACTIVE


__all__ = [
    "DifficultyLevel",
    "Series",
    "SeriesStatus",
]
