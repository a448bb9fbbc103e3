"""Generation log ORM model.

One append-only record per generation run, written whether the run
succeeded or not.
"""

import enum
from typing import Any

from sqlalchemy import Index, Integer, String
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, UUIDMixin


class TriggerType(str, enum.Enum):
    """What started a generation run."""

    CRON = "cron"
    MANUAL = "manual"
    API = "api"


class GenerationStatus(str, enum.Enum):
    """Aggregate outcome of a generation run."""

    SUCCESS = "success"  # No errors
    PARTIAL = "partial"  # Some series succeeded, some failed
    FAILED = "failed"  # No series succeeded


class GenerationLog(Base, UUIDMixin, CreatedAtMixin):
    """Generation run record.

    Attributes:
        trigger_type: Trigger kind
        series_ids: Series the run attempted
        status: Aggregate status
        duration_ms: Wall-clock run duration
        results: Per-series results
        errors: Per-series error messages, verbatim
        series_count: Number of series with a stored lesson
        lessons_created: Number of lessons stored
        audio_files_generated: Number of sentence audio files stored
        run_metadata: Warnings, skips and runtime information
    """

    __tablename__ = "generation_logs"

    # Request
    trigger_type: Mapped[str] = mapped_column(String(20), nullable=False)
    series_ids: Mapped[list[str] | None] = mapped_column(ARRAY(String))

    # Outcome
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    results: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB)
    errors: Mapped[list[str] | None] = mapped_column(JSONB)

    # Statistics
    series_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lessons_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    audio_files_generated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # "metadata" is reserved on declarative classes
    run_metadata: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONB)

    __table_args__ = (
        Index("idx_generation_logs_created_at", "created_at"),
        Index("idx_generation_logs_status", "status"),
        Index("idx_generation_logs_trigger_type", "trigger_type"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<GenerationLog(id={self.id}, trigger={self.trigger_type}, "
            f"status={self.status}, lessons={self.lessons_created})>"
        )


__all__ = [
    "GenerationLog",
    "GenerationStatus",
    "TriggerType",
]
