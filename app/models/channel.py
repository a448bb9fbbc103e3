"""Channel ORM model.

A channel is the publication identity of one series; lessons are grouped
under it for listeners.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.lesson import Lesson
    from app.models.series import Series

DEFAULT_ICON_NAME = "globe.europe.africa.fill"


class Channel(Base, UUIDMixin, TimestampMixin):
    """Publication channel bound 1:1 to a series.

    Attributes:
        series_id: Owning series (unique)
        title: Display title
        description: Channel description (the series concept)
        icon_name: Client icon identifier
        cover_image_url: Cover artwork
        series: Owning series
        lessons: Published lessons (1:N)
    """

    __tablename__ = "channels"

    # Foreign Key
    series_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("series.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # Display
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    icon_name: Mapped[str] = mapped_column(String(100), nullable=False, default=DEFAULT_ICON_NAME)
    cover_image_url: Mapped[str | None] = mapped_column(Text)

    # Relationships
    series: Mapped["Series"] = relationship("Series", back_populates="channel")
    lessons: Mapped[list["Lesson"]] = relationship(
        "Lesson",
        back_populates="channel",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Channel(id={self.id}, title={self.title}, series_id={self.series_id})>"


__all__ = [
    "DEFAULT_ICON_NAME",
    "Channel",
]
