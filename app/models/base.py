"""Base model mixins.

- UUIDMixin: UUID primary key
- CreatedAtMixin: insert timestamp for append-only rows
- TimestampMixin: created_at and updated_at for editable rows
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from app.core.database import Base


class UUIDMixin:
    """Mixin for a client-generated UUID primary key."""

    @declared_attr
    @classmethod
    def id(cls) -> Mapped[uuid.UUID]:
        """UUID primary key.

        Returns:
            UUID column mapped to primary key
        """
        return mapped_column(
            primary_key=True,
            default=uuid.uuid4,
        )


class CreatedAtMixin:
    """Mixin for rows that are written once and never updated.

    Lessons, sentences, translations and generation logs are immutable
    after commit, so they only track their insert time.
    """

    @declared_attr
    @classmethod
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        )


class TimestampMixin(CreatedAtMixin):
    """Mixin for rows edited out-of-band (series, channels)."""

    @declared_attr
    @classmethod
    def updated_at(cls) -> Mapped[datetime]:
        """Timestamp when record was last updated.

        Returns:
            DateTime column that updates automatically
        """
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        )


__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "UUIDMixin",
]
