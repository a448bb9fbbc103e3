"""Initial lesson schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    # Series (edited out-of-band)
    op.create_table(
        "series",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("concept", sa.Text(), nullable=False),
        sa.Column("cover_image_url", sa.Text(), nullable=True),
        sa.Column("line_count", sa.Integer(), nullable=False),
        sa.Column("difficulty_level", sa.String(length=20), nullable=False),
        sa.Column("ai_generation_prompt", sa.Text(), nullable=True),
        sa.Column("enable_voice_alternation", sa.Boolean(), nullable=False),
        sa.Column("default_voice_name", sa.String(length=50), nullable=True),
        sa.Column("alternate_voice_name", sa.String(length=50), nullable=True),
        sa.Column("gemini_tts_prompt", sa.Text(), nullable=True),
        sa.Column("gemini_tts_alt_prompt", sa.Text(), nullable=True),
        sa.Column("batch_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_series")),
    )
    op.create_index("idx_series_batch", "series", ["batch_number"])
    op.create_index("idx_series_status", "series", ["status"])

    # Channels (1:1 with series)
    op.create_table(
        "channels",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("series_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon_name", sa.String(length=100), nullable=False),
        sa.Column("cover_image_url", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(
            ["series_id"],
            ["series.id"],
            name=op.f("fk_channels_series_id_series"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_channels")),
    )
    op.create_index(op.f("ix_channels_series_id"), "channels", ["series_id"], unique=True)

    # Lessons (one per channel and date)
    op.create_table(
        "lessons",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("channel_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("source_url", sa.Text(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["channel_id"],
            ["channels.id"],
            name=op.f("fk_lessons_channel_id_channels"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_lessons")),
        sa.UniqueConstraint("date", "channel_id", name="unique_lesson_per_date_channel"),
    )
    op.create_index(op.f("ix_lessons_channel_id"), "lessons", ["channel_id"])
    op.create_index(op.f("ix_lessons_date"), "lessons", ["date"])

    # Sentences
    op.create_table(
        "sentences",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("lesson_id", sa.Uuid(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("audio_url", sa.Text(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("voice_used", sa.String(length=50), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["lesson_id"],
            ["lessons.id"],
            name=op.f("fk_sentences_lesson_id_lessons"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sentences")),
        sa.UniqueConstraint(
            "lesson_id", "order_index", name=op.f("uq_sentences_lesson_id_order_index")
        ),
    )
    op.create_index(op.f("ix_sentences_lesson_id"), "sentences", ["lesson_id"])

    # Translations
    op.create_table(
        "lesson_translations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("lesson_id", sa.Uuid(), nullable=False),
        sa.Column("language", sa.String(length=10), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["lesson_id"],
            ["lessons.id"],
            name=op.f("fk_lesson_translations_lesson_id_lessons"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_lesson_translations")),
        sa.UniqueConstraint("lesson_id", "language", name="unique_lesson_translation"),
    )
    op.create_index(
        "idx_lesson_translations_lesson_lang", "lesson_translations", ["lesson_id", "language"]
    )

    op.create_table(
        "sentence_translations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("sentence_id", sa.Uuid(), nullable=False),
        sa.Column("language", sa.String(length=10), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["sentence_id"],
            ["sentences.id"],
            name=op.f("fk_sentence_translations_sentence_id_sentences"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sentence_translations")),
        sa.UniqueConstraint("sentence_id", "language", name="unique_sentence_translation"),
    )
    op.create_index(
        "idx_sentence_translations_sentence_lang",
        "sentence_translations",
        ["sentence_id", "language"],
    )

    # Generation logs (append-only)
    op.create_table(
        "generation_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("trigger_type", sa.String(length=20), nullable=False),
        sa.Column("series_ids", postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("duration_ms", sa.Integer(), nullable=False),
        sa.Column("results", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("errors", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("series_count", sa.Integer(), nullable=False),
        sa.Column("lessons_created", sa.Integer(), nullable=False),
        sa.Column("audio_files_generated", sa.Integer(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_generation_logs")),
    )
    op.create_index("idx_generation_logs_created_at", "generation_logs", ["created_at"])
    op.create_index("idx_generation_logs_status", "generation_logs", ["status"])
    op.create_index("idx_generation_logs_trigger_type", "generation_logs", ["trigger_type"])


def downgrade() -> None:
    op.drop_table("generation_logs")
    op.drop_table("sentence_translations")
    op.drop_table("lesson_translations")
    op.drop_table("sentences")
    op.drop_table("lessons")
    op.drop_table("channels")
    op.drop_table("series")
