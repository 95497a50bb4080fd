"""
Notebox — Note SQLAlchemy Model
================================

What:  ORM model representing the `notes` table.
How:   Inherits from the declarative Base; init_schema() creates it at startup.
Who:   Used by the note store for every read and write.

Table Design:
    - Integer primary key: SERIAL on PostgreSQL, AUTOINCREMENT on SQLite,
      so ids of deleted notes are never handed out again
    - title: VARCHAR(255), required
    - content: TEXT, defaults to the empty string
    - created_at / updated_at: timezone-aware timestamps, written by the store
      from a single clock reading so a fresh note has created_at == updated_at

    Index on updated_at DESC:
        Serves the list and search ordering (most recently touched first)
    Full-text index (PostgreSQL only):
        GIN over to_tsvector('english', title || ' ' || content)
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DDL, TIMESTAMP, Index, Integer, String, Text, event, text
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import Mapped, mapped_column

from notebox.database import Base

TITLE_MAX_LENGTH = 255


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    TIMESTAMP WITH TIME ZONE that always hands back aware UTC datetimes.

    PostgreSQL returns aware values already; SQLite drops the offset on
    storage, so naive results are tagged as UTC on the way out.
    """

    impl = TIMESTAMP(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Note(Base):
    """
    A short text note.

    Lifecycle:
        1. Created by NoteStore.create_note (id and both timestamps assigned)
        2. Replaced wholesale by NoteStore.update_note (updated_at refreshed)
        3. Hard-deleted by NoteStore.delete_note
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH),
        nullable=False,
    )

    content: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default="",
        server_default=text("''"),
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # ── Indexes ───────────────────────────────────────────────────────────
    __table_args__ = (
        Index("idx_notes_updated_at", updated_at.desc()),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, updated_at='{self.updated_at}')>"


# to_tsvector has no SQLite equivalent, so the search index is emitted only
# when the table is created on PostgreSQL.
event.listen(
    Note.__table__,
    "after_create",
    DDL(
        "CREATE INDEX IF NOT EXISTS idx_notes_search ON notes "
        "USING gin(to_tsvector('english', title || ' ' || COALESCE(content, '')))"
    ).execute_if(dialect="postgresql"),
)
