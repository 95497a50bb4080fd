"""
Notebox — Note Store (Persistence Operations)
==============================================

What:  Every read and write against the `notes` table.
How:   Async SQLAlchemy statements executed on a session supplied by the caller.
Who:   Called by the route handlers in notebox.routes.notes.

Contract:
    - Each operation is one atomic unit of work; writes are committed before returning.
    - Absence is a value, not an exception: get/update return None and delete
      returns 0 when the id matches nothing. Ids that are not positive 32-bit
      integers ("abc", "-1", "99999999999") match nothing.
    - Input preconditions raise ValidationError before any query is issued.
    - Anything raised by the database layer is rolled back and re-raised as
      StoreError (original exception in `cause`). No retries.

NoteStore holds no state. The session is passed to every call, so the same
instance works against PostgreSQL in production and in-memory SQLite in tests.
"""

import logging
from typing import List, Optional, Union

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notebox.exceptions import StoreError, ValidationError
from notebox.models.note import TITLE_MAX_LENGTH, Note, utcnow

logger = logging.getLogger(__name__)

# Upper bound of a PostgreSQL SERIAL primary key
MAX_NOTE_ID = 2**31 - 1

NoteId = Union[int, str]

# Most recently touched first; id breaks ties between writes in the same clock tick
RECENT_FIRST = (Note.updated_at.desc(), Note.id.desc())


def parse_note_id(note_id: NoteId) -> Optional[int]:
    """Returns the integer primary key for `note_id`, or None if it cannot name a row."""
    if isinstance(note_id, bool):
        return None
    if isinstance(note_id, int):
        value = note_id
    else:
        raw = str(note_id).strip()
        if not (raw.isascii() and raw.isdigit()):
            return None
        value = int(raw)
    if 1 <= value <= MAX_NOTE_ID:
        return value
    return None


def validate_title(title: Optional[str]) -> None:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(message="Title is required", field="title")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(
            message=f"Title must be at most {TITLE_MAX_LENGTH} characters",
            field="title",
            context={"length": len(title)},
        )


def validate_query(query: Optional[str]) -> str:
    if not isinstance(query, str) or not query.strip():
        raise ValidationError(message='The search parameter "q" is required', field="q")
    return query.strip()


class NoteStore:
    """
    Persistence operations for notes.

    Responsibilities:
        - list_notes():   all notes, most recently updated first
        - get_note():     single note or None
        - create_note():  validated insert, returns the stored note
        - update_note():  validated wholesale replace, returns the note or None
        - delete_note():  hard delete, returns affected row count
        - search_notes(): case-insensitive substring match on title or content
    """

    async def list_notes(self, db: AsyncSession) -> List[Note]:
        try:
            result = await db.execute(select(Note).order_by(*RECENT_FIRST))
            return list(result.scalars().all())
        except Exception as e:
            raise await self._store_failure(
                db, "list_notes", "Error while retrieving notes", e
            ) from e

    async def get_note(self, db: AsyncSession, note_id: NoteId) -> Optional[Note]:
        """
        Retrieve a single note by ID.

        Returns:
            The Note, or None when no note has this id (including malformed ids).

        Raises:
            StoreError: Query execution failed
        """
        pk = parse_note_id(note_id)
        if pk is None:
            return None
        try:
            result = await db.execute(select(Note).where(Note.id == pk))
            return result.scalar_one_or_none()
        except Exception as e:
            raise await self._store_failure(
                db, "get_note", "Error while retrieving the note", e, note_id=pk
            ) from e

    async def create_note(
        self,
        db: AsyncSession,
        title: Optional[str],
        content: Optional[str] = None,
    ) -> Note:
        """
        Insert a new note.

        Title and content are stored exactly as given; None content becomes "".
        created_at and updated_at come from the same clock reading.

        Raises:
            ValidationError: Title missing, blank, or too long (nothing is written)
            StoreError: Insert failed
        """
        validate_title(title)
        now = utcnow()
        note = Note(title=title, content=content or "", created_at=now, updated_at=now)
        try:
            db.add(note)
            await db.commit()
            # Reload so the returned note matches what a later read produces
            await db.refresh(note)
        except Exception as e:
            raise await self._store_failure(
                db, "create_note", "Error while creating the note", e
            ) from e
        logger.info("Note %s created", note.id)
        return note

    async def update_note(
        self,
        db: AsyncSession,
        note_id: NoteId,
        title: Optional[str],
        content: Optional[str] = None,
    ) -> Optional[Note]:
        """
        Replace a note's title and content and refresh updated_at.

        A single UPDATE ... RETURNING statement both applies the change and
        tells whether a row existed, so there is no window between an
        existence check and the write.

        Returns:
            The updated Note, or None when no row was affected.

        Raises:
            ValidationError: Title missing, blank, or too long (nothing is written)
            StoreError: Update failed
        """
        validate_title(title)
        pk = parse_note_id(note_id)
        if pk is None:
            return None
        stmt = (
            update(Note)
            .where(Note.id == pk)
            .values(title=title, content=content or "", updated_at=utcnow())
            .returning(Note)
            .execution_options(populate_existing=True)
        )
        try:
            result = await db.execute(stmt)
            note = result.scalars().one_or_none()
            await db.commit()
        except Exception as e:
            raise await self._store_failure(
                db, "update_note", "Error while updating the note", e, note_id=pk
            ) from e
        if note is not None:
            logger.info("Note %s updated", pk)
        return note

    async def delete_note(self, db: AsyncSession, note_id: NoteId) -> int:
        """
        Hard-delete a note.

        Returns:
            Number of rows removed: 1 if the note existed, 0 otherwise.
        """
        pk = parse_note_id(note_id)
        if pk is None:
            return 0
        try:
            result = await db.execute(delete(Note).where(Note.id == pk))
            await db.commit()
        except Exception as e:
            raise await self._store_failure(
                db, "delete_note", "Error while deleting the note", e, note_id=pk
            ) from e
        if result.rowcount:
            logger.info("Note %s deleted", pk)
        return result.rowcount

    async def search_notes(self, db: AsyncSession, query: Optional[str]) -> List[Note]:
        """
        Case-insensitive substring search over title OR content.

        The query is trimmed; LIKE wildcards in it match literally
        (autoescape). Results use the same ordering as list_notes.

        Case folding is the database's lower(): PostgreSQL folds non-ASCII
        letters, SQLite folds ASCII only ("ÉTÉ" does not match "été" there).

        Raises:
            ValidationError: Query missing or blank
            StoreError: Query execution failed
        """
        term = validate_query(query)
        stmt = (
            select(Note)
            .where(
                or_(
                    Note.title.icontains(term, autoescape=True),
                    Note.content.icontains(term, autoescape=True),
                )
            )
            .order_by(*RECENT_FIRST)
        )
        try:
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            raise await self._store_failure(
                db, "search_notes", "Error while searching notes", e
            ) from e

    async def _store_failure(
        self,
        db: AsyncSession,
        operation: str,
        message: str,
        error: Exception,
        note_id: Optional[int] = None,
    ) -> StoreError:
        """Logs a failed operation, rolls the session back and builds the StoreError to raise."""
        logger.error("Database error in %s: %s", operation, str(error), exc_info=True)
        try:
            await db.rollback()
        except Exception:
            logger.error("Rollback after failed %s also failed", operation, exc_info=True)
        context = {"operation": operation}
        if note_id is not None:
            context["note_id"] = note_id
        return StoreError(message=message, cause=error, context=context)


# ── Singleton Instance ────────────────────────────────────────────────────
note_store = NoteStore()
