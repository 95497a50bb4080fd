"""
Notebox — Notes Route Handlers
===============================

What:  The /api/notes resource: list, search, get, create, update, delete.
How:   Checks input shape, calls one NoteStore operation, wraps the outcome
       in a response envelope. Store absence values (None / 0 rows) become
       NotFoundError here; every exception is rendered by the handlers in main.py.

Route Inventory:
    GET    /api/notes               list all notes
    GET    /api/notes/search?q=     search title and content
    GET    /api/notes/{note_id}     single note
    POST   /api/notes               create
    PUT    /api/notes/{note_id}     replace title/content
    DELETE /api/notes/{note_id}     delete

/search is declared before /{note_id}; Starlette matches routes in
registration order, so "search" is never taken for an id.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from notebox.database import get_db_session
from notebox.exceptions import NotFoundError
from notebox.models.note import Note
from notebox.schemas.note import (
    ErrorResponse,
    MessageResponse,
    NoteCreatedResponse,
    NoteDetailResponse,
    NoteListResponse,
    NoteResponse,
    NoteSearchResponse,
    NoteWrite,
)
from notebox.services.note_store import note_store, validate_query, validate_title

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/notes", tags=["Notes"])

SERVER_ERROR = {"description": "Server error", "model": ErrorResponse}
NOT_FOUND = {"description": "Note not found", "model": ErrorResponse}
BAD_REQUEST = {"description": "Invalid input", "model": ErrorResponse}


def _serialize(notes: List[Note]) -> List[NoteResponse]:
    return [NoteResponse.model_validate(note) for note in notes]


@router.get(
    "",
    response_model=NoteListResponse,
    responses={500: SERVER_ERROR},
    summary="List all notes",
    description="Returns every note, most recently updated first.",
)
async def list_notes(db: AsyncSession = Depends(get_db_session)) -> NoteListResponse:
    notes = await note_store.list_notes(db)
    return NoteListResponse(count=len(notes), data=_serialize(notes))


@router.get(
    "/search",
    response_model=NoteSearchResponse,
    responses={400: BAD_REQUEST, 500: SERVER_ERROR},
    summary="Search notes",
    description=(
        "Case-insensitive substring search over title and content. "
        "Results are ordered by last update, newest first."
    ),
)
async def search_notes(
    q: Optional[str] = Query(default=None, description="Search term (required, non-blank)"),
    db: AsyncSession = Depends(get_db_session),
) -> NoteSearchResponse:
    validate_query(q)
    notes = await note_store.search_notes(db, q)
    return NoteSearchResponse(query=q, count=len(notes), data=_serialize(notes))


@router.get(
    "/{note_id}",
    response_model=NoteDetailResponse,
    responses={404: NOT_FOUND, 500: SERVER_ERROR},
    summary="Get a single note by ID",
)
async def get_note(
    note_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> NoteDetailResponse:
    """
    Args:
        note_id: Taken as an opaque string; ids that are not numeric give 404
                 like any other unknown id.
    """
    note = await note_store.get_note(db, note_id)
    if note is None:
        raise NotFoundError(resource="note", resource_id=note_id)
    return NoteDetailResponse(data=NoteResponse.model_validate(note))


@router.post(
    "",
    status_code=201,
    response_model=NoteCreatedResponse,
    responses={400: BAD_REQUEST, 500: SERVER_ERROR},
    summary="Create a note",
)
async def create_note(
    body: Optional[NoteWrite] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> NoteCreatedResponse:
    body = body or NoteWrite()
    validate_title(body.title)
    note = await note_store.create_note(db, body.title, body.content)
    return NoteCreatedResponse(data=NoteResponse.model_validate(note))


@router.put(
    "/{note_id}",
    response_model=MessageResponse,
    responses={400: BAD_REQUEST, 404: NOT_FOUND, 500: SERVER_ERROR},
    summary="Replace a note's title and content",
)
async def update_note(
    note_id: str,
    body: Optional[NoteWrite] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """
    Title and content are replaced wholesale; an omitted content becomes "".

    The 404 decision comes solely from the store's update result (no row
    affected), so a note deleted concurrently is reported the same way as one
    that never existed.
    """
    body = body or NoteWrite()
    validate_title(body.title)
    note = await note_store.update_note(db, note_id, body.title, body.content)
    if note is None:
        raise NotFoundError(resource="note", resource_id=note_id)
    return MessageResponse(message="Note updated successfully")


@router.delete(
    "/{note_id}",
    response_model=MessageResponse,
    responses={404: NOT_FOUND, 500: SERVER_ERROR},
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    deleted = await note_store.delete_note(db, note_id)
    if deleted == 0:
        raise NotFoundError(resource="note", resource_id=note_id)
    return MessageResponse(message="Note deleted successfully")
