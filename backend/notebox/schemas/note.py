"""
Notebox — Pydantic Request/Response Schemas
============================================

What:  Pydantic models defining the API contract between frontend and backend.
How:   FastAPI uses these models to parse request bodies, serialize responses,
       and generate the OpenAPI documentation.

Every response is an envelope carrying a `success` flag:
    list / search  → success, [query], count, data: [Note]
    get            → success, data: Note
    create         → success, message, data: Note
    update/delete  → success, message
    any error      → success=false, error
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteWrite(BaseModel):
    """
    Body of POST /api/notes and PUT /api/notes/{id}.

    Both fields are optional at the schema level: a missing or blank title is
    a business-rule failure (400 with a specific message), not a schema error.
    """
    title: Optional[str] = Field(default=None, description="Note title (required, non-blank)")
    content: Optional[str] = Field(default=None, description="Note body (defaults to empty)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """Serialized note. Timestamps are ISO 8601 strings."""
    id: int = Field(description="Unique note identifier")
    title: str = Field(description="Note title")
    content: str = Field(default="", description="Note body")
    created_at: datetime = Field(description="When the note was created (UTC)")
    updated_at: datetime = Field(description="When the note was last modified (UTC)")

    model_config = {"from_attributes": True}

    @field_validator("content", mode="before")
    @classmethod
    def default_content(cls, v: Optional[str]) -> str:
        """Rows written outside the API may hold NULL content."""
        return v or ""


class NoteListResponse(BaseModel):
    success: bool = True
    count: int = Field(description="Number of notes in `data`")
    data: List[NoteResponse]


class NoteSearchResponse(BaseModel):
    success: bool = True
    query: str = Field(description="The search term as received")
    count: int = Field(description="Number of matching notes")
    data: List[NoteResponse]


class NoteDetailResponse(BaseModel):
    success: bool = True
    data: NoteResponse


class NoteCreatedResponse(BaseModel):
    success: bool = True
    message: str = "Note created successfully"
    data: NoteResponse


class MessageResponse(BaseModel):
    """Confirmation returned by update and delete."""
    success: bool = True
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error / Service Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error envelope for all API errors.

    Example:
        {"success": false, "error": "Note not found"}
    """
    success: bool = False
    error: str = Field(description="Human-readable error description")


class RouteNotFoundResponse(ErrorResponse):
    path: str = Field(description="The path that matched no route")
    suggestion: str


class HealthResponse(BaseModel):
    status: str = Field(description="OK when the database answers, degraded otherwise")
    timestamp: datetime
    uptime_seconds: float = Field(description="Seconds since service started")
    database: str = Field(description="Database connectivity: connected, disconnected")


class IndexResponse(BaseModel):
    message: str
    version: str
    environment: str
    endpoints: Dict[str, str]
