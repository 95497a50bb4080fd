"""
Notebox — Custom Exception Hierarchy
=====================================

What:  Application-specific exceptions for the note service.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"success": false, "error": ...}` envelopes with the right
       HTTP status code.
Who:   Raised by the note store and route handlers; caught by global handlers.

Exception Hierarchy:
    NoteboxError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    └── StoreError        → 500 Internal Server Error

Unmatched routes are not modelled here: Starlette raises its own HTTP 404,
which main.py renders with a separate "Endpoint not found" envelope.
"""

from typing import Any, Dict, Optional


class NoteboxError(Exception):
    """
    Base exception for all Notebox application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteboxError):
    """
    Raised when client input fails a precondition.

    When:    Blank or missing title, over-long title, blank search query.
    HTTP:    400 Bad Request

    Example response:
        {"success": false, "error": "Title is required"}
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(NoteboxError):
    """
    Raised when a referenced note does not exist.

    The store itself reports absence as a value (None / zero rows); route
    handlers turn that value into this exception.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "note",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class StoreError(NoteboxError):
    """
    Raised when the persistence layer could not complete an operation.

    What:    Connectivity loss, constraint violation, unexpected driver error.
    HTTP:    500 Internal Server Error

    The message is a fixed, operation-specific sentence that is safe to send
    to clients. The underlying exception is kept in `cause` (and chained as
    __cause__) for server-side logging only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if cause is not None:
            ctx["original_error"] = type(cause).__name__
        super().__init__(message=message, context=ctx)
        self.cause = cause
