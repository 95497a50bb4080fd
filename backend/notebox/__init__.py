"""
Notebox — Application Package
==============================

A small notes service: titles and bodies stored in a relational database,
exposed over HTTP under /api/notes with a free-text search endpoint.

Layers:
    ┌─────────────────────────────────────┐
    │   Routes (notebox.routes)           │  ← HTTP shape, status codes, envelopes
    ├─────────────────────────────────────┤
    │   Note Store (notebox.services)     │  ← validation, queries, result shaping
    ├─────────────────────────────────────┤
    │   Models & Schemas                  │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (notebox.database)       │  ← async engine and sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
