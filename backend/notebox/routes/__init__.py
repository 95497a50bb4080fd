# Routes package init
"""
Notebox — API Routes Package
=============================

Route Inventory:
    - notes.py:   /api/notes           (list, create)
                  /api/notes/search    (free-text search)
                  /api/notes/{id}      (get, update, delete)
    - health.py:  GET /health          (service health check)
                  GET /                (API index)

Routes stay thin: they extract request data, call the note store, and pick
the envelope. Persistence rules live in notebox.services.note_store.
"""
