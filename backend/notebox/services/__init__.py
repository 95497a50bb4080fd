# Services package init
"""
Notebox — Services Layer
=========================

Service Inventory:
    - NoteStore: persistence operations for notes (list, get, create,
      update, delete, search). Stateless; the caller passes the session.
"""
