"""
Notebox — Notes API Tests
==========================

What:  Endpoint tests for /api/notes, the error envelopes, and the service routes.
How:   HTTPX AsyncClient over ASGITransport; the session dependency is
       overridden to use the per-test in-memory database (see conftest.py).

What we test:
    ✅ Full create → get → update → get → delete → get lifecycle
    ✅ Envelope shapes (success, count, query, message, data)
    ✅ 400 for blank titles, blank queries and malformed bodies
    ✅ 404 for missing notes vs. 404 for unknown routes
    ✅ /search is never mistaken for a note id
    ✅ 500 responses carry no internal error detail
    ✅ Unexpected errors: generic 500, detail only when enabled, request ID kept
"""

from datetime import datetime

import pytest
from sqlalchemy import insert

from notebox.config import settings
from notebox.models.note import Note
from notebox.services.note_store import NoteStore


def parse_ts(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def create(client, title, content=None):
    payload = {"title": title}
    if content is not None:
        payload["content"] = content
    response = await client.post("/api/notes", json=payload)
    assert response.status_code == 201
    return response.json()["data"]


class TestNoteLifecycle:

    @pytest.mark.asyncio
    async def test_create_get_update_delete(self, test_client):
        response = await test_client.post("/api/notes", json={"title": "Test", "content": "Hello"})
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Note created successfully"
        assert body["data"]["title"] == "Test"
        assert body["data"]["content"] == "Hello"
        created = body["data"]
        note_id = created["id"]

        response = await test_client.get(f"/api/notes/{note_id}")
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": created}

        response = await test_client.put(f"/api/notes/{note_id}", json={"title": "Modified"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Note updated successfully"}

        response = await test_client.get(f"/api/notes/{note_id}")
        updated = response.json()["data"]
        assert updated["title"] == "Modified"
        assert updated["content"] == ""
        assert updated["created_at"] == created["created_at"]
        assert parse_ts(updated["updated_at"]) >= parse_ts(created["updated_at"])

        response = await test_client.delete(f"/api/notes/{note_id}")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Note deleted successfully"}

        response = await test_client.get(f"/api/notes/{note_id}")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Note not found"}

    @pytest.mark.asyncio
    async def test_note_serialization_fields(self, test_client):
        note = await create(test_client, "Fields", "body")

        assert set(note) == {"id", "title", "content", "created_at", "updated_at"}
        assert isinstance(note["id"], int)
        assert note["created_at"] == note["updated_at"]

    @pytest.mark.asyncio
    async def test_null_content_serialized_as_empty_string(self, test_client, session_factory):
        async with session_factory() as session:
            await session.execute(insert(Note).values(title="Legacy", content=None))
            await session.commit()

        body = (await test_client.get("/api/notes")).json()

        assert body["data"][0]["title"] == "Legacy"
        assert body["data"][0]["content"] == ""


class TestListAndSearch:

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        response = await test_client.get("/api/notes")

        assert response.status_code == 200
        assert response.json() == {"success": True, "count": 0, "data": []}

    @pytest.mark.asyncio
    async def test_list_most_recent_first(self, test_client):
        first = await create(test_client, "First")
        second = await create(test_client, "Second")

        body = (await test_client.get("/api/notes")).json()
        assert body["count"] == 2
        assert [n["id"] for n in body["data"]] == [second["id"], first["id"]]

        await test_client.put(f"/api/notes/{first['id']}", json={"title": "First, edited"})

        body = (await test_client.get("/api/notes")).json()
        assert [n["id"] for n in body["data"]] == [first["id"], second["id"]]

    @pytest.mark.asyncio
    async def test_search(self, test_client):
        by_title = await create(test_client, "Hello World")
        by_content = await create(test_client, "Greeting", "say hello")
        await create(test_client, "Other", "nothing relevant")

        response = await test_client.get("/api/notes/search", params={"q": "HELLO"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["query"] == "HELLO"
        assert body["count"] == 2
        assert [n["id"] for n in body["data"]] == [by_content["id"], by_title["id"]]

    @pytest.mark.asyncio
    async def test_search_no_results(self, test_client):
        await create(test_client, "Something")

        body = (await test_client.get("/api/notes/search", params={"q": "zzz"})).json()

        assert body == {"success": True, "query": "zzz", "count": 0, "data": []}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
    async def test_search_requires_query(self, test_client, params):
        """A 400 (not a 404 for id "search") shows /search is matched first."""
        response = await test_client.get("/api/notes/search", params=params)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": 'The search parameter "q" is required',
        }


class TestValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"title": ""}, {"title": "   "}, {"content": "no title"}])
    async def test_create_requires_title(self, test_client, payload):
        response = await test_client.post("/api/notes", json=payload)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Title is required"}
        assert (await test_client.get("/api/notes")).json()["count"] == 0

    @pytest.mark.asyncio
    async def test_create_without_body(self, test_client):
        response = await test_client.post("/api/notes")

        assert response.status_code == 400
        assert response.json()["error"] == "Title is required"

    @pytest.mark.asyncio
    async def test_create_malformed_json(self, test_client):
        response = await test_client.post(
            "/api/notes",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid request body"}

    @pytest.mark.asyncio
    async def test_create_wrong_field_type(self, test_client):
        response = await test_client.post("/api/notes", json={"title": 42})

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_create_overlong_title(self, test_client):
        response = await test_client.post("/api/notes", json={"title": "t" * 300})

        assert response.status_code == 400
        assert "255" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_update_requires_title(self, test_client):
        note = await create(test_client, "Keep me")

        response = await test_client.put(f"/api/notes/{note['id']}", json={"title": " "})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Title is required"}
        fetched = (await test_client.get(f"/api/notes/{note['id']}")).json()["data"]
        assert fetched["title"] == "Keep me"

    @pytest.mark.asyncio
    async def test_update_blank_title_on_missing_note_is_400(self, test_client):
        """Input is validated before the note is looked up."""
        response = await test_client.put("/api/notes/999", json={"title": ""})

        assert response.status_code == 400


class TestNotFound:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("note_id", ["999", "abc", "99999999999", "-3"])
    async def test_get_missing_or_malformed_id(self, test_client, note_id):
        response = await test_client.get(f"/api/notes/{note_id}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Note not found"}

    @pytest.mark.asyncio
    async def test_update_missing(self, test_client):
        response = await test_client.put("/api/notes/999", json={"title": "Ghost"})

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Note not found"}

    @pytest.mark.asyncio
    async def test_delete_missing_and_twice(self, test_client):
        note = await create(test_client, "Once")

        assert (await test_client.delete(f"/api/notes/{note['id']}")).status_code == 200
        response = await test_client.delete(f"/api/notes/{note['id']}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Note not found"}

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/api/unknown")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Endpoint not found"
        assert body["path"] == "/api/unknown"
        assert "suggestion" in body

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, test_client):
        response = await test_client.patch("/api/notes/1", json={"title": "x"})

        assert response.status_code == 405
        assert response.json()["success"] is False


class TestStoreFailures:
    """The database is unreachable: every operation answers 500 without leaking the cause."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path, kwargs, message",
        [
            ("get", "/api/notes", {}, "Error while retrieving notes"),
            ("get", "/api/notes/1", {}, "Error while retrieving the note"),
            ("get", "/api/notes/search", {"params": {"q": "x"}}, "Error while searching notes"),
            ("post", "/api/notes", {"json": {"title": "t"}}, "Error while creating the note"),
            ("put", "/api/notes/1", {"json": {"title": "t"}}, "Error while updating the note"),
            ("delete", "/api/notes/1", {}, "Error while deleting the note"),
        ],
    )
    async def test_store_error_envelope(self, failing_client, method, path, kwargs, message):
        response = await getattr(failing_client, method)(path, **kwargs)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": message}
        assert "connection refused" not in response.text
        assert "OperationalError" not in response.text

    @pytest.mark.asyncio
    async def test_validation_still_wins_when_store_is_down(self, failing_client, failing_session):
        response = await failing_client.post("/api/notes", json={"title": ""})

        assert response.status_code == 400
        failing_session.add.assert_not_called()


class TestServiceRoutes:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["database"] == "connected"
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_index_lists_endpoints(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["endpoints"]["notes"] == "/api/notes"
        assert body["environment"] == "development"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/api/notes", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

        response = await test_client.get("/api/notes")
        assert len(response.headers["X-Request-ID"]) == 8


class TestUnexpectedErrors:
    """An exception outside the application hierarchy still answers with the envelope."""

    @pytest.fixture(autouse=True)
    def broken_list(self, monkeypatch):
        async def list_notes(self, db):
            raise RuntimeError("secret")

        monkeypatch.setattr(NoteStore, "list_notes", list_notes)

    @pytest.mark.asyncio
    async def test_generic_500_hides_details(self, raw_error_client):
        response = await raw_error_client.get("/api/notes")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}
        assert "secret" not in response.text

    @pytest.mark.asyncio
    async def test_detail_exposed_when_enabled(self, raw_error_client, monkeypatch):
        monkeypatch.setattr(settings, "expose_error_details", True)

        response = await raw_error_client.get("/api/notes")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal server error"
        assert body["detail"] == "secret"

    @pytest.mark.asyncio
    async def test_request_id_kept(self, raw_error_client):
        response = await raw_error_client.get("/api/notes", headers={"X-Request-ID": "abc123"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "abc123"
