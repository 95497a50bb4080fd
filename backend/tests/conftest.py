"""
Notebox — Test Configuration (conftest.py)
===========================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets its own in-memory SQLite database (aiosqlite + StaticPool,
       so every session shares the one connection that holds the data).

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine:            async engine with the notes schema created
    ├── session_factory:   sessionmaker bound to that engine
    ├── db_session:        one session for store-level tests
    ├── failing_session:   mock session whose every query raises OperationalError
    ├── test_client:       HTTPX AsyncClient against a fresh app using the test engine
    ├── failing_client:    HTTPX AsyncClient whose store calls hit failing_session
    └── raw_error_client:  like test_client, but unhandled errors come back as 500s
"""

import os

# Override settings for testing BEFORE any notebox imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "development"
os.environ["EXPOSE_ERROR_DETAILS"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from notebox.database import get_db_session, init_schema
from notebox.main import create_app


@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_schema(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def failing_session():
    """
    A mock AsyncSession standing in for a database that has gone away.

    Usage:
        with pytest.raises(StoreError):
            await note_store.list_notes(failing_session)
    """
    error = OperationalError("SELECT notes", {}, ConnectionRefusedError("connection refused"))
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=error)
    session.commit = AsyncMock(side_effect=error)
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


def _client_for(app, raise_app_exceptions: bool = True) -> AsyncClient:
    transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to a fresh app whose sessions come from the test engine.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/notes")
            assert response.status_code == 200
    """
    app = create_app()

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    async with _client_for(app) as client:
        yield client


@pytest_asyncio.fixture
async def failing_client(failing_session):
    app = create_app()

    async def override_session():
        yield failing_session

    app.dependency_overrides[get_db_session] = override_session
    async with _client_for(app) as client:
        yield client


@pytest_asyncio.fixture
async def raw_error_client(session_factory):
    """
    Starlette re-raises unhandled exceptions after sending the 500; this
    client keeps them inside the app so the response itself can be asserted.
    """
    app = create_app()

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    async with _client_for(app, raise_app_exceptions=False) as client:
        yield client
