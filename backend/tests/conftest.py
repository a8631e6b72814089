"""
SprintSpace Backend — Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── test_settings: Settings pointing at in-memory SQLite
    ├── database: fresh in-memory database with tables created
    ├── app: create_app() wired to that database
    ├── test_client: HTTPX AsyncClient for API endpoint testing
    ├── file_app / file_client: same, on a file-backed SQLite database
    │   (concurrent requests; the in-memory database is serial-only)
    └── auth_for: builds cookie/header credentials for an email
"""

import os

# Override settings for testing BEFORE any application imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from datetime import date, datetime, timezone  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from sprintspace.config import Settings  # noqa: E402
from sprintspace.database import Database  # noqa: E402
from sprintspace.identifiers import new_object_id  # noqa: E402
from sprintspace.models.event import Event  # noqa: E402
from sprintspace.services.auth_service import Identity  # noqa: E402

OWNER = "owner@example.com"
RUNNER = "runner@example.com"


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_event(mock_db_session):
            mock_db_session.get.return_value = event
            result = await event_service.get_event(mock_db_session, event.id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def owner_identity():
    return Identity(email=OWNER)


@pytest.fixture
def make_event():
    """Build an Event ORM object without touching a database."""
    def _make(**overrides):
        values = {
            "id": new_object_id(),
            "owner_email": OWNER,
            "title": "Sprint Marathon 2024",
            "start_date": date(2030, 5, 1),
            "created_at": datetime.now(timezone.utc),
            "attributes": {"location": "Dhaka"},
            "total_registration_count": 0,
        }
        values.update(overrides)
        return Event(**values)
    return _make


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret="test-secret-not-real",
        auth_transport="cookie",
        login_email="test@example.com",
        login_password="Password123",
        log_level="WARNING",
        rate_limit_requests=100000,
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """A fresh in-memory database per test, tables created."""
    db = Database.from_settings(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def app(test_settings, database):
    from sprintspace.main import create_app
    return create_app(settings=test_settings, database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def file_settings(test_settings, tmp_path):
    """Settings for a file-backed SQLite database, safe for overlapping requests."""
    return test_settings.model_copy(
        update={"database_url": f"sqlite+aiosqlite:///{tmp_path / 'sprintspace.db'}"}
    )


@pytest_asyncio.fixture
async def file_app(file_settings):
    from sprintspace.main import create_app
    db = Database.from_settings(file_settings)
    await db.create_all()
    yield create_app(settings=file_settings, database=db)
    await db.dispose()


@pytest_asyncio.fixture
async def file_client(file_app):
    transport = ASGITransport(app=file_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_for(app):
    """Return request headers carrying a valid token for `email`."""
    def _auth(email: str = RUNNER) -> dict:
        settings = app.state.settings
        token = app.state.auth_guard.create_token(email)
        if settings.auth_transport == "cookie":
            return {"Cookie": f"{settings.cookie_name}={token}"}
        return {"Authorization": f"Bearer {token}"}
    return _auth
