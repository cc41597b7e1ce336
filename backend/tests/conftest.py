"""
PicPlace Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   A real SQLite database (aiosqlite, one file per test) so paired writes
       and rollbacks run against an actual transaction; the geocoder is
       always mocked so tests never reach the network.

Fixture Hierarchy (all function-scoped):
    ├── db_engine → session_factory → db_session
    ├── test_client: HTTPX AsyncClient wired to the app with the test database
    ├── geocoder: AsyncMock standing in for the Nominatim client
    ├── temp_storage: per-test image directory
    ├── mock_db_session: AsyncMock session for pure unit tests
    └── sample_png_bytes / sample_jpeg_bytes
"""

import os
import tempfile

# Override settings BEFORE any picplace import: the Settings singleton and
# the module-level engine read the environment on first import
_TEST_DIR = tempfile.mkdtemp(prefix="picplace_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/app.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"  # bcrypt minimum; keeps the suite fast
os.environ["IMAGE_STORAGE_ROOT"] = os.path.join(_TEST_DIR, "images")
os.environ["PLACES_AUTH_REQUIRED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock, patch  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from picplace.database import build_engine, get_db_session, init_models  # noqa: E402
from picplace.schemas.place import Location  # noqa: E402
from picplace.services.file_service import file_service  # noqa: E402

EMPIRE_STATE = Location(lat=40.7484405, lng=-73.9878531)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database with the full schema for one test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    An AsyncMock that simulates AsyncSession behavior.
    Why:     Some unit tests only need to assert how the session is used.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Collaborator Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def geocoder():
    """
    Replaces the geocoding client used by PlaceService.

    resolve() returns fixed coordinates by default; tests override
    `geocoder.resolve.side_effect` to simulate failures.
    """
    mock = AsyncMock()
    mock.resolve.return_value = EMPIRE_STATE
    mock.health_check.return_value = True
    with patch("picplace.services.place_service.geocoding_service", mock):
        yield mock


@pytest.fixture
def temp_storage(tmp_path, monkeypatch):
    """Points the shared FileService at a fresh directory for one test."""
    storage_dir = tmp_path / "images"
    storage_dir.mkdir()
    monkeypatch.setattr(file_service, "storage_root", storage_dir)
    return storage_dir


@pytest.fixture
def sample_png_bytes():
    """PNG signature plus an IHDR chunk; enough for media-type based checks."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
    )


@pytest.fixture
def sample_jpeg_bytes():
    # Start of Image (FFD8) + JFIF marker + End of Image (FFD9)
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, temp_storage):
    """
    HTTPX AsyncClient talking to the app in-process.

    get_db_session is overridden so every request uses the per-test
    database with the same commit/rollback semantics as production.
    """
    from picplace.main import app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
