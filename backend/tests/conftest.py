"""
SimpleBlog Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file and public root under tmp_path,
       so tests never share posts or uploaded images.

Fixture Hierarchy:
    test_settings ─┬─ engine ── db_session ── store
                   ├─ upload_service
                   └─ app ── test_client
    seed_settings ── seed_app ── seed_client   (GET /seeds enabled)

    sample_image_bytes: tiny JPEG body for upload tests
"""

import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# simpleblog.main builds a module-level app from the environment on import,
# so point it at throwaway locations before anything imports it.
_IMPORT_ROOT = tempfile.mkdtemp(prefix="simpleblog_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_IMPORT_ROOT}/import.db"
os.environ["PUBLIC_ROOT"] = os.path.join(_IMPORT_ROOT, "public")
os.environ["SESSION_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from simpleblog.config import Settings  # noqa: E402
from simpleblog.database import (  # noqa: E402
    create_engine,
    create_session_factory,
    create_tables,
    dispose_engine,
)
from simpleblog.main import create_app  # noqa: E402
from simpleblog.services.post_store import PostStore  # noqa: E402
from simpleblog.services.upload_service import UploadService  # noqa: E402


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}",
        "public_root": str(tmp_path / "public"),
        "session_secret": "test-secret-not-real",
        "log_level": "WARNING",
        "store_ping_attempts": 1,
    }
    values.update(overrides)
    return Settings(**values)


# ══════════════════════════════════════════════════════════════════════════
# Store Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def settings_factory(tmp_path):
    """Settings on this test's tmp_path with selected fields overridden."""
    return lambda **overrides: make_settings(tmp_path, **overrides)


@pytest_asyncio.fixture
async def engine(test_settings):
    engine = create_engine(test_settings)
    await create_tables(engine)
    yield engine
    await dispose_engine(engine)


@pytest_asyncio.fixture
async def db_session(engine):
    async with create_session_factory(engine)() as session:
        yield session


@pytest.fixture
def store(db_session) -> PostStore:
    return PostStore(db_session)


@pytest.fixture
def upload_service(test_settings) -> UploadService:
    return UploadService(test_settings)


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

async def _client_for(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def app(test_settings):
    """
    A fully wired application on its own SQLite file.

    ASGITransport does not run the lifespan, so tables are created here.
    """
    application = create_app(test_settings)
    await create_tables(application.state.engine)
    yield application
    await dispose_engine(application.state.engine)


@pytest_asyncio.fixture
async def test_client(app):
    async for client in _client_for(app):
        yield client


@pytest.fixture
def seed_settings(tmp_path) -> Settings:
    return make_settings(tmp_path, seed_route_enabled=True)


@pytest_asyncio.fixture
async def seed_app(seed_settings):
    application = create_app(seed_settings)
    await create_tables(application.state.engine)
    yield application
    await dispose_engine(application.state.engine)


@pytest_asyncio.fixture
async def seed_client(seed_app):
    async for client in _client_for(seed_app):
        yield client
