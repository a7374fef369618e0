"""
Kennel API - Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh for each test):
    ├── make_settings: Settings factory pointing file/database backends at tmp_path
    ├── store: one dogs store per backend (memory, file, database)
    ├── test_client: HTTPX AsyncClient over a fresh in-memory app
    └── backend_client: HTTPX AsyncClient, parametrized over every backend
"""

import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
# kennel.main builds a module-level app from these at import time
os.environ["STORE_BACKEND"] = "memory"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="kennel_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from kennel.config import Settings  # noqa: E402
from kennel.database import Database  # noqa: E402
from kennel.main import create_app  # noqa: E402
from kennel.resources import DOGS  # noqa: E402
from kennel.stores import JsonFileStore, MemoryStore, SqlStore  # noqa: E402

BACKENDS = ["memory", "file", "database"]


@pytest.fixture
def make_settings(tmp_path):
    """
    Build Settings whose file and database locations live under tmp_path.

    Usage:
        def test_something(make_settings):
            settings = make_settings("file")
    """

    def factory(backend: str = "memory", **overrides) -> Settings:
        values = {
            "store_backend": backend,
            "data_dir": str(tmp_path / "data"),
            "database_url": f"sqlite+aiosqlite:///{tmp_path / 'kennel_test.db'}",
            "log_level": "WARNING",
        }
        values.update(overrides)
        return Settings(**values)

    return factory


@pytest_asyncio.fixture(params=BACKENDS)
async def store(request, make_settings):
    """
    A fresh, empty dogs store for each backend.

    Tests using this fixture run three times, once per backend, which checks
    that every backend honours the same collection contract.
    """
    database = None
    if request.param == "memory":
        collection_store = MemoryStore(DOGS)
    elif request.param == "file":
        collection_store = JsonFileStore(DOGS, make_settings("file").data_dir)
    else:
        database = Database(make_settings("database"))
        collection_store = SqlStore(DOGS, database)

    yield collection_store

    await collection_store.close()
    if database is not None:
        await database.dispose()


@pytest_asyncio.fixture
async def test_client(make_settings):
    """
    HTTPX AsyncClient talking to a fresh in-memory app.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    app = create_app(make_settings("memory"))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await app.state.registry.close()


@pytest_asyncio.fixture(params=BACKENDS)
async def backend_client(request, make_settings):
    """HTTPX AsyncClient over a fresh app, once per store backend."""
    app = create_app(make_settings(request.param))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await app.state.registry.close()
