"""
Shareable URLs Backend - Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh for each test):
    ├── memory_store: Empty InMemoryRecordStore
    ├── fixed_clock: Deterministic timestamp source for the service
    ├── service: ShareableURLService over memory_store
    ├── record_key / other_key: Fresh UUID4 strings
    └── test_client: HTTPX AsyncClient bound to an app serving memory_store
"""

import os

# Settings are read at import time; point them at test values first
os.environ["STORE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from shareable_urls.services.shareable_url_service import ShareableURLService  # noqa: E402
from shareable_urls.store import InMemoryRecordStore  # noqa: E402


class FixedClock:
    """
    Timestamp source returning a scripted sequence.

    After the script runs out the last value repeats.
    """

    def __init__(self, *stamps: str):
        self.stamps = list(stamps) or ["2024-01-15T12:00:00.000Z"]
        self.calls = 0

    def __call__(self) -> str:
        stamp = self.stamps[min(self.calls, len(self.stamps) - 1)]
        self.calls += 1
        return stamp


@pytest.fixture
def memory_store():
    """Provides an empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def fixed_clock():
    """Creation at 12:00, first update at 13:00, later updates at 14:00."""
    return FixedClock(
        "2024-01-15T12:00:00.000Z",
        "2024-01-15T13:00:00.000Z",
        "2024-01-15T14:00:00.000Z",
    )


@pytest.fixture
def service(memory_store, fixed_clock):
    """Provides a ShareableURLService over the in-memory store."""
    return ShareableURLService(store=memory_store, clock=fixed_clock)


@pytest.fixture
def record_key():
    return str(uuid4())


@pytest.fixture
def other_key():
    return str(uuid4())


@pytest_asyncio.fixture
async def test_client(memory_store):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient talking to a fresh app over ASGITransport.
    How:     The app is built with create_app(store=memory_store), so tests can
             inspect the store directly after each request.
    """
    from shareable_urls.main import create_app

    app = create_app(store=memory_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
