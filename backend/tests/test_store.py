"""
Shareable URLs Backend - Record Store Tests
============================================

What:  Tests for the in-memory and SQL-backed key-value stores.
How:   SQLRecordStore runs against a real SQLite file (aiosqlite) in a
       temporary directory; no server database is needed.

What we test:
    ✅ get() on a missing key returns None
    ✅ put() then get() round-trips, and a second put() overwrites
    ✅ ping() reports reachability
    ✅ SQL failures surface as StoreError
    ✅ The HTTP API works end-to-end on the SQL store
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from shareable_urls.database import Base
from shareable_urls.exceptions import StoreError
from shareable_urls.models.kv_entry import KVEntry  # noqa: F401
from shareable_urls.store import InMemoryRecordStore, SQLRecordStore


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}")
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def sql_store(sqlite_engine):
    """SQLRecordStore over a freshly created kv_entries table."""
    async with sqlite_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return SQLRecordStore(async_sessionmaker(sqlite_engine, expire_on_commit=False))


class TestInMemoryRecordStore:

    @pytest.mark.asyncio
    async def test_missing_key_returns_none(self, memory_store):
        assert await memory_store.get("shareable_url:nope") is None

    @pytest.mark.asyncio
    async def test_put_then_get(self, memory_store):
        await memory_store.put("views:abc", "3")
        assert await memory_store.get("views:abc") == "3"
        assert "views:abc" in memory_store
        assert len(memory_store) == 1

    @pytest.mark.asyncio
    async def test_put_overwrites(self, memory_store):
        await memory_store.put("hash", "first")
        await memory_store.put("hash", "second")
        assert await memory_store.get("hash") == "second"

    @pytest.mark.asyncio
    async def test_initial_data_is_copied(self):
        seed = {"a": "1"}
        store = InMemoryRecordStore(seed)
        await store.put("b", "2")
        assert "b" not in seed

    @pytest.mark.asyncio
    async def test_ping(self, memory_store):
        assert await memory_store.ping() is True


class TestSQLRecordStore:

    @pytest.mark.asyncio
    async def test_missing_key_returns_none(self, sql_store):
        assert await sql_store.get("shareable_url:nope") is None

    @pytest.mark.asyncio
    async def test_put_then_get(self, sql_store):
        await sql_store.put("shareable_url:k", '{"key": "k"}')
        assert await sql_store.get("shareable_url:k") == '{"key": "k"}'

    @pytest.mark.asyncio
    async def test_put_overwrites(self, sql_store):
        await sql_store.put("views:k", "0")
        await sql_store.put("views:k", "1")
        assert await sql_store.get("views:k") == "1"

    @pytest.mark.asyncio
    async def test_empty_string_key(self, sql_store):
        """The checksum index stores records without contentHash under ''."""
        await sql_store.put("", "owner")
        assert await sql_store.get("") == "owner"

    @pytest.mark.asyncio
    async def test_ping(self, sql_store):
        assert await sql_store.ping() is True

    @pytest.mark.asyncio
    async def test_missing_table_raises_store_error(self, sqlite_engine):
        store = SQLRecordStore(async_sessionmaker(sqlite_engine, expire_on_commit=False))
        with pytest.raises(StoreError) as exc_info:
            await store.get("anything")
        assert exc_info.value.context["operation"] == "get"

        with pytest.raises(StoreError):
            await store.put("anything", "value")

    @pytest.mark.asyncio
    async def test_api_end_to_end(self, sql_store, record_key):
        from shareable_urls.main import create_app

        app = create_app(store=sql_store)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            created = await client.post("/", json={"key": record_key, "contentHash": "abc"})
            assert created.status_code == 201

            first = await client.get(f"/{record_key}")
            second = await client.get(f"/{record_key}")

        assert first.status_code == 200
        assert first.json()["viewCount"] == 0
        assert second.json()["viewCount"] == 1
        assert await sql_store.get("abc") == record_key
