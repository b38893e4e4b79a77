"""
Shareable URLs Backend - Record Store (Key-Value Collaborator)
===============================================================

What:  The narrow async key-value contract the service is written against,
       plus its in-memory and SQL-backed implementations.
How:   Services receive a RecordStore instance explicitly (constructor injection);
       the FastAPI app holds the one built at startup on `app.state.record_store`
       and hands it to request handlers through the `get_record_store` dependency.
Who:   Used by ShareableURLService; built by main.create_app().

Contract:
    get(key)        -> str | None   (None when the key was never written)
    put(key, value) -> None         (unconditional overwrite, last writer wins)
    ping()          -> bool         (backend reachability for /health)

Consistency:
    Read-your-writes is assumed for a single key. Nothing here is transactional
    across keys and there is no conditional put, so the service's
    check-then-write duplicate detection can race between concurrent creators.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shareable_urls.config import Settings
from shareable_urls.exceptions import StoreError

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Abstract async string → string store."""

    backend_name = "abstract"

    @abstractmethod  # pragma: no cover
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under `key`, or None if absent."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def put(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""
        raise NotImplementedError

    async def ping(self) -> bool:
        """Return True when the backend can serve requests."""
        return True


class InMemoryRecordStore(RecordStore):
    """
    Process-local dict store.

    Used by the test-suite and by STORE_BACKEND=memory for local runs.
    Data does not survive a restart and is not shared between workers.
    """

    backend_name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class SQLRecordStore(RecordStore):
    """
    Record store backed by the `kv_entries` table.

    Each get/put opens its own short-lived session from the injected factory
    and commits immediately, which gives read-your-writes per key.

    Error Handling:
        SQLAlchemy errors are logged with the affected key and re-raised as
        StoreError; the global handler turns that into a generic 500.
    """

    backend_name = "database"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        from shareable_urls.models.kv_entry import KVEntry

        try:
            async with self._session_factory() as session:
                entry = await session.get(KVEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            logger.error("Store read failed for key %s: %s", key, str(e))
            raise StoreError(context={"key": key, "operation": "get"}) from e

    async def put(self, key: str, value: str) -> None:
        from shareable_urls.models.kv_entry import KVEntry

        try:
            async with self._session_factory() as session:
                # merge() issues INSERT for new keys and UPDATE for existing ones
                await session.merge(KVEntry(key=key, value=value))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Store write failed for key %s: %s", key, str(e))
            raise StoreError(context={"key": key, "operation": "put"}) from e

    async def ping(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Store ping failed: %s", str(e))
            return False


def build_record_store(config: Settings) -> RecordStore:
    """
    Build the record store selected by STORE_BACKEND.

    "memory"   → InMemoryRecordStore
    "database" → SQLRecordStore over the shared async session factory
    """
    if config.store_backend == "memory":
        logger.warning("Using in-memory record store; data is lost on restart")
        return InMemoryRecordStore()

    from shareable_urls.database import async_session_factory

    return SQLRecordStore(async_session_factory)


def get_record_store(request: Request) -> RecordStore:
    """FastAPI dependency returning the store attached to the running app."""
    return request.app.state.record_store
