"""
Shareable URLs Backend - Shareable URL Service (Business Logic)
================================================================

What:  Record lifecycle over the key-value store: create with content-hash
       deduplication, fetch with view counting, merge-update, batch metadata.
How:   Reads and writes three key shapes through an injected RecordStore.
Who:   Called by the route handlers in routes/records.py.
When:  Once per request; the service itself holds no per-request state.

Store Layout:
    shareable_url:<key>   JSON record {key, contentHash, dateCreation,
                          dateModification?, ...payload}
    views:<key>           decimal view counter, absent means never viewed
    <contentHash>         key of the record that first claimed the hash

Known Race:
    Duplicate detection is check-then-write on two separate keys. Two
    concurrent creations with the same contentHash can both pass the check;
    the checksum index then points at whichever wrote last. The store offers
    no conditional put to close this.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from shareable_urls.exceptions import DuplicateContent, NotFoundError, StoreError
from shareable_urls.schemas.shareable_url import ShareableURLMetadata
from shareable_urls.store import RecordStore
from shareable_urls.validation import validate_record_key, validate_url_keys

logger = logging.getLogger(__name__)

RECORD_KEY_PREFIX = "shareable_url:"
VIEWS_KEY_PREFIX = "views:"

# Fields the service owns; callers cannot set them through the payload.
# contentHash is supplied at creation and may be overwritten on update.
SYSTEM_FIELDS = frozenset({"key", "dateCreation", "dateModification", "viewCount"})


def utc_now_iso() -> str:
    """Current UTC time as ISO 8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def record_key(key: str) -> str:
    return f"{RECORD_KEY_PREFIX}{key}"


def views_key(key: str) -> str:
    return f"{VIEWS_KEY_PREFIX}{key}"


def checksum_key(content_hash: Any) -> str:
    """Store key of the checksum index entry for a content hash."""
    if isinstance(content_hash, str):
        return content_hash
    return json.dumps(content_hash)


class ShareableURLService:
    """
    Business logic for shareable URL records.

    Responsibilities:
        - create(): validate key, reject duplicate content, persist record + index
        - get_shareable_url(): record with current view count attached (no increment)
        - record_view(): increment the view counter for a fetched record
        - update(): merge caller fields into an existing record
        - get_metadata(): concurrent batch projection of several records

    Args:
        store: Key-value backend (in-memory or SQL)
        clock: Returns the timestamp string used for dateCreation/dateModification
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.store = store
        self.clock = clock

    # ── Creation ──────────────────────────────────────────────────────────

    async def create(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a new record from a POST / body.

        Workflow Steps:
            1. Validate `key` is a UUID
            2. Look up `contentHash` (default "") in the checksum index
            3. Persist the record with dateCreation = now
            4. Persist the checksum index entry contentHash → key

        An empty or missing contentHash is indexed like any other value, so
        only the first record created without a hash can claim it.

        Returns:
            The persisted record

        Raises:
            InvalidIdentifier: key is not a UUID (→ 400)
            DuplicateContent: contentHash is already indexed (→ 400)
            StoreError: backend failure (→ 500)
        """
        key = validate_record_key(body.get("key"))
        content_hash = body.get("contentHash", "")
        payload = {
            field: value
            for field, value in body.items()
            if field not in SYSTEM_FIELDS and field != "contentHash"
        }

        existing_document = await self.store.get(checksum_key(content_hash))
        if existing_document:
            logger.warning(
                "Rejected record %s: content hash already owned by %s",
                key,
                existing_document,
            )
            raise DuplicateContent(existing_document=existing_document)

        record = {
            "key": key,
            **payload,
            "contentHash": content_hash,
            "dateCreation": self.clock(),
        }
        await self._write_record(key, record)
        await self.store.put(checksum_key(content_hash), key)

        logger.info("Created record %s (%d payload fields)", key, len(payload))
        return record

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_shareable_url(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a record with its current view count attached.

        Does NOT increment the counter.

        Returns:
            {...record, viewCount} or None when no record exists
        """
        raw = await self.store.get(record_key(key))
        if raw is None:
            return None
        document = self._decode_record(key, raw)
        document["viewCount"] = await self.get_view_count(key)
        return document

    async def get_view_count(self, key: str) -> int:
        """Current view counter; an absent counter reads as 0."""
        raw = await self.store.get(views_key(key))
        if not raw:
            return 0
        return self._decode_count(key, raw)

    async def increment_view_count(self, key: str) -> int:
        """
        Advance the view counter and return the new value.

        An absent counter becomes 0, an existing one becomes n + 1. The first
        view of a record therefore reports 0, the second 1, and so on.
        """
        raw = await self.store.get(views_key(key))
        count = self._decode_count(key, raw) + 1 if raw else 0
        await self.store.put(views_key(key), str(count))
        return count

    async def record_view(self, key: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Count one view of a fetched record and return it with the new count."""
        view_count = await self.increment_view_count(key)
        return {**document, "viewCount": view_count}

    # ── Update ────────────────────────────────────────────────────────────

    async def update(self, key: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge caller fields into an existing record.

        The stored record becomes {...stored, ...body, key, dateModification=now}.
        key and dateCreation are never changed; viewCount is not a stored field.

        Returns:
            The record as it was BEFORE this update, with the current view
            count. Later reads return the merged fields.

        Raises:
            NotFoundError: no record under key (→ 404)
        """
        # Re-read so the response reflects the pre-update state
        document = await self.get_shareable_url(key)
        if document is None:
            raise NotFoundError(resource_id=key)

        stored = {field: value for field, value in document.items() if field != "viewCount"}
        changes = {field: value for field, value in body.items() if field not in SYSTEM_FIELDS}
        merged = {
            **stored,
            **changes,
            "key": key,
            "dateModification": self.clock(),
        }
        await self._write_record(key, merged)
        logger.info("Updated record %s (%d fields changed)", key, len(changes))

        view_count = await self.get_view_count(key)
        return {**document, "viewCount": view_count}

    # ── Batch Metadata ────────────────────────────────────────────────────

    async def get_metadata(self, url_keys: Any) -> List[Dict[str, Any]]:
        """
        Project several records down to their metadata fields.

        Records are fetched concurrently; the result keeps the order of
        `url_keys` and silently skips keys with no record.

        Raises:
            InvalidIdentifier: url_keys is not a list of UUIDs (→ 400)
        """
        keys = validate_url_keys(url_keys)
        documents = await asyncio.gather(*(self.get_shareable_url(k) for k in keys))
        return [
            ShareableURLMetadata.model_validate(document).model_dump(exclude_unset=True)
            for document in documents
            if document is not None
        ]

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _write_record(self, key: str, record: Dict[str, Any]) -> None:
        await self.store.put(record_key(key), json.dumps(record))

    def _decode_record(self, key: str, raw: str) -> Dict[str, Any]:
        try:
            document = json.loads(raw)
        except ValueError as e:
            logger.error("Stored record %s is not valid JSON", key)
            raise StoreError(context={"key": record_key(key)}) from e
        if not isinstance(document, dict):
            logger.error("Stored record %s is not a JSON object", key)
            raise StoreError(context={"key": record_key(key)})
        return document

    def _decode_count(self, key: str, raw: str) -> int:
        try:
            return int(raw)
        except ValueError as e:
            logger.error("Stored view counter for %s is not an integer: %r", key, raw)
            raise StoreError(context={"key": views_key(key)}) from e
