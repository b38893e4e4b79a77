"""
Shareable URLs Backend - Key-Value Entry SQLAlchemy Model
==========================================================

What:  ORM model representing the `kv_entries` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by SQLRecordStore for get/put and by Alembic for schema management.

Table Design:
    The service only needs a flat string → string map, so the table is a single
    key/value pair per row. Records, view counters and checksum index entries
    all share it; they are distinguished purely by key shape:
        shareable_url:<uuid>   JSON document
        views:<uuid>           decimal counter
        <contentHash>          owning record key
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from shareable_urls.database import Base


class KVEntry(Base):
    """
    One key-value pair in the record store.

    Lifecycle:
        1. Inserted on the first put() for a key
        2. Overwritten in place on every later put() (last writer wins)
        3. Never deleted; the service defines no delete operation
    """

    __tablename__ = "kv_entries"

    # ── Primary Key ───────────────────────────────────────────────────────
    # Caller-controlled string; content hashes are opaque and may be long
    key: Mapped[str] = mapped_column(
        String(512),
        primary_key=True,
        comment="Store key: shareable_url:<uuid>, views:<uuid> or a content hash",
    )

    # ── Value ─────────────────────────────────────────────────────────────
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="UTF-8 string value (JSON document, decimal counter or record key)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this key was last written (UTC)",
    )

    def __repr__(self) -> str:
        return f"<KVEntry(key='{self.key}', updated_at='{self.updated_at}')>"
