"""Create kv_entries table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `kv_entries` table backing SQLRecordStore.
How:   One string primary key and one text value per row; records, view
       counters and checksum index entries all live here.

Rollback: downgrade() drops the table entirely (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the kv_entries table. Column docs live in shareable_urls/models/kv_entry.py."""
    op.create_table(
        "kv_entries",

        sa.Column(
            "key",
            sa.String(512),
            nullable=False,
            comment="Store key: shareable_url:<uuid>, views:<uuid> or a content hash",
        ),

        sa.Column(
            "value",
            sa.Text(),
            nullable=False,
            comment="UTF-8 string value (JSON document, decimal counter or record key)",
        ),

        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this key was last written (UTC)",
        ),

        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    """
    Drop the kv_entries table entirely.

    WARNING: This is destructive; every record, counter and checksum is lost.
    """
    op.drop_table("kv_entries")
