"""Create records table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the `records` table shared by every collection of the
       database store.
How:   Records are JSON documents partitioned by collection name; the
       autoincrement pk defines listing order.

Rollback: downgrade() drops the table entirely (all records lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the records table. Column docs live in kennel/models/record.py."""
    op.create_table(
        "records",
        sa.Column(
            "pk",
            sa.Integer(),
            autoincrement=True,
            nullable=False,
            comment="Surrogate key; ordering follows insertion",
        ),
        sa.Column(
            "collection",
            sa.String(64),
            nullable=False,
            comment="Resource collection name, e.g. 'dogs'",
        ),
        sa.Column(
            "record_id",
            sa.String(64),
            nullable=False,
            comment="Public record identifier, unique within its collection",
        ),
        sa.Column(
            "data",
            sa.JSON(),
            nullable=False,
            comment="Full record document",
        ),
        sa.PrimaryKeyConstraint("pk"),
        sa.UniqueConstraint(
            "collection", "record_id", name="uq_records_collection_record_id"
        ),
    )


def downgrade() -> None:
    """Drop the records table (destructive)."""
    op.drop_table("records")
