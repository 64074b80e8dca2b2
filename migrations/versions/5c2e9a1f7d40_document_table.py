"""document table

Revision ID: 5c2e9a1f7d40
Revises:
Create Date: 2026-10-19 09:12:44.318207

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c2e9a1f7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the partitioned document table."""
    op.create_table(
        "document",
        sa.Column("container", sa.String(length=64), nullable=False),
        sa.Column("partition_key", sa.String(length=255), nullable=False),
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("body", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("container", "partition_key", "id"),
    )


def downgrade() -> None:
    """Drop the document table."""
    op.drop_table("document")
