"""sentinel_tables

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-19

Tables for the SQL schema store. Safe to run on an empty database.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a2b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── sentinel_schemas ───────────────────────────────────────────────────────
    op.create_table(
        "sentinel_schemas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("endpoint_key", sa.String(), nullable=False),
        sa.Column("schema_version", sa.String(), nullable=False),
        sa.Column("json_schema", sa.JSON(), nullable=False),
        sa.Column("sample_count", sa.Integer(), nullable=False),
        sa.Column("hardened_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_sentinel_schemas_endpoint_key", "sentinel_schemas", ["endpoint_key"], unique=True)

    # ── sentinel_samples ───────────────────────────────────────────────────────
    op.create_table(
        "sentinel_samples",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("endpoint_key", sa.String(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_sentinel_samples_endpoint_key", "sentinel_samples", ["endpoint_key"])

    # ── sentinel_schema_history ────────────────────────────────────────────────
    op.create_table(
        "sentinel_schema_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("endpoint_key", sa.String(), nullable=False),
        sa.Column("schema_version", sa.String(), nullable=False),
        sa.Column("json_schema", sa.JSON(), nullable=False),
        sa.Column("sample_count", sa.Integer(), nullable=False),
        sa.Column("hardened_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_sentinel_schema_history_endpoint_key", "sentinel_schema_history", ["endpoint_key"])


def downgrade() -> None:
    op.drop_index("ix_sentinel_schema_history_endpoint_key", table_name="sentinel_schema_history")
    op.drop_table("sentinel_schema_history")
    op.drop_index("ix_sentinel_samples_endpoint_key", table_name="sentinel_samples")
    op.drop_table("sentinel_samples")
    op.drop_index("ix_sentinel_schemas_endpoint_key", table_name="sentinel_schemas")
    op.drop_table("sentinel_schemas")
