"""Initial schema: transformations and usage_events.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "transformations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("session_id", sa.String(255), nullable=False),
        sa.Column("original_blob_url", sa.Text(), nullable=True),
        sa.Column("enhanced_blob_url", sa.Text(), nullable=True),
        sa.Column("prompt_used", sa.Text(), nullable=True),
        sa.Column("style_key", sa.String(100), nullable=True),
        sa.Column("style_name", sa.String(255), nullable=True),
        sa.Column("processing_time_ms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("original_size_bytes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enhanced_size_bytes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("original_dimensions", sa.String(50), nullable=True),
        sa.Column("enhanced_dimensions", sa.String(50), nullable=True),
        sa.Column("opt_in", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_hash", sa.String(64), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
    )
    op.create_index("ix_transformations_created_at", "transformations", [sa.text("created_at DESC")])
    op.create_index("ix_transformations_style_key", "transformations", ["style_key"])
    op.create_index(
        "ix_transformations_opt_in", "transformations", ["opt_in"],
        sqlite_where=sa.text("opt_in = 1"),
        postgresql_where=sa.text("opt_in"),
    )

    op.create_table(
        "usage_events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("transformation_id", sa.String(36), nullable=True),
        sa.Column("session_id", sa.String(255), nullable=False),
        sa.Column("event_type", sa.Text(), nullable=False),
        sa.Column("event_data", sa.JSON(), nullable=True),
        sa.Column("ip_hash", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("device_type", sa.String(50), nullable=True),
        sa.Column("screen_size", sa.String(50), nullable=True),
    )
    op.create_index("ix_usage_events_created_at", "usage_events", [sa.text("created_at DESC")])
    op.create_index("ix_usage_events_session_id", "usage_events", ["session_id"])
    op.create_index("ix_usage_events_event_type", "usage_events", ["event_type"])


def downgrade() -> None:
    op.drop_table("usage_events")
    op.drop_table("transformations")
