"""Create webhook relay tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

Tables: webhook_hits, forward_rules, aliases
"""

import sqlalchemy as sa
from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create relay tables."""
    op.create_table(
        "webhook_hits",
        sa.Column("id", sa.BigInteger, sa.Identity(always=False), primary_key=True),
        sa.Column("endpoint", sa.Text, nullable=False),
        sa.Column("suffix", sa.Text),
        sa.Column("received_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("response_ms", sa.Integer, nullable=False),
        sa.Column("body_length", sa.Integer, nullable=False),
        sa.Column("body", sa.Text),
        sa.Column("forward_status", sa.Integer),
        sa.Column("forward_ms", sa.Integer),
        sa.Column("forward_error", sa.Text),
    )
    op.create_index(
        "idx_webhook_hits_endpoint_received",
        "webhook_hits",
        ["endpoint", "received_at"],
    )
    op.create_index("idx_webhook_hits_received", "webhook_hits", ["received_at"])

    op.create_table(
        "forward_rules",
        sa.Column("endpoint", sa.Text, primary_key=True),
        sa.Column("forward_url", sa.Text, nullable=False),
        sa.Column("enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("persist", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    )

    op.create_table(
        "aliases",
        sa.Column("id", sa.BigInteger, sa.Identity(always=False), primary_key=True),
        sa.Column("value", sa.Text, nullable=False),
        sa.Column("label", sa.Text, nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    )
    op.create_index("aliases_value_unique", "aliases", ["value"], unique=True)


def downgrade() -> None:
    """Drop relay tables."""
    op.drop_index("aliases_value_unique", table_name="aliases")
    op.drop_table("aliases")
    op.drop_table("forward_rules")
    op.drop_index("idx_webhook_hits_received", table_name="webhook_hits")
    op.drop_index("idx_webhook_hits_endpoint_received", table_name="webhook_hits")
    op.drop_table("webhook_hits")
