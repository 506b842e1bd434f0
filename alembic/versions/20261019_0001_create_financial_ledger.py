"""create financial_data and user_settings tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "financial_data",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "date",
            sa.Date(),
            nullable=False,
            comment="Calendar day summarized by this entry; upsert conflict key",
        ),
        sa.Column("revenue", sa.Numeric(14, 2), nullable=False),
        sa.Column("costs", sa.Numeric(14, 2), nullable=False),
        sa.Column("margin", sa.Numeric(14, 2), nullable=False),
        sa.Column(
            "margin_percentage",
            sa.Numeric(20, 1),
            nullable=False,
            comment="margin / revenue * 100; 0 when revenue is 0",
        ),
        sa.Column("discounts", sa.Numeric(14, 2), nullable=False),
        sa.Column("cashback", sa.Numeric(14, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("date", name="uq_financial_data_date"),
    )

    op.create_table(
        "user_settings",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "setting_key",
            sa.String(length=120),
            nullable=False,
            comment="Logical document key, e.g. channel_statistics",
        ),
        sa.Column(
            "setting_value",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Whole-document value; replaced on every write",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("setting_key", name="uq_user_settings_setting_key"),
    )


def downgrade() -> None:
    op.drop_table("user_settings")
    op.drop_table("financial_data")
