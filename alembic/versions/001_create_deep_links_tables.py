"""Create deep_links and deep_link_clicks tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the deep link tables."""
    op.create_table(
        "deep_links",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "slug",
            sa.String(32),
            nullable=False,
            comment="Random URL-safe identifier used in /s/{slug}",
        ),
        sa.Column(
            "app_id",
            sa.String(100),
            nullable=False,
            comment="Application id from the routing table (not enforced)",
        ),
        sa.Column("route", sa.Text(), nullable=False),
        sa.Column(
            "params",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
            comment="Route parameters, string keys to string values",
        ),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_deep_links")),
    )
    op.create_index(op.f("ix_deep_links_slug"), "deep_links", ["slug"], unique=True)
    op.create_index(op.f("ix_deep_links_app_id"), "deep_links", ["app_id"])

    op.create_table(
        "deep_link_clicks",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("deep_link_id", sa.Uuid(), nullable=False),
        sa.Column(
            "clicked_at",
            sa.DateTime(),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column(
            "user_agent",
            sa.Text(),
            nullable=False,
            comment="Raw User-Agent header, 'unknown' when absent",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_deep_link_clicks")),
        sa.ForeignKeyConstraint(
            ["deep_link_id"],
            ["deep_links.id"],
            name=op.f("fk_deep_link_clicks_deep_link_id_deep_links"),
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        op.f("ix_deep_link_clicks_deep_link_id"),
        "deep_link_clicks",
        ["deep_link_id"],
    )


def downgrade() -> None:
    """Drop the deep link tables."""
    op.drop_index(op.f("ix_deep_link_clicks_deep_link_id"), table_name="deep_link_clicks")
    op.drop_table("deep_link_clicks")
    op.drop_index(op.f("ix_deep_links_app_id"), table_name="deep_links")
    op.drop_index(op.f("ix_deep_links_slug"), table_name="deep_links")
    op.drop_table("deep_links")
