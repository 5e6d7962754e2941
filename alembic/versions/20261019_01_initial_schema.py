"""Users and industry insights."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261019_01_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "industry_insights",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("industry", sa.String(length=255), nullable=False),
        sa.Column("salary_ranges", sa.JSON(), nullable=False),
        sa.Column("growth_rate", sa.Float(), nullable=False),
        sa.Column("demand_level", sa.String(length=16), nullable=False),
        sa.Column("top_skills", sa.JSON(), nullable=False),
        sa.Column("market_outlook", sa.String(length=16), nullable=False),
        sa.Column("key_trends", sa.JSON(), nullable=False),
        sa.Column("recommended_skills", sa.JSON(), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("next_update", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_industry_insights_industry", "industry_insights", ["industry"], unique=True)
    op.create_index("ix_industry_insights_next_update", "industry_insights", ["next_update"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("identity_id", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column(
            "industry",
            sa.String(length=255),
            sa.ForeignKey("industry_insights.industry"),
            nullable=True,
        ),
        sa.Column("experience", sa.Integer(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("skills", sa.JSON(), nullable=False),
    )
    op.create_index("ix_users_identity_id", "users", ["identity_id"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_identity_id", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_industry_insights_next_update", table_name="industry_insights")
    op.drop_index("ix_industry_insights_industry", table_name="industry_insights")
    op.drop_table("industry_insights")
