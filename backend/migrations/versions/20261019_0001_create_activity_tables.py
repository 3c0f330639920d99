"""create submission locks, daily activity and members

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "submission_locks",
        sa.Column("group_id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("owner_token", sa.String(64), nullable=False),
        sa.Column("acquired_at_ms", sa.BigInteger(), nullable=False),
        sa.Column("expires_at_ms", sa.BigInteger(), nullable=False),
    )

    op.create_table(
        "daily_activity",
        sa.Column("group_id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("activity_date", sa.Date(), primary_key=True),
        sa.Column("gym_done", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("shipping_done", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("mindfulness_done", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("attempts >= 0", name="ck_daily_activity_attempts_nonneg"),
    )

    op.create_table(
        "members",
        sa.Column("group_id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("display_name", sa.String(120), nullable=False),
        sa.Column("username", sa.String(64), nullable=True),
        sa.Column("gym_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("shipping_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mindfulness_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(
            "gym_count >= 0 AND shipping_count >= 0 AND mindfulness_count >= 0",
            name="ck_members_counts_nonneg",
        ),
    )
    op.create_index("ix_members_group_username", "members", ["group_id", "username"])
    # mention lookups compare lower(username)
    op.create_index("ix_members_group_username_lower", "members", ["group_id", sa.text("lower(username)")])


def downgrade():
    op.drop_index("ix_members_group_username_lower", table_name="members")
    op.drop_index("ix_members_group_username", table_name="members")
    op.drop_table("members")
    op.drop_table("daily_activity")
    op.drop_table("submission_locks")
