"""Initial schema: users, generations, subscriptions.

Idempotent: tables that already exist (databases created by an earlier
Base.metadata.create_all) are left as they are.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _has_table(name: str) -> bool:
    return sa.inspect(op.get_bind()).has_table(name)


def upgrade() -> None:
    if not _has_table("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("email", sa.String(), nullable=False),
            sa.Column("hashed_password", sa.String(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("plan_tier", sa.String(), nullable=False),
            sa.Column("generations_used", sa.Integer(), nullable=False),
            sa.Column("stripe_customer_id", sa.String(), nullable=True),
            sa.Column("stripe_subscription_id", sa.String(), nullable=True),
            sa.Column("language", sa.String(), nullable=False),
            sa.Column("theme", sa.String(), nullable=False),
            sa.Column("watermark_enabled", sa.Boolean(), nullable=False),
            sa.Column("watermark_type", sa.String(), nullable=False),
            sa.Column("watermark_logo_url", sa.String(), nullable=True),
            sa.Column("watermark_text", sa.String(), nullable=True),
            sa.Column("watermark_language", sa.String(), nullable=True),
            sa.Column("watermark_position", sa.String(), nullable=False),
            sa.Column("watermark_opacity", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("last_login", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_users_id", "users", ["id"])
        op.create_index("ix_users_email", "users", ["email"], unique=True)
        op.create_index("ix_users_stripe_subscription_id", "users", ["stripe_subscription_id"])

    if not _has_table("generations"):
        op.create_table(
            "generations",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("prompt", sa.Text(), nullable=False),
            sa.Column("style", sa.String(), nullable=False),
            sa.Column("room_type", sa.String(), nullable=True),
            sa.Column("image_url", sa.String(), nullable=True),
            sa.Column("has_watermark", sa.Boolean(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_generations_id", "generations", ["id"])
        op.create_index("ix_generations_user_id", "generations", ["user_id"])
        op.create_index("ix_generations_created_at", "generations", ["created_at"])

    if not _has_table("subscriptions"):
        op.create_table(
            "subscriptions",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("stripe_subscription_id", sa.String(), nullable=False),
            sa.Column("stripe_price_id", sa.String(), nullable=True),
            sa.Column("status", sa.String(), nullable=False),
            sa.Column("current_period_start", sa.DateTime(), nullable=True),
            sa.Column("current_period_end", sa.DateTime(), nullable=True),
            sa.Column("cancel_at_period_end", sa.Boolean(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("user_id"),
            sa.UniqueConstraint("stripe_subscription_id"),
        )
        op.create_index("ix_subscriptions_id", "subscriptions", ["id"])


def downgrade() -> None:
    op.drop_index("ix_subscriptions_id", table_name="subscriptions")
    op.drop_table("subscriptions")

    op.drop_index("ix_generations_created_at", table_name="generations")
    op.drop_index("ix_generations_user_id", table_name="generations")
    op.drop_index("ix_generations_id", table_name="generations")
    op.drop_table("generations")

    op.drop_index("ix_users_stripe_subscription_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
