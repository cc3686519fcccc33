"""create api_keys table

Revision ID: 0001
Revises:
Create Date: 2026-10-19

One row per issued key. seq is the autoincrement insertion order that
list() sorts on; the public id is a separate unique column. The secret
is stored verbatim (reveal must return the value issued at creation);
monthly_limit NULL = unlimited.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "api_keys",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("secret", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("usage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("monthly_limit", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id", name="uq_api_keys_id"),
        sa.UniqueConstraint("secret", name="uq_api_keys_secret"),
        sa.CheckConstraint("usage >= 0", name="ck_api_keys_usage_non_negative"),
        sa.CheckConstraint(
            "monthly_limit IS NULL OR monthly_limit > 0",
            name="ck_api_keys_limit_positive",
        ),
    )


def downgrade() -> None:
    op.drop_table("api_keys")
