"""create friend applies table

Revision ID: 7c1e5a9d2f40
Revises: 3854834d3c61
Create Date: 2026-10-12 10:21:44.901377

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy import func

# revision identifiers, used by Alembic.
revision: str = '7c1e5a9d2f40'
down_revision: Union[str, Sequence[str], None] = '3854834d3c61'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "friend_applies",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("applicant_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("target_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("remark", sa.String(50), nullable=False, server_default=""),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now()),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("applicant_id <> target_id", name="ck_friend_apply_not_self"),
    )
    op.create_index("ix_friend_applies_target_created", "friend_applies", ["target_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_friend_applies_target_created", table_name="friend_applies")
    op.drop_table("friend_applies")
