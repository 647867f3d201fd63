"""create users friends table

Revision ID: 392349af8917
Revises: 7c1e5a9d2f40
Create Date: 2026-10-12 10:26:02.118623

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy import func

# revision identifiers, used by Alembic.
revision: str = '392349af8917'
down_revision: Union[str, Sequence[str], None] = '7c1e5a9d2f40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users_friends",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("friend_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("remark", sa.String(50), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=func.now()),
        sa.UniqueConstraint("user_id", "friend_id", name="unique_users_friend"),
        sa.CheckConstraint("user_id <> friend_id", name="ck_users_friend_not_self"),
    )


def downgrade() -> None:
    op.drop_table("users_friends")
