"""create users chat list table

Revision ID: 28e13e773780
Revises: 392349af8917
Create Date: 2026-10-12 10:31:37.550912

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy import func

# revision identifiers, used by Alembic.
revision: str = '28e13e773780'
down_revision: Union[str, Sequence[str], None] = '392349af8917'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users_chat_list",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("type", sa.SmallInteger, nullable=False, server_default="1"),
        sa.Column("uid", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("friend_id", sa.Integer, nullable=False, server_default="0"),
        sa.Column("group_id", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.SmallInteger, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=func.now()),
    )
    op.create_index("ix_users_chat_list_uid_friend", "users_chat_list", ["uid", "friend_id"])


def downgrade() -> None:
    op.drop_index("ix_users_chat_list_uid_friend", table_name="users_chat_list")
    op.drop_table("users_chat_list")
