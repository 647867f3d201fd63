"""create users table

Revision ID: 3854834d3c61
Revises: 
Create Date: 2026-10-12 10:14:08.210345

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy import func

# revision identifiers, used by Alembic.
revision: str = '3854834d3c61'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("mobile", sa.String(11), nullable=False, unique=True, index=True),
        sa.Column("nickname", sa.String(50), nullable=False, server_default=""),
        sa.Column("avatar", sa.String(255), server_default=""),
        sa.Column("motto", sa.String(100), server_default=""),
        sa.Column("gender", sa.SmallInteger, server_default="0"),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now()),
        sa.Column("is_active", sa.Boolean, server_default=sa.text("true")),
    )


def downgrade() -> None:
    op.drop_table("users")
