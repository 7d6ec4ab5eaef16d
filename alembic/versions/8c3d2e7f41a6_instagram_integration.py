"""instagram integration

Revision ID: 8c3d2e7f41a6
Revises: 5b1f0c2a9d3e
Create Date: 2026-10-19 15:40:08.518302

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8c3d2e7f41a6"
down_revision: Union[str, None] = "5b1f0c2a9d3e"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    """Instagram 토큰, 해시태그 테이블 생성"""
    op.create_table(
        "instagram_credentials",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("access_token", sa.Text, nullable=False),
        sa.Column("user_id", sa.String(50), nullable=False),
        sa.Column("token_type", sa.String(20), nullable=False, server_default="user"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(36), nullable=True),
    )
    op.create_index(
        "instagram_credentials_is_active_index", "instagram_credentials", ["is_active"]
    )

    op.create_table(
        "instagram_hashtags",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("keyword", sa.String(100), nullable=False, unique=True),
        sa.Column("hashtag_id", sa.String(50), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("updated_by", sa.String(36), nullable=True),
    )


def downgrade():
    op.drop_table("instagram_hashtags")
    op.drop_index("instagram_credentials_is_active_index", "instagram_credentials")
    op.drop_table("instagram_credentials")
