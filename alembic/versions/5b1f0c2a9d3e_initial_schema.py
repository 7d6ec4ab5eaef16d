"""initial schema

Revision ID: 5b1f0c2a9d3e
Revises:
Create Date: 2026-10-19 10:12:41.204113

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from app.models.types import NonEscapedJSON

# revision identifiers, used by Alembic.
revision: str = "5b1f0c2a9d3e"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade():
    """계정, 메뉴, 매장, 태그, 제보, 감사 로그 테이블 생성"""
    op.create_table(
        "admin_users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("avatar_url", sa.Text, nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("approval_status", sa.String(20), nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.String(36), nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("business_license", sa.String(50), nullable=True),
        sa.Column("business_name", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "role IN ('super_admin', 'admin', 'owner')", name="admin_users_role_check"
        ),
        sa.CheckConstraint(
            "status IN ('active', 'suspended', 'deleted')",
            name="admin_users_status_check",
        ),
        sa.CheckConstraint(
            "approval_status IN ('pending', 'approved', 'rejected')",
            name="admin_users_approval_status_check",
        ),
    )
    op.create_index("admin_users_role_index", "admin_users", ["role"])
    op.create_index(
        "admin_users_approval_status_index", "admin_users", ["approval_status"]
    )

    op.create_table(
        "general_users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("nickname", sa.String(50), nullable=False),
        sa.Column("full_name", sa.String(100), nullable=True),
        sa.Column("avatar_url", sa.Text, nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("provider", sa.String(20), nullable=False),
        sa.Column("provider_id", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default="0"),
        *_timestamps(),
        sa.Column("last_active_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "provider IN ('kakao', 'google', 'apple')",
            name="general_users_provider_check",
        ),
        sa.CheckConstraint(
            "status IN ('active', 'suspended', 'deleted')",
            name="general_users_status_check",
        ),
    )
    op.create_index(
        "general_users_active_nickname_unique",
        "general_users",
        ["nickname"],
        unique=True,
        sqlite_where=sa.text("status = 'active'"),
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "menus",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(100), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("parent_id", sa.String(36), nullable=True),
        sa.Column("path", sa.String(255), nullable=True),
        sa.Column("icon", sa.String(100), nullable=True),
        sa.Column("display_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="1"),
        sa.Column("metadata", NonEscapedJSON(), nullable=True),
        *_timestamps(),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("updated_by", sa.String(36), nullable=True),
    )
    op.create_index("menus_parent_id_index", "menus", ["parent_id"])
    op.create_index("menus_display_order_index", "menus", ["display_order"])

    op.create_table(
        "admin_menu_permissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("admin_id", sa.String(36), nullable=False),
        sa.Column("menu_id", sa.String(36), nullable=False),
        sa.Column("granted_by", sa.String(36), nullable=True),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "admin_id", "menu_id", name="admin_menu_permissions_unique"
        ),
    )
    op.create_index(
        "admin_menu_permissions_admin_id_index", "admin_menu_permissions", ["admin_id"]
    )

    op.create_table(
        "shops",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("shop_type", NonEscapedJSON(), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("latitude", sa.Float(53), nullable=True),
        sa.Column("longitude", sa.Float(53), nullable=True),
        sa.Column("business_hours", NonEscapedJSON(), nullable=True),
        sa.Column("is_24_hours", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("gacha_machine_count", sa.Integer, nullable=True),
        sa.Column("main_series", NonEscapedJSON(), nullable=False),
        sa.Column("sido", sa.String(50), nullable=False),
        sa.Column("sigungu", sa.String(50), nullable=True),
        sa.Column("jibun_address", sa.Text, nullable=True),
        sa.Column("road_address", sa.Text, nullable=False),
        sa.Column("detail_address", sa.Text, nullable=True),
        sa.Column("zone_code", sa.String(10), nullable=True),
        sa.Column("building_name", sa.String(100), nullable=True),
        sa.Column("social_urls", NonEscapedJSON(), nullable=True),
        sa.Column("verification_status", sa.String(20), nullable=False),
        sa.Column("data_source", sa.String(20), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(36), nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("submission_note", sa.Text, nullable=True),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.String(36), nullable=True),
        *_timestamps(),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("updated_by", sa.String(36), nullable=True),
        sa.CheckConstraint(
            "latitude IS NULL OR (latitude >= 33 AND latitude <= 43)",
            name="shops_latitude_check",
        ),
        sa.CheckConstraint(
            "longitude IS NULL OR (longitude >= 124 AND longitude <= 132)",
            name="shops_longitude_check",
        ),
        sa.CheckConstraint(
            "gacha_machine_count IS NULL OR "
            "(gacha_machine_count >= 0 AND gacha_machine_count <= 1000)",
            name="shops_gacha_machine_count_check",
        ),
        sa.CheckConstraint(
            "verification_status IN ('pending', 'verified', 'rejected')",
            name="shops_verification_status_check",
        ),
        sa.CheckConstraint(
            "data_source IN ('admin_input', 'user_input', 'crawling', 'user_submit')",
            name="shops_data_source_check",
        ),
    )
    op.create_index("shops_name_index", "shops", ["name"])
    op.create_index(
        "shops_verification_status_index", "shops", ["verification_status"]
    )
    op.create_index("shops_created_at_index", "shops", ["created_at"])

    op.create_table(
        "shop_owners",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "shop_id",
            sa.String(36),
            sa.ForeignKey("shops.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "owner_id",
            sa.String(36),
            sa.ForeignKey("admin_users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("verified", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("business_license", sa.String(50), nullable=True),
        sa.Column("business_name", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("shop_id", "owner_id", name="shop_owners_unique"),
    )
    op.create_index("shop_owners_owner_id_index", "shop_owners", ["owner_id"])

    op.create_table(
        "tags",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("updated_by", sa.String(36), nullable=True),
    )
    op.create_index("tags_name_index", "tags", ["name"])

    op.create_table(
        "shop_tags",
        sa.Column(
            "shop_id",
            sa.String(36),
            sa.ForeignKey("shops.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            sa.String(36),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "user_submissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "shop_id",
            sa.String(36),
            sa.ForeignKey("shops.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "submitter_id",
            sa.String(36),
            sa.ForeignKey("general_users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("submission_type", sa.String(20), nullable=False),
        sa.Column("submission_note", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("submitted_data", NonEscapedJSON(), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(36), nullable=True),
        sa.Column("review_note", sa.Text, nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.CheckConstraint(
            "submission_type IN ('new', 'update', 'correction')",
            name="user_submissions_type_check",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="user_submissions_status_check",
        ),
    )
    op.create_index(
        "user_submissions_submitter_index",
        "user_submissions",
        ["submitter_id", "submitted_at"],
    )
    op.create_index("user_submissions_shop_index", "user_submissions", ["shop_id"])
    op.create_index("user_submissions_status_index", "user_submissions", ["status"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=True),
        sa.Column("actor_id", sa.String(36), nullable=True),
        sa.Column("changes", NonEscapedJSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "audit_logs_entity_index", "audit_logs", ["entity_type", "entity_id"]
    )


def downgrade():
    """생성한 테이블을 의존 관계 역순으로 삭제"""
    op.drop_table("audit_logs")
    op.drop_table("user_submissions")
    op.drop_table("shop_tags")
    op.drop_table("tags")
    op.drop_table("shop_owners")
    op.drop_table("shops")
    op.drop_table("admin_menu_permissions")
    op.drop_table("menus")
    op.drop_table("general_users")
    op.drop_table("admin_users")
