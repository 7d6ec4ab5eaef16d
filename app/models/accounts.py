"""이 모듈은 관리자 계정(AdminUser)과 일반 사용자 계정(GeneralUser) 모델을 정의합니다.

두 계정 테이블은 서로 겹치지 않으며, 인증 서비스가 발급한 사용자 ID를 기본 키로 공유합니다.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import utcnow


class AdminUser(Base):
    """관리자/점주 계정 정보를 저장하는 클래스

    Attributes:
        id (str): 인증 서비스의 사용자 ID
        email (str): 이메일
        full_name (str): 이름
        role (str): 역할("super_admin", "admin", "owner")
        status (str): 계정 상태("active", "suspended", "deleted")
        approval_status (str): 승인 상태("pending", "approved", "rejected")
        approved_at (Optional[datetime]): 승인 시각
        approved_by (Optional[str]): 승인/거절 처리자 ID
        rejection_reason (Optional[str]): 거절 사유
        last_login_at (Optional[datetime]): 마지막 로그인 시각
    """

    __tablename__ = "admin_users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="admin")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    approval_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approved_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    business_license: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    business_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('super_admin', 'admin', 'owner')", name="admin_users_role_check"
        ),
        CheckConstraint(
            "status IN ('active', 'suspended', 'deleted')",
            name="admin_users_status_check",
        ),
        CheckConstraint(
            "approval_status IN ('pending', 'approved', 'rejected')",
            name="admin_users_approval_status_check",
        ),
        Index("admin_users_role_index", "role"),
        Index("admin_users_approval_status_index", "approval_status"),
    )


class GeneralUser(Base):
    """일반(소비자) 사용자 계정 정보를 저장하는 클래스

    Attributes:
        id (str): 인증 서비스의 사용자 ID
        email (str): 이메일
        nickname (str): 닉네임 (활성 계정 사이에서 유일)
        full_name (Optional[str]): 이름
        provider (str): 소셜 로그인 제공자("kakao", "google", "apple")
        provider_id (Optional[str]): 제공자 측 사용자 ID
        status (str): 계정 상태("active", "suspended", "deleted")
    """

    __tablename__ = "general_users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    nickname: Mapped[str] = mapped_column(String(50), nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    provider: Mapped[str] = mapped_column(String(20), nullable=False, default="kakao")
    provider_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    last_active_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            "provider IN ('kakao', 'google', 'apple')",
            name="general_users_provider_check",
        ),
        CheckConstraint(
            "status IN ('active', 'suspended', 'deleted')",
            name="general_users_status_check",
        ),
        # 활성 계정 사이에서만 닉네임 중복 금지
        Index(
            "general_users_active_nickname_unique",
            "nickname",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )
