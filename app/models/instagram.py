"""이 모듈은 Instagram Graph API 연동 정보(InstagramCredential, InstagramHashtag) 모델을 정의합니다."""

from __future__ import annotations
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import new_uuid, utcnow


class InstagramCredential(Base):
    """Instagram Graph API 접근 토큰을 저장하는 클래스

    활성(is_active) 상태의 토큰은 항상 최대 한 개입니다.

    Attributes:
        id (str): 토큰 레코드 ID
        access_token (str): Graph API 접근 토큰 (응답에 노출하지 않음)
        user_id (str): Instagram 비즈니스 계정 ID
        token_type (str): 토큰 종류
        expires_at (datetime): 만료 시각
        is_active (bool): 현재 사용 중인 토큰 여부
        created_by (Optional[str]): 등록한 관리자 ID
    """

    __tablename__ = "instagram_credentials"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(String(50), nullable=False)
    token_type: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    __table_args__ = (
        Index("instagram_credentials_is_active_index", "is_active"),
    )


class InstagramHashtag(Base):
    """수집 대상으로 등록된 Instagram 해시태그를 저장하는 클래스

    Attributes:
        id (str): 레코드 ID
        keyword (str): 검색 키워드 (유일)
        hashtag_id (str): Graph API 해시태그 ID (유일)
        is_active (bool): 수집 활성 여부
    """

    __tablename__ = "instagram_hashtags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    keyword: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    hashtag_id: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
