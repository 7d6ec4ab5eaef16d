"""이 모듈은 매장(Shop), 매장 소유 관계(ShopOwner), 태그(Tag) 모델을 정의합니다."""

from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import NonEscapedJSON, new_uuid, utcnow


class Shop(Base):
    """가챠/피규어/인형뽑기 매장 정보를 저장하는 클래스

    Attributes:
        id (str): 매장 ID
        name (str): 매장 이름
        shop_type (List[str]): 매장 유형 목록 ("gacha", "figure", "claw")
        phone (Optional[str]): 전화번호
        latitude (Optional[float]): 위도 (33 ~ 43)
        longitude (Optional[float]): 경도 (124 ~ 132)
        business_hours (Optional[dict]): 요일별 영업 시간
        is_24_hours (bool): 24시간 영업 여부
        gacha_machine_count (Optional[int]): 가챠 기계 수 (0 ~ 1000)
        main_series (List[str]): 주력 시리즈
        sido (str): 시/도
        road_address (str): 도로명 주소
        social_urls (Optional[dict]): website, instagram, x, youtube 링크
        verification_status (str): 검증 상태("pending", "verified", "rejected")
        data_source (str): 등록 경로("admin_input", "user_input", "crawling", "user_submit")
        is_deleted (bool): 소프트 삭제 여부
    """

    __tablename__ = "shops"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    shop_type: Mapped[List[str]] = mapped_column(
        NonEscapedJSON, nullable=False, default=list
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float(53), nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float(53), nullable=True)
    business_hours: Mapped[Optional[dict[str, Any]]] = mapped_column(
        NonEscapedJSON, nullable=True
    )
    is_24_hours: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    gacha_machine_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    main_series: Mapped[List[str]] = mapped_column(
        NonEscapedJSON, nullable=False, default=list
    )

    sido: Mapped[str] = mapped_column(String(50), nullable=False)
    sigungu: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    jibun_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    road_address: Mapped[str] = mapped_column(Text, nullable=False)
    detail_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    zone_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    building_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    social_urls: Mapped[Optional[dict[str, Any]]] = mapped_column(
        NonEscapedJSON, nullable=True
    )

    verification_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )
    data_source: Mapped[str] = mapped_column(
        String(20), nullable=False, default="admin_input"
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    verified_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submission_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    deleted_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "latitude IS NULL OR (latitude >= 33 AND latitude <= 43)",
            name="shops_latitude_check",
        ),
        CheckConstraint(
            "longitude IS NULL OR (longitude >= 124 AND longitude <= 132)",
            name="shops_longitude_check",
        ),
        CheckConstraint(
            "gacha_machine_count IS NULL OR "
            "(gacha_machine_count >= 0 AND gacha_machine_count <= 1000)",
            name="shops_gacha_machine_count_check",
        ),
        CheckConstraint(
            "verification_status IN ('pending', 'verified', 'rejected')",
            name="shops_verification_status_check",
        ),
        CheckConstraint(
            "data_source IN ('admin_input', 'user_input', 'crawling', 'user_submit')",
            name="shops_data_source_check",
        ),
        Index("shops_name_index", "name"),
        Index("shops_verification_status_index", "verification_status"),
        Index("shops_created_at_index", "created_at"),
    )


class ShopOwner(Base):
    """점주 계정과 매장의 소유 관계를 저장하는 클래스

    verified=True 인 관계만 점주 권한의 근거가 됩니다.

    Attributes:
        id (str): 소유 관계 ID
        shop_id (str): 매장 ID
        owner_id (str): 점주 계정 ID
        verified (bool): 슈퍼 관리자 검증 여부
        phone (Optional[str]): 점주 연락처
    """

    __tablename__ = "shop_owners"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    shop_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shops.id", ondelete="CASCADE"), nullable=False
    )
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("admin_users.id", ondelete="CASCADE"), nullable=False
    )
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    business_license: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    business_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        UniqueConstraint("shop_id", "owner_id", name="shop_owners_unique"),
        Index("shop_owners_owner_id_index", "owner_id"),
    )


class Tag(Base):
    """매장에 붙는 태그를 저장하는 클래스

    Attributes:
        id (str): 태그 ID
        name (str): 태그 이름 (삭제되지 않은 태그 사이에서 유일)
        description (Optional[str]): 설명
        is_deleted (bool): 소프트 삭제 여부
    """

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    __table_args__ = (Index("tags_name_index", "name"),)
