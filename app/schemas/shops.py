"""이 모듈은 매장 관련 데이터 스키마를 정의합니다.

입력 스키마는 느슨하게 정의하고, 범위/형식 검사는 `app.utils.validation` 에서 일관된 메시지로 수행합니다.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.base import Timestamp

ShopType = Literal["gacha", "figure", "claw"]
VerificationStatus = Literal["pending", "verified", "rejected"]


class SocialUrls(BaseModel):
    """매장 소셜 링크

    Attributes:
        website (Optional[str]): 홈페이지
        instagram (Optional[str]): 인스타그램
        x (Optional[str]): X(트위터)
        youtube (Optional[str]): 유튜브
    """

    website: Optional[str] = None
    instagram: Optional[str] = None
    x: Optional[str] = None
    youtube: Optional[str] = None


class ShopInput(BaseModel):
    """매장 등록/제보 요청 본문.

    Attributes:
        name (Optional[str]): 매장 이름 (필수, 100자 이하)
        shop_type (Optional[List[str]]): 매장 유형 목록 (gacha, figure, claw 중 하나 이상)
        road_address (Optional[str]): 도로명 주소 (필수)
        sido (Optional[str]): 시/도 (필수)
        latitude (Optional[float]): 위도 (33 ~ 43)
        longitude (Optional[float]): 경도 (124 ~ 132)
        gacha_machine_count (Optional[int]): 가챠 기계 수 (0 ~ 1000)
        tag_ids (Optional[List[str]]): 연결할 태그 ID 목록
    """

    name: Optional[str] = None
    shop_type: Optional[List[str]] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    business_hours: Optional[Dict[str, Any]] = None
    is_24_hours: bool = False
    gacha_machine_count: Optional[int] = None
    main_series: List[str] = Field(default_factory=list)
    sido: Optional[str] = None
    sigungu: Optional[str] = None
    jibun_address: Optional[str] = None
    road_address: Optional[str] = None
    detail_address: Optional[str] = None
    zone_code: Optional[str] = None
    building_name: Optional[str] = None
    social_urls: Optional[SocialUrls] = None
    tag_ids: Optional[List[str]] = None


class ShopUpdate(BaseModel):
    """매장 수정 요청 본문. 전달된 필드만 반영됩니다."""

    name: Optional[str] = None
    shop_type: Optional[List[str]] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    business_hours: Optional[Dict[str, Any]] = None
    is_24_hours: Optional[bool] = None
    gacha_machine_count: Optional[int] = None
    main_series: Optional[List[str]] = None
    sido: Optional[str] = None
    sigungu: Optional[str] = None
    jibun_address: Optional[str] = None
    road_address: Optional[str] = None
    detail_address: Optional[str] = None
    zone_code: Optional[str] = None
    building_name: Optional[str] = None
    social_urls: Optional[SocialUrls] = None
    verification_status: Optional[VerificationStatus] = None
    rejection_reason: Optional[str] = None
    tag_ids: Optional[List[str]] = None


class OwnerShopUpdate(BaseModel):
    """점주 매장 수정 요청 본문.

    점주가 수정할 수 있는 필드만 정의하며, 그 외 필드는 검증 없이 무시됩니다.
    """

    description: Optional[str] = None
    phone: Optional[str] = None
    business_hours: Optional[Dict[str, Any]] = None
    is_24_hours: Optional[bool] = None
    gacha_machine_count: Optional[int] = None
    main_series: Optional[List[str]] = None
    detail_address: Optional[str] = None
    social_urls: Optional[SocialUrls] = None


class TagBrief(BaseModel):
    """매장 응답에 포함되는 태그 요약."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class ShopResponse(BaseModel):
    """매장 응답 스키마."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    shop_type: List[str]
    description: Optional[str] = None
    phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    business_hours: Optional[Dict[str, Any]] = None
    is_24_hours: bool = False
    gacha_machine_count: Optional[int] = None
    main_series: List[str] = Field(default_factory=list)
    sido: str
    sigungu: Optional[str] = None
    jibun_address: Optional[str] = None
    road_address: str
    detail_address: Optional[str] = None
    zone_code: Optional[str] = None
    building_name: Optional[str] = None
    social_urls: Optional[Dict[str, Any]] = None
    verification_status: VerificationStatus
    data_source: str
    verified_at: Optional[Timestamp] = None
    verified_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    submission_note: Optional[str] = None
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None
    created_by: Optional[str] = None
    tags: List[TagBrief] = Field(default_factory=list)


class ShopCreateResult(BaseModel):
    """관리자 매장 등록 결과. 태그 연결 실패는 warnings 로 전달됩니다."""

    shop: ShopResponse
    warnings: List[str] = Field(default_factory=list)
