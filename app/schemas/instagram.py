"""이 모듈은 Instagram 연동(토큰, 해시태그) 스키마를 정의합니다."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.schemas.base import Timestamp


class InstagramCredentialUpsert(BaseModel):
    """Instagram 토큰 등록 요청 본문.

    Attributes:
        access_token (Optional[str]): Graph API 접근 토큰 (필수)
        user_id (Optional[str]): Instagram 비즈니스 계정 ID (필수)
        expires_in (int): 만료까지 남은 초 (기본 3600)
    """

    access_token: Optional[str] = None
    user_id: Optional[str] = None
    expires_in: int = 3600


class InstagramCredentialResponse(BaseModel):
    """등록된 토큰 정보. 토큰 값은 포함하지 않습니다."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    expires_at: Timestamp
    is_active: bool
    created_at: Optional[Timestamp] = None


class InstagramCredentialStatus(BaseModel):
    """활성 토큰의 만료 상태.

    Attributes:
        user_id (str): Instagram 비즈니스 계정 ID
        expires_at (Timestamp): 만료 시각
        minutes_remaining (int): 만료까지 남은 분 (올림, 만료 후에는 0 이하)
        is_expiring_soon (bool): 만료 임박 여부
        created_at (Optional[Timestamp]): 등록 시각
    """

    user_id: str
    expires_at: Timestamp
    minutes_remaining: int
    is_expiring_soon: bool
    created_at: Optional[Timestamp] = None


class InstagramHashtagSearch(BaseModel):
    """해시태그 검색/등록 요청 본문."""

    keyword: Optional[str] = None


class InstagramHashtagResponse(BaseModel):
    """등록된 해시태그 응답."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    keyword: str
    hashtag_id: str
    is_active: bool
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None


class HashtagLimitInfo(BaseModel):
    """7일 해시태그 조회 한도 정보."""

    max_hashtags_per_7_days: int
    current_count: int
    remaining: int


class InstagramHashtagList(BaseModel):
    """해시태그 목록과 최근 7일 등록 현황."""

    hashtags: list[InstagramHashtagResponse]
    total: int
    within_7_days_count: int
    limit_info: HashtagLimitInfo
