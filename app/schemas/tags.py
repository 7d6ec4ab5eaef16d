"""이 모듈은 매장 태그 스키마를 정의합니다."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.schemas.base import Timestamp


class TagCreate(BaseModel):
    """태그 생성 요청 본문."""

    name: str
    description: Optional[str] = None


class TagUpdate(BaseModel):
    """태그 수정 요청 본문."""

    name: Optional[str] = None
    description: Optional[str] = None


class TagResponse(BaseModel):
    """태그 응답. shop_count 는 태그가 붙은 매장 수입니다."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    shop_count: int = 0
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None
