"""이 모듈은 일반 사용자 매장 제보와 검토 관련 스키마를 정의합니다."""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict

from app.schemas.base import Timestamp
from app.schemas.shops import ShopInput, ShopResponse, ShopUpdate

SubmissionStatus = Literal["pending", "approved", "rejected"]


class SubmissionCreate(BaseModel):
    """매장 제보 요청 본문.

    Attributes:
        shop_data (ShopInput): 제보할 매장 정보
        submission_note (Optional[str]): 제보자 메모
    """

    shop_data: ShopInput
    submission_note: Optional[str] = None


class SubmissionMetadata(BaseModel):
    """제보 요청의 부가 정보 (감사 추적용)."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class ReviewRequest(BaseModel):
    """제보 검토 요청 본문.

    Attributes:
        action (Literal["approve", "reject"]): 승인 또는 거절
        review_note (Optional[str]): 검토 메모 (거절 시 거절 사유로 사용)
        shop_updates (Optional[ShopUpdate]): 승인 시 함께 반영할 매장 필드
    """

    action: Literal["approve", "reject"]
    review_note: Optional[str] = None
    shop_updates: Optional[ShopUpdate] = None


class SubmitterBrief(BaseModel):
    """제보 목록에 포함되는 제보자 요약."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    nickname: Optional[str] = None
    email: Optional[str] = None


class SubmissionResponse(BaseModel):
    """제보 응답 스키마."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    shop_id: str
    submitter_id: str
    submission_type: str
    submission_note: Optional[str] = None
    status: SubmissionStatus
    submitted_data: Dict[str, Any]
    reviewed_at: Optional[Timestamp] = None
    reviewed_by: Optional[str] = None
    review_note: Optional[str] = None
    submitted_at: Timestamp
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class SubmissionDetail(SubmissionResponse):
    """매장과 제보자 정보가 포함된 제보 응답."""

    shop: Optional[ShopResponse] = None
    submitter: Optional[SubmitterBrief] = None


class SubmissionCreateResult(BaseModel):
    """제보 생성 결과."""

    shop: ShopResponse
    submission: SubmissionResponse


class ReviewResult(BaseModel):
    """제보 검토 결과.

    Attributes:
        action (Literal["approved", "rejected"]): 수행된 조치
        shop (ShopResponse): 갱신된 매장
        submission (SubmissionResponse): 종료 상태로 전이된 제보
    """

    action: Literal["approved", "rejected"]
    shop: ShopResponse
    submission: SubmissionResponse
