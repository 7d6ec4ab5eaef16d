"""이 모듈은 관리자 계정 회원가입/로그인 및 승인 관리 스키마를 정의합니다."""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict

from app.schemas.base import Timestamp

AccountStatus = Literal["active", "suspended", "deleted"]
ApprovalStatus = Literal["pending", "approved", "rejected"]


class SignUpRequest(BaseModel):
    """관리자/점주 회원가입 요청 본문.

    Attributes:
        email (str): 이메일
        password (str): 비밀번호 (8 ~ 72자)
        full_name (str): 이름 (2 ~ 100자)
        role (Literal["admin", "owner"]): 가입 역할
        shop_id (Optional[str]): 점주 가입 시 소유 매장 ID
        phone (Optional[str]): 점주 가입 시 연락처
    """

    email: str
    password: str
    full_name: str
    role: Literal["admin", "owner"] = "admin"
    shop_id: Optional[str] = None
    phone: Optional[str] = None
    business_license: Optional[str] = None
    business_name: Optional[str] = None


class SignInRequest(BaseModel):
    """로그인 요청 본문."""

    email: str
    password: str


class AdminUserResponse(BaseModel):
    """관리자 계정 응답."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str
    role: str
    status: AccountStatus
    approval_status: ApprovalStatus
    approved_at: Optional[Timestamp] = None
    approved_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    last_login_at: Optional[Timestamp] = None
    business_name: Optional[str] = None
    created_at: Optional[Timestamp] = None


class SignInResult(BaseModel):
    """로그인 결과. session 은 인증 서비스가 발급한 토큰 정보입니다."""

    user: AdminUserResponse
    session: Dict[str, Any]


class RejectRequest(BaseModel):
    """관리자 가입 거절 요청 본문."""

    reason: str


class StatusUpdateRequest(BaseModel):
    """관리자 계정 상태 변경 요청 본문."""

    status: AccountStatus


class AdminUserStats(BaseModel):
    """관리자 계정 현황 통계."""

    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    active: int = 0
    suspended: int = 0
