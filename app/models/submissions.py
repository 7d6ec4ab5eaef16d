"""이 모듈은 일반 사용자 매장 제보(UserSubmission)와 감사 로그(AuditLog) 모델을 정의합니다."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import NonEscapedJSON, new_uuid, utcnow


class UserSubmission(Base):
    """일반 사용자의 매장 제보를 관리하는 클래스

    pending 상태에서 approved 또는 rejected 로 한 번만 전이하며, 종료 상태는 변경되지 않습니다.

    Attributes:
        id (str): 제보 ID
        shop_id (str): 제보로 생성된 매장 ID
        submitter_id (str): 제보한 일반 사용자 ID
        submission_type (str): 제보 유형("new", "update", "correction")
        submission_note (Optional[str]): 제보자 메모
        status (str): 제보 상태("pending", "approved", "rejected")
        submitted_data (dict): 제보 원본 데이터
        reviewed_at (Optional[datetime]): 검토 시각
        reviewed_by (Optional[str]): 검토자 ID
        review_note (Optional[str]): 검토 메모
        submitted_at (datetime): 제보 시각
        ip_address (Optional[str]): 제보 요청 IP
        user_agent (Optional[str]): 제보 요청 User-Agent
    """

    __tablename__ = "user_submissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    shop_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shops.id", ondelete="CASCADE"), nullable=False
    )
    submitter_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("general_users.id", ondelete="CASCADE"), nullable=False
    )
    submission_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="new"
    )
    submission_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    submitted_data: Mapped[dict[str, Any]] = mapped_column(
        NonEscapedJSON, nullable=False, default=dict
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    review_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "submission_type IN ('new', 'update', 'correction')",
            name="user_submissions_type_check",
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="user_submissions_status_check",
        ),
        Index("user_submissions_submitter_index", "submitter_id", "submitted_at"),
        Index("user_submissions_shop_index", "shop_id"),
        Index("user_submissions_status_index", "status"),
    )


class AuditLog(Base):
    """보안 관련 작업의 감사 로그를 저장하는 클래스

    Attributes:
        id (str): 로그 ID
        action (str): 작업 이름 (예: "admin_user.approve")
        entity_type (str): 대상 엔티티 종류
        entity_id (Optional[str]): 대상 엔티티 ID
        actor_id (Optional[str]): 작업 수행자 ID
        changes (Optional[dict]): 변경 내용
    """

    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    actor_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    changes: Mapped[Optional[dict[str, Any]]] = mapped_column(
        NonEscapedJSON, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("audit_logs_entity_index", "entity_type", "entity_id"),
    )
