"""관리자 계정 관리 API 모듈 (super_admin 전용)

API 목록:
    - `GET /admin/users`: 관리자 계정 목록을 페이징하여 조회합니다.
    - `GET /admin/users/stats`: 승인/계정 상태별 관리자 수를 조회합니다.
    - `PUT /admin/users/{user_id}/approve`: 가입 대기 계정을 승인합니다.
    - `PUT /admin/users/{user_id}/reject`: 가입 대기 계정을 거절합니다.
    - `PUT /admin/users/{user_id}/status`: 계정 상태를 변경합니다.
"""

from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.admin_users import (
    AdminUserResponse,
    AdminUserStats,
    RejectRequest,
    StatusUpdateRequest,
)
from app.schemas.base import BaseSchema
from app.schemas.pagination import CustomPage, PageParams
from app.services import admin_user_service
from app.utils.auth import CurrentIdentity
from app.utils.db import get_db

router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.get("", response_model=CustomPage[AdminUserResponse])
async def list_admin_users(  # noqa: PLR0913
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
    params: Annotated[PageParams, Depends()],
    approval_status: Annotated[
        Optional[Literal["pending", "approved", "rejected"]], Query()
    ] = None,
    status: Annotated[
        Optional[Literal["active", "suspended", "deleted"]], Query()
    ] = None,
    role: Annotated[Optional[Literal["super_admin", "admin", "owner"]], Query()] = None,
    search: Annotated[Optional[str], Query()] = None,
):
    """관리자 계정 목록을 최신 가입순으로 조회합니다.

    Args:
        approval_status (Optional[str]): 승인 상태 필터
        status (Optional[str]): 계정 상태 필터
        role (Optional[str]): 역할 필터
        search (Optional[str]): 이메일 또는 이름 검색어
    """
    return await admin_user_service.list_admin_users(
        identity,
        db,
        params,
        approval_status=approval_status,
        status=status,
        role=role,
        search=search,
    )


@router.get("/stats", response_model=BaseSchema[AdminUserStats])
async def admin_user_stats(
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """승인 상태와 계정 상태별 관리자 수를 조회합니다."""
    stats = await admin_user_service.get_admin_user_stats(identity, db)
    return BaseSchema[AdminUserStats](data=stats)


@router.put("/{user_id}/approve", response_model=BaseSchema[AdminUserResponse])
async def approve_admin_user(
    user_id: str,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """가입 대기 중인 관리자 계정을 승인합니다.

    점주 계정이면 가입 시 연결한 매장 소유 관계도 검증 처리됩니다.

    Raises:
        HTTPException(400): 대기 상태가 아닌 경우
        HTTPException(404): 계정이 없는 경우
    """
    user = await admin_user_service.approve_admin_user(identity, db, user_id)
    return BaseSchema[AdminUserResponse](data=user, message="계정이 승인되었습니다.")


@router.put("/{user_id}/reject", response_model=BaseSchema[AdminUserResponse])
async def reject_admin_user(
    user_id: str,
    request: RejectRequest,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """가입 대기 중인 관리자 계정을 거절합니다."""
    user = await admin_user_service.reject_admin_user(
        identity, db, user_id, request.reason
    )
    return BaseSchema[AdminUserResponse](data=user, message="계정이 거절되었습니다.")


@router.put("/{user_id}/status", response_model=BaseSchema[AdminUserResponse])
async def update_admin_user_status(
    user_id: str,
    request: StatusUpdateRequest,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """관리자 계정 상태(active, suspended, deleted)를 변경합니다."""
    user = await admin_user_service.update_admin_user_status(
        identity, db, user_id, request.status
    )
    return BaseSchema[AdminUserResponse](data=user)
