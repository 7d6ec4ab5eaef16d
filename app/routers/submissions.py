"""매장 제보 API 모듈

일반 사용자는 새 매장을 제보하고 자신의 제보를 조회할 수 있으며,
관리자는 제보를 검토(승인/거절)하고 매장별 제보 이력을 조회할 수 있습니다.

API 목록:
    - `POST /submissions`: 새 매장을 제보합니다. (일반 사용자, 시간당 5건 제한)
    - `GET /submissions/me`: 자신의 제보 목록을 조회합니다. (일반 사용자)
    - `GET /admin/submissions`: 전체 제보 목록을 조회합니다. (super_admin, admin)
    - `PUT /admin/submissions/{submission_id}/review`: 제보를 승인 또는 거절합니다. (super_admin, admin)
    - `GET /admin/shops/{shop_id}/submissions`: 매장의 제보 이력을 조회합니다. (super_admin, admin)
"""

from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Config, logger
from app.schemas.base import BaseSchema
from app.schemas.pagination import CustomPage, PageParams
from app.schemas.submissions import (
    ReviewRequest,
    ReviewResult,
    SubmissionCreate,
    SubmissionCreateResult,
    SubmissionDetail,
    SubmissionMetadata,
    SubmissionResponse,
)
from app.services import submission_service
from app.utils.auth import CurrentIdentity
from app.utils.db import get_db

router = APIRouter(prefix="/submissions", tags=["submissions"])
admin_router = APIRouter(prefix="/admin", tags=["admin-submissions"])

StatusFilter = Annotated[
    Optional[Literal["pending", "approved", "rejected"]], Query()
]


def get_request_metadata(request: Request) -> SubmissionMetadata:
    """요청 헤더에서 클라이언트 IP와 User-Agent 를 추출합니다.

    프록시 뒤에서는 x-forwarded-for 의 첫 번째 주소 또는 cf-connecting-ip 를 사용합니다.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.headers.get("cf-connecting-ip") or (
            request.client.host if request.client else None
        )
    return SubmissionMetadata(
        ip_address=ip_address, user_agent=request.headers.get("user-agent")
    )


@router.post(
    "",
    status_code=Config.HttpStatus.CREATED,
    response_model=BaseSchema[SubmissionCreateResult],
)
async def create_submission(
    request: SubmissionCreate,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
    metadata: Annotated[SubmissionMetadata, Depends(get_request_metadata)],
):
    """새 매장을 제보합니다.

    제보된 매장은 pending 상태로 저장되며, 관리자가 검토하기 전까지 공개되지 않습니다.

    Args:
        request (SubmissionCreate): 제보할 매장 정보와 메모
        identity (Identity): 요청자 신원 (일반 사용자)
        db (AsyncSession): 비동기 DB 세션 객체입니다.
        metadata (SubmissionMetadata): 요청 IP, User-Agent

    Returns:
        BaseSchema[SubmissionCreateResult]: 생성된 매장과 제보

    Raises:
        HTTPException(400): 입력 값 오류, 존재하지 않는 태그, 최근 1시간 제보 5건 초과
        HTTPException(403): 일반 사용자가 아닌 경우
    """
    logger.info("Submission received by user: %s", identity.id)
    result = await submission_service.submit(identity, db, request, metadata)
    return BaseSchema[SubmissionCreateResult](
        data=result, message="제보가 접수되었습니다. 검토 후 반영됩니다."
    )


@router.get("/me", response_model=CustomPage[SubmissionDetail])
async def list_my_submissions(
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
    params: Annotated[PageParams, Depends()],
    status: StatusFilter = None,
):
    """자신의 제보 목록을 최신순으로 페이징하여 조회합니다. (일반 사용자)"""
    return await submission_service.list_mine(identity, db, params, status=status)


@admin_router.get("/submissions", response_model=CustomPage[SubmissionDetail])
async def list_submissions(
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
    params: Annotated[PageParams, Depends()],
    status: StatusFilter = None,
    search: Annotated[Optional[str], Query()] = None,
):
    """전체 제보 목록을 최신순으로 페이징하여 조회합니다. (super_admin, admin)

    Args:
        status (Optional[str]): 제보 상태 필터
        search (Optional[str]): 매장 이름 또는 제보자 닉네임 검색어
    """
    return await submission_service.list_all(
        identity, db, params, status=status, search=search
    )


@admin_router.put(
    "/submissions/{submission_id}/review",
    response_model=BaseSchema[ReviewResult],
)
async def review_submission(
    submission_id: str,
    request: ReviewRequest,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """제보를 승인하거나 거절합니다. (super_admin, admin)

    승인 시 매장이 verified 로 공개되고, 거절 시 매장은 rejected 상태가 됩니다.
    이미 검토된 제보는 다시 검토할 수 없습니다.

    Returns:
        BaseSchema[ReviewResult]: 수행된 조치와 갱신된 매장

    Raises:
        HTTPException(400): 이미 검토된 제보이거나 잘못된 요청인 경우
        HTTPException(404): 제보가 존재하지 않는 경우
    """
    result = await submission_service.review(
        identity,
        db,
        submission_id,
        request.action,
        note=request.review_note,
        shop_updates=request.shop_updates,
    )
    return BaseSchema[ReviewResult](data=result)


@admin_router.get(
    "/shops/{shop_id}/submissions",
    response_model=BaseSchema[list[SubmissionResponse]],
)
async def shop_submission_history(
    shop_id: str,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """매장의 전체 제보 이력을 최신순으로 조회합니다. (super_admin, admin)"""
    history = await submission_service.history_for_shop(identity, db, shop_id)
    return BaseSchema[list[SubmissionResponse]](data=history)
