"""매장 관리 API 모듈

역할에 따라 공개, 관리자, 점주 세 개의 라우터로 나뉩니다.

API 목록:
    - `GET /shops`: 검증된 매장 목록을 페이징하여 조회합니다. (공개)
    - `GET /shops/{shop_id}`: 검증된 매장 정보를 조회합니다. (공개)
    - `POST /shops/reports`: 인증된 사용자가 매장을 등록합니다. (pending)
    - `POST /admin/shops`: 관리자가 매장을 등록합니다. (verified)
    - `GET /admin/shops`: 요청자 역할에 맞는 매장 목록을 조회합니다.
    - `GET /admin/shops/{shop_id}`: 매장 정보를 조회합니다.
    - `PUT /admin/shops/{shop_id}`: 매장 정보를 수정합니다.
    - `DELETE /admin/shops/{shop_id}`: 매장을 소프트 삭제합니다. (super_admin)
    - `GET /owner/shops/{shop_id}`: 점주가 자신의 매장을 조회합니다.
    - `PUT /owner/shops/{shop_id}`: 점주가 자신의 매장을 수정합니다. (허용 필드만 반영)
"""

from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Config, logger
from app.schemas.base import BaseSchema, MessageSchema
from app.schemas.pagination import CustomPage, PageParams
from app.schemas.shops import (
    OwnerShopUpdate,
    ShopCreateResult,
    ShopInput,
    ShopResponse,
    ShopUpdate,
)
from app.services import shop_service
from app.utils.auth import CurrentIdentity
from app.utils.db import get_db
from app.utils.permissions import require_admin

router = APIRouter(prefix="/shops", tags=["shops"])
admin_router = APIRouter(prefix="/admin/shops", tags=["admin-shops"])
owner_router = APIRouter(prefix="/owner/shops", tags=["owner-shops"])

StatusFilter = Annotated[
    Optional[Literal["pending", "verified", "rejected"]], Query()
]


@router.get("", response_model=CustomPage[ShopResponse])
async def list_public_shops(
    db: Annotated[AsyncSession, Depends(get_db)],
    params: Annotated[PageParams, Depends()],
    search: Annotated[Optional[str], Query()] = None,
):
    """검증된(verified) 매장 목록을 최신순으로 페이징하여 조회합니다.

    Args:
        db (AsyncSession): 비동기 DB 세션 객체입니다.
        params (PageParams): 페이징 처리를 위한 파라미터 객체입니다.
        search (Optional[str]): 매장 이름 검색어

    Returns:
        CustomPage[ShopResponse]: 매장 목록을 포함한 페이징된 응답 객체입니다.
    """
    return await shop_service.list_shops(None, db, params, search=search)


@router.get("/{shop_id}", response_model=BaseSchema[ShopResponse])
async def get_public_shop(
    shop_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """검증된 매장 정보를 태그와 함께 조회합니다.

    Raises:
        HTTPException(404): 매장이 없거나 삭제/미검증 상태인 경우
    """
    shop = await shop_service.get_shop(db, shop_id, verified_only=True)
    return BaseSchema[ShopResponse](data=shop)


@router.post(
    "/reports",
    status_code=Config.HttpStatus.CREATED,
    response_model=BaseSchema[ShopCreateResult],
)
async def submit_shop(
    request: ShopInput,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """인증된 사용자가 매장을 등록합니다. 등록된 매장은 검토 전까지 pending 상태입니다.

    Raises:
        HTTPException(400): 입력 값 검증에 실패한 경우
        HTTPException(401): 인증되지 않은 경우
    """
    logger.info("Shop report received by user: %s", identity.id)
    result = await shop_service.submit_shop(identity, db, request)
    return BaseSchema[ShopCreateResult](data=result)


@admin_router.post(
    "",
    status_code=Config.HttpStatus.CREATED,
    response_model=BaseSchema[ShopCreateResult],
)
async def create_shop(
    request: ShopInput,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """관리자가 매장을 등록합니다. 등록된 매장은 즉시 verified 상태입니다.

    태그 연결에 실패해도 매장 등록은 완료되며, 실패 내용은 warnings 로 반환됩니다.

    Args:
        request (ShopInput): 매장 정보
        identity (Identity): 요청자 신원 (super_admin, admin)
        db (AsyncSession): 비동기 DB 세션 객체입니다.

    Returns:
        BaseSchema[ShopCreateResult]: 등록된 매장과 경고 목록

    Raises:
        HTTPException(400): 입력 값 검증에 실패한 경우
        HTTPException(403): 관리자 역할이 아닌 경우
    """
    result = await shop_service.create_shop(identity, db, request)
    message = "; ".join(result.warnings) if result.warnings else None
    return BaseSchema[ShopCreateResult](data=result, message=message)


@admin_router.get("", response_model=CustomPage[ShopResponse])
async def list_shops(
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
    params: Annotated[PageParams, Depends()],
    status: StatusFilter = None,
    search: Annotated[Optional[str], Query()] = None,
):
    """요청자 역할에 맞는 매장 목록을 최신순으로 조회합니다.

    점주는 검증된 소유 매장만, 관리자는 삭제되지 않은 모든 매장을, 그 외 사용자는 검증된 매장만 조회합니다.
    """
    return await shop_service.list_shops(identity, db, params, status=status, search=search)


@admin_router.get("/{shop_id}", response_model=BaseSchema[ShopResponse])
async def get_shop(
    shop_id: str,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """매장 정보를 검증 상태와 관계없이 조회합니다. (super_admin, admin)"""
    require_admin(identity)
    shop = await shop_service.get_shop(db, shop_id)
    return BaseSchema[ShopResponse](data=shop)


@admin_router.put("/{shop_id}", response_model=BaseSchema[ShopResponse])
async def update_shop(
    shop_id: str,
    request: ShopUpdate,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """매장 정보를 수정합니다. tag_ids 가 있으면 태그를 통째로 교체합니다. (super_admin, admin)

    Raises:
        HTTPException(400): 수정 값 또는 태그 ID가 올바르지 않은 경우
        HTTPException(404): 매장이 없거나 삭제된 경우
    """
    shop = await shop_service.update_shop(identity, db, shop_id, request)
    return BaseSchema[ShopResponse](data=shop)


@admin_router.delete("/{shop_id}", response_model=MessageSchema)
async def delete_shop(
    shop_id: str,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """매장을 소프트 삭제합니다. (super_admin)"""
    await shop_service.delete_shop(identity, db, shop_id)
    return MessageSchema(message="매장이 삭제되었습니다.")


@owner_router.get("/{shop_id}", response_model=BaseSchema[ShopResponse])
async def get_owned_shop(
    shop_id: str,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """점주가 자신의 매장을 조회합니다.

    Raises:
        HTTPException(403): 검증된 소유 관계가 없는 경우
    """
    shop = await shop_service.get_owned_shop(identity, db, shop_id)
    return BaseSchema[ShopResponse](data=shop)


@owner_router.put("/{shop_id}", response_model=BaseSchema[ShopResponse])
async def update_owned_shop(
    shop_id: str,
    request: OwnerShopUpdate,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """점주가 자신의 매장을 수정합니다.

    설명, 전화번호, 영업시간, 24시간 여부, 기계 수, 주력 시리즈, 상세 주소, 소셜 링크만 반영되며
    그 외 필드는 무시됩니다.

    Raises:
        HTTPException(403): 검증된 소유 관계가 없는 경우
    """
    shop = await shop_service.update_owned_shop(identity, db, shop_id, request)
    return BaseSchema[ShopResponse](data=shop)
