"""관리자 메뉴 API 모듈

API 목록:
    - `GET /admin/menus`: 요청자가 접근할 수 있는 활성 메뉴 트리를 조회합니다.
    - `GET /admin/menus/all`: 비활성 메뉴를 포함한 전체 메뉴 트리를 조회합니다. (super_admin)
    - `POST /admin/menus`: 메뉴를 생성합니다. (super_admin)
    - `PUT /admin/menus/{menu_id}`: 메뉴를 수정합니다. (super_admin)
    - `DELETE /admin/menus/{menu_id}`: 메뉴를 비활성화하거나 영구 삭제합니다. (super_admin)
    - `GET /admin/menus/permissions/{admin_id}`: 관리자의 메뉴 권한을 조회합니다. (super_admin)
    - `PUT /admin/menus/permissions/{admin_id}`: 관리자의 메뉴 권한을 통째로 교체합니다. (super_admin)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Config, logger
from app.schemas.base import BaseSchema, MessageSchema
from app.schemas.menus import (
    MenuCreate,
    MenuNode,
    MenuPermissionResponse,
    MenuResponse,
    MenuUpdate,
    PermissionReplaceRequest,
)
from app.services import menu_service
from app.utils.auth import CurrentIdentity
from app.utils.db import get_db

router = APIRouter(prefix="/admin/menus", tags=["menus"])


@router.get("", response_model=BaseSchema[list[MenuNode]])
async def list_accessible_menus(
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """요청자가 접근할 수 있는 활성 메뉴 트리를 조회합니다.

    super_admin 은 모든 활성 메뉴를, 그 외 관리자는 권한이 부여된 메뉴만 조회합니다.

    Returns:
        BaseSchema[list[MenuNode]]: display_order 로 정렬된 메뉴 트리
    """
    logger.info("Accessible menus requested by user: %s", identity.id)
    menus = await menu_service.list_accessible_menus(identity, db)
    return BaseSchema[list[MenuNode]](data=menus)


@router.get("/all", response_model=BaseSchema[list[MenuNode]])
async def list_all_menus(
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """비활성 메뉴를 포함한 전체 메뉴 트리를 조회합니다. (super_admin)"""
    menus = await menu_service.list_all_menus(identity, db)
    return BaseSchema[list[MenuNode]](data=menus)


@router.post(
    "",
    status_code=Config.HttpStatus.CREATED,
    response_model=BaseSchema[MenuResponse],
)
async def create_menu(
    request: MenuCreate,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """메뉴를 생성합니다. (super_admin)

    Args:
        request (MenuCreate): 생성할 메뉴 정보
        identity (Identity): 요청자 신원
        db (AsyncSession): 비동기 DB 세션 객체입니다.

    Returns:
        BaseSchema[MenuResponse]: 생성된 메뉴

    Raises:
        HTTPException(400): 메뉴 코드가 이미 존재하는 경우
        HTTPException(403): super_admin 이 아닌 경우
        HTTPException(404): 상위 메뉴가 존재하지 않는 경우
    """
    menu = await menu_service.create_menu(identity, db, request)
    return BaseSchema[MenuResponse](data=MenuResponse.model_validate(menu))


@router.put("/{menu_id}", response_model=BaseSchema[MenuResponse])
async def update_menu(
    menu_id: str,
    request: MenuUpdate,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """메뉴를 수정합니다. (super_admin)

    Raises:
        HTTPException(400): 코드 중복 또는 자기 자신/하위 메뉴를 상위로 지정한 경우
        HTTPException(404): 메뉴 또는 상위 메뉴가 존재하지 않는 경우
    """
    menu = await menu_service.update_menu(identity, db, menu_id, request)
    return BaseSchema[MenuResponse](data=MenuResponse.model_validate(menu))


@router.delete("/{menu_id}", response_model=MessageSchema)
async def delete_menu(
    menu_id: str,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
    hard: Annotated[bool, Query(description="True 이면 영구 삭제")] = False,
):
    """메뉴를 비활성화하거나(hard=False) 영구 삭제합니다(hard=True). (super_admin)"""
    await menu_service.delete_menu(identity, db, menu_id, hard=hard)
    return MessageSchema(message="메뉴가 삭제되었습니다.")


@router.get(
    "/permissions/{admin_id}",
    response_model=BaseSchema[list[MenuPermissionResponse]],
)
async def get_admin_menu_permissions(
    admin_id: str,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """관리자에게 부여된 메뉴 권한 목록을 조회합니다. (super_admin)"""
    permissions = await menu_service.get_admin_menu_permissions(identity, db, admin_id)
    return BaseSchema[list[MenuPermissionResponse]](
        data=[MenuPermissionResponse.model_validate(p) for p in permissions]
    )


@router.put(
    "/permissions/{admin_id}",
    response_model=BaseSchema[list[MenuPermissionResponse]],
)
async def replace_permissions(
    admin_id: str,
    request: PermissionReplaceRequest,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """관리자의 메뉴 권한을 전달된 목록으로 통째로 교체합니다. (super_admin)

    존재하지 않는 메뉴 ID는 오류 없이 무시됩니다.

    Returns:
        BaseSchema[list[MenuPermissionResponse]]: 교체 후 권한 목록
    """
    permissions = await menu_service.replace_permissions(
        identity, db, admin_id, request.menu_ids
    )
    return BaseSchema[list[MenuPermissionResponse]](
        data=[MenuPermissionResponse.model_validate(p) for p in permissions],
        message="메뉴 권한이 저장되었습니다.",
    )
