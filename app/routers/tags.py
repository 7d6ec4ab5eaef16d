"""매장 태그 API 모듈

API 목록:
    - `GET /tags`: 태그 목록을 사용 매장 수와 함께 조회합니다. (공개)
    - `GET /tags/{tag_id}`: 태그를 조회합니다. (공개)
    - `POST /admin/tags`: 태그를 생성합니다. (super_admin, admin)
    - `PUT /admin/tags/{tag_id}`: 태그를 수정합니다. (super_admin, admin)
    - `DELETE /admin/tags/{tag_id}`: 태그를 삭제합니다. (super_admin, admin)
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Config
from app.schemas.base import BaseSchema, MessageSchema
from app.schemas.tags import TagCreate, TagResponse, TagUpdate
from app.services import tag_service
from app.utils.auth import CurrentIdentity
from app.utils.db import get_db

router = APIRouter(prefix="/tags", tags=["tags"])
admin_router = APIRouter(prefix="/admin/tags", tags=["admin-tags"])


@router.get("", response_model=BaseSchema[list[TagResponse]])
async def list_tags(db: Annotated[AsyncSession, Depends(get_db)]):
    """삭제되지 않은 태그 목록을 조회합니다."""
    return BaseSchema[list[TagResponse]](data=await tag_service.list_tags(db))


@router.get("/{tag_id}", response_model=BaseSchema[TagResponse])
async def get_tag(tag_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    """태그를 조회합니다."""
    return BaseSchema[TagResponse](data=await tag_service.get_tag(db, tag_id))


@admin_router.post(
    "",
    status_code=Config.HttpStatus.CREATED,
    response_model=BaseSchema[TagResponse],
)
async def create_tag(
    request: TagCreate,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """태그를 생성합니다.

    Raises:
        HTTPException(400): 이름이 비어 있거나 이미 존재하는 경우
    """
    tag = await tag_service.create_tag(identity, db, request)
    return BaseSchema[TagResponse](data=tag)


@admin_router.put("/{tag_id}", response_model=BaseSchema[TagResponse])
async def update_tag(
    tag_id: str,
    request: TagUpdate,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """태그를 수정합니다."""
    tag = await tag_service.update_tag(identity, db, tag_id, request)
    return BaseSchema[TagResponse](data=tag)


@admin_router.delete("/{tag_id}", response_model=MessageSchema)
async def delete_tag(
    tag_id: str,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """태그를 삭제합니다. 매장에서 사용 중인 태그는 삭제할 수 없습니다."""
    await tag_service.delete_tag(identity, db, tag_id)
    return MessageSchema(message="태그가 삭제되었습니다.")
