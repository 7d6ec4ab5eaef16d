"""Instagram 연동 관리 API 모듈

API 목록:
    - `GET /admin/instagram/credentials`: 활성 토큰의 만료 상태를 조회합니다. (super_admin, admin)
    - `POST /admin/instagram/credentials`: 새 토큰을 등록하고 기존 토큰을 비활성화합니다. (super_admin)
    - `GET /admin/instagram/hashtags`: 등록된 해시태그와 최근 7일 등록 현황을 조회합니다. (super_admin, admin)
    - `POST /admin/instagram/hashtags/search`: 키워드로 해시태그를 찾아 등록합니다. (super_admin, admin)
    - `PATCH /admin/instagram/hashtags/{hashtag_id}/toggle`: 해시태그 수집 여부를 반전합니다. (super_admin, admin)
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Config
from app.schemas.base import BaseSchema
from app.schemas.instagram import (
    InstagramCredentialResponse,
    InstagramCredentialStatus,
    InstagramCredentialUpsert,
    InstagramHashtagList,
    InstagramHashtagResponse,
    InstagramHashtagSearch,
)
from app.services import instagram_service
from app.utils.auth import CurrentIdentity
from app.utils.db import get_db
from app.utils.http import get_instagram_client

admin_router = APIRouter(prefix="/admin/instagram", tags=["admin-instagram"])


@admin_router.get("/credentials", response_model=BaseSchema[InstagramCredentialStatus])
async def get_credential_status(
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """활성 토큰의 만료 상태를 조회합니다. 토큰 값은 반환하지 않습니다.

    Raises:
        HTTPException(404): 활성 토큰이 없는 경우
    """
    status = await instagram_service.get_credential_status(identity, db)
    return BaseSchema[InstagramCredentialStatus](data=status)


@admin_router.post(
    "/credentials",
    status_code=Config.HttpStatus.CREATED,
    response_model=BaseSchema[InstagramCredentialResponse],
)
async def upsert_credential(
    request: InstagramCredentialUpsert,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """새 토큰을 등록합니다.

    Raises:
        HTTPException(400): 토큰 또는 계정 ID가 비어 있는 경우
        HTTPException(403): super_admin 이 아닌 경우
    """
    credential = await instagram_service.upsert_credential(identity, db, request)
    return BaseSchema[InstagramCredentialResponse](data=credential)


@admin_router.get("/hashtags", response_model=BaseSchema[InstagramHashtagList])
async def list_hashtags(
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """등록된 해시태그 목록을 조회합니다."""
    hashtags = await instagram_service.list_hashtags(identity, db)
    return BaseSchema[InstagramHashtagList](data=hashtags)


@admin_router.post(
    "/hashtags/search",
    status_code=Config.HttpStatus.CREATED,
    response_model=BaseSchema[InstagramHashtagResponse],
)
async def search_hashtag(
    request: InstagramHashtagSearch,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
    client: Annotated[AsyncClient, Depends(get_instagram_client)],
):
    """키워드로 Graph API 해시태그 ID를 찾아 등록합니다.

    Raises:
        HTTPException(400): 키워드가 비었거나 중복인 경우, Graph API 오류
        HTTPException(404): 활성 토큰이 없거나 해시태그를 찾지 못한 경우
    """
    hashtag = await instagram_service.search_hashtag(identity, db, client, request.keyword)
    return BaseSchema[InstagramHashtagResponse](data=hashtag)


@admin_router.patch(
    "/hashtags/{hashtag_id}/toggle", response_model=BaseSchema[InstagramHashtagResponse]
)
async def toggle_hashtag(
    hashtag_id: str,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """해시태그 수집 활성 여부를 반전합니다."""
    hashtag = await instagram_service.toggle_hashtag(identity, db, hashtag_id)
    return BaseSchema[InstagramHashtagResponse](data=hashtag)
