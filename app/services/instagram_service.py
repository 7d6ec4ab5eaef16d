"""Instagram 연동 서비스 모듈.

Graph API 접근 토큰(활성 토큰은 한 개)과 수집 대상 해시태그를 관리합니다.
"""

import math
from datetime import datetime, timedelta, timezone

from httpx import AsyncClient, HTTPError
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import Config, logger
from app.models.instagram import InstagramCredential, InstagramHashtag
from app.models.types import utcnow
from app.schemas.identity import ResolvedIdentity
from app.schemas.instagram import (
    HashtagLimitInfo,
    InstagramCredentialResponse,
    InstagramCredentialStatus,
    InstagramCredentialUpsert,
    InstagramHashtagList,
    InstagramHashtagResponse,
)
from app.services.audit_service import record_audit
from app.utils.errors import InternalError, NotFoundError, ValidationError
from app.utils.permissions import require_admin, require_super_admin

NO_CREDENTIAL_MESSAGE = "No active Instagram credential found"


def _as_utc(value: datetime) -> datetime:
    # SQLite 는 타임존 없이 돌려줌
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def get_active_credential(db: AsyncSession) -> InstagramCredential | None:
    """활성 토큰을 조회합니다. 없으면 None 을 반환합니다."""
    result = await db.execute(
        select(InstagramCredential)
        .filter(InstagramCredential.is_active.is_(True))
        .order_by(InstagramCredential.created_at.desc())
    )
    return result.scalars().first()


async def get_credential_status(
    identity: ResolvedIdentity, db: AsyncSession
) -> InstagramCredentialStatus:
    """활성 토큰의 만료 상태를 조회합니다. (super_admin, admin)

    Raises:
        NotFoundError: 활성 토큰이 없는 경우
    """
    require_admin(identity)
    credential = await get_active_credential(db)
    if credential is None:
        raise NotFoundError(NO_CREDENTIAL_MESSAGE)

    expires_at = _as_utc(credential.expires_at)
    remaining = (expires_at - utcnow()).total_seconds()
    minutes_remaining = math.ceil(remaining / 60)
    return InstagramCredentialStatus(
        user_id=credential.user_id,
        expires_at=expires_at,
        minutes_remaining=minutes_remaining,
        is_expiring_soon=minutes_remaining <= Config.INSTAGRAM_TOKEN_WARNING_MINUTES,
        created_at=credential.created_at,
    )


async def upsert_credential(
    identity: ResolvedIdentity, db: AsyncSession, data: InstagramCredentialUpsert
) -> InstagramCredentialResponse:
    """새 토큰을 등록하고 기존 활성 토큰을 모두 비활성화합니다. (super_admin)

    Args:
        identity (ResolvedIdentity): 요청자 신원
        db (AsyncSession): 비동기 DB 세션
        data (InstagramCredentialUpsert): 토큰, 계정 ID, 만료까지 남은 초

    Returns:
        InstagramCredentialResponse: 등록된 토큰 정보 (토큰 값 제외)

    Raises:
        ForbiddenError: super_admin 이 아닌 경우
        ValidationError: 토큰 또는 계정 ID가 비어 있는 경우
    """
    identity = require_super_admin(identity)
    access_token = (data.access_token or "").strip()
    user_id = (data.user_id or "").strip()
    if not access_token or not user_id:
        raise ValidationError("access_token and user_id are required")

    now = utcnow()
    credential = InstagramCredential(
        access_token=access_token,
        user_id=user_id,
        token_type="user",
        expires_at=now + timedelta(seconds=data.expires_in),
        is_active=True,
        created_by=identity.id,
    )
    try:
        await db.execute(
            update(InstagramCredential)
            .where(InstagramCredential.is_active.is_(True))
            .values(is_active=False, updated_at=now)
        )
        db.add(credential)
        await db.flush()
        await record_audit(
            db,
            "instagram.credential.upsert",
            "instagram_credential",
            credential.id,
            identity.id,
            {"user_id": user_id, "expires_in": data.expires_in},
        )
        await db.commit()
        await db.refresh(credential)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Instagram 토큰 등록 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("Instagram 토큰 교체: user_id=%s by=%s", user_id, identity.id)
    return InstagramCredentialResponse.model_validate(credential)


async def list_hashtags(
    identity: ResolvedIdentity, db: AsyncSession
) -> InstagramHashtagList:
    """등록된 해시태그를 최신순으로 조회하고 최근 7일 등록 수를 함께 반환합니다. (super_admin, admin)"""
    require_admin(identity)
    result = await db.execute(
        select(InstagramHashtag).order_by(InstagramHashtag.created_at.desc())
    )
    hashtags = list(result.scalars().all())

    since = utcnow() - timedelta(days=7)
    recent = sum(1 for hashtag in hashtags if _as_utc(hashtag.created_at) > since)
    limit = Config.INSTAGRAM_HASHTAG_WEEKLY_LIMIT
    return InstagramHashtagList(
        hashtags=[InstagramHashtagResponse.model_validate(h) for h in hashtags],
        total=len(hashtags),
        within_7_days_count=recent,
        limit_info=HashtagLimitInfo(
            max_hashtags_per_7_days=limit,
            current_count=recent,
            remaining=max(0, limit - recent),
        ),
    )


async def _find_hashtag_id(
    client: AsyncClient, credential: InstagramCredential, keyword: str
) -> str:
    try:
        response = await client.get(
            "/ig_hashtag_search",
            params={
                "user_id": credential.user_id,
                "q": keyword,
                "access_token": credential.access_token,
            },
        )
    except HTTPError as e:
        logger.error("Instagram API 통신 실패 (keyword=%s): %s", keyword, e)
        raise ValidationError(f"Instagram API error: {e}") from e

    try:
        body = response.json()
    except ValueError:
        body = {}

    if not response.is_success:
        error = body.get("error") if isinstance(body, dict) else None
        message = (error or {}).get("message") or "Unknown error"
        logger.warning(
            "Instagram API 오류 응답 (keyword=%s, status=%s): %s",
            keyword,
            response.status_code,
            message,
        )
        raise ValidationError(f"Instagram API error: {message}")

    data = body.get("data") if isinstance(body, dict) else None
    if not data:
        raise NotFoundError(f"No hashtag found for keyword: {keyword}")
    return str(data[0]["id"])


async def search_hashtag(
    identity: ResolvedIdentity, db: AsyncSession, client: AsyncClient, keyword: str | None
) -> InstagramHashtagResponse:
    """Graph API 로 키워드의 해시태그 ID를 찾아 수집 대상으로 등록합니다. (super_admin, admin)

    이미 등록된 키워드는 Graph API 를 호출하기 전에 거부됩니다.

    Args:
        identity (ResolvedIdentity): 요청자 신원
        db (AsyncSession): 비동기 DB 세션
        client (AsyncClient): Graph API 클라이언트
        keyword (str | None): 검색 키워드

    Returns:
        InstagramHashtagResponse: 등록된 해시태그

    Raises:
        NotFoundError: 활성 토큰이 없거나 해시태그를 찾지 못한 경우
        ValidationError: 키워드가 비었거나 중복인 경우, Graph API 가 오류를 반환한 경우
    """
    identity = require_admin(identity)
    keyword = (keyword or "").strip()
    if not keyword:
        raise ValidationError("keyword is required")

    credential = await get_active_credential(db)
    if credential is None:
        raise NotFoundError(
            f"{NO_CREDENTIAL_MESSAGE}. Please configure Instagram credentials first."
        )

    existing = await db.execute(
        select(InstagramHashtag.id).filter(InstagramHashtag.keyword == keyword)
    )
    if existing.scalars().first() is not None:
        raise ValidationError(
            f'Hashtag with keyword "{keyword}" already exists. Please use a different keyword.'
        )

    hashtag_id = await _find_hashtag_id(client, credential, keyword)

    registered = await db.execute(
        select(InstagramHashtag).filter(InstagramHashtag.hashtag_id == hashtag_id)
    )
    duplicate = registered.scalars().first()
    if duplicate is not None:
        raise ValidationError(
            f'This hashtag is already registered with keyword "{duplicate.keyword}".'
        )

    hashtag = InstagramHashtag(
        keyword=keyword,
        hashtag_id=hashtag_id,
        is_active=True,
        created_by=identity.id,
        updated_by=identity.id,
    )
    try:
        db.add(hashtag)
        await db.flush()
        await record_audit(
            db,
            "instagram.hashtag.create",
            "instagram_hashtag",
            hashtag.id,
            identity.id,
            {"keyword": keyword, "hashtag_id": hashtag_id},
        )
        await db.commit()
        await db.refresh(hashtag)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("해시태그 등록 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("해시태그 등록: %s (%s) by=%s", keyword, hashtag_id, identity.id)
    return InstagramHashtagResponse.model_validate(hashtag)


async def toggle_hashtag(
    identity: ResolvedIdentity, db: AsyncSession, hashtag_id: str
) -> InstagramHashtagResponse:
    """해시태그 수집 활성 여부를 반전합니다. (super_admin, admin)

    Raises:
        NotFoundError: 해시태그가 없는 경우
    """
    identity = require_admin(identity)
    hashtag = await db.get(InstagramHashtag, hashtag_id)
    if hashtag is None:
        raise NotFoundError("Hashtag not found")

    hashtag.is_active = not hashtag.is_active
    hashtag.updated_by = identity.id
    hashtag.updated_at = utcnow()
    try:
        await record_audit(
            db,
            "instagram.hashtag.toggle",
            "instagram_hashtag",
            hashtag.id,
            identity.id,
            {"is_active": hashtag.is_active},
        )
        await db.commit()
        await db.refresh(hashtag)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("해시태그 상태 변경 중 예외 발생: %s", e)
        raise InternalError() from e

    return InstagramHashtagResponse.model_validate(hashtag)
