"""매장 태그 서비스 모듈."""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import logger
from app.models.associations import shop_tags
from app.models.shops import Shop, Tag
from app.models.types import utcnow
from app.schemas.identity import ResolvedIdentity
from app.schemas.tags import TagCreate, TagResponse, TagUpdate
from app.services.audit_service import record_audit
from app.utils.errors import InternalError, NotFoundError, ValidationError
from app.utils.permissions import require_admin


async def get_tag_or_404(db: AsyncSession, tag_id: str) -> Tag:
    """삭제되지 않은 태그를 조회하고 없으면 404 예외를 발생시킵니다."""
    result = await db.execute(
        select(Tag).filter(Tag.id == tag_id, Tag.is_deleted.is_(False))
    )
    tag = result.scalars().first()
    if not tag:
        raise NotFoundError("Tag not found")
    return tag


async def count_tag_usage(db: AsyncSession, tag_id: str) -> int:
    """태그가 붙은 (삭제되지 않은) 매장 수를 반환합니다."""
    result = await db.execute(
        select(func.count())
        .select_from(shop_tags)
        .join(Shop, Shop.id == shop_tags.c.shop_id)
        .filter(shop_tags.c.tag_id == tag_id, Shop.is_deleted.is_(False))
    )
    return result.scalar_one()


async def _ensure_unique_name(
    db: AsyncSession, name: str, exclude_id: Optional[str] = None
):
    query = select(Tag.id).filter(Tag.name == name, Tag.is_deleted.is_(False))
    if exclude_id is not None:
        query = query.filter(Tag.id != exclude_id)
    if (await db.execute(query)).scalars().first() is not None:
        raise ValidationError(f'Tag "{name}" already exists')


def _clean_name(name: Optional[str]) -> str:
    if name is None or not name.strip():
        raise ValidationError("Tag name is required")
    return name.strip()


async def list_tags(db: AsyncSession) -> list[TagResponse]:
    """삭제되지 않은 태그 목록을 사용 매장 수와 함께 이름순으로 조회합니다."""
    usage = (
        select(shop_tags.c.tag_id, func.count().label("shop_count"))
        .join(Shop, Shop.id == shop_tags.c.shop_id)
        .filter(Shop.is_deleted.is_(False))
        .group_by(shop_tags.c.tag_id)
        .subquery()
    )
    result = await db.execute(
        select(Tag, func.coalesce(usage.c.shop_count, 0))
        .outerjoin(usage, usage.c.tag_id == Tag.id)
        .filter(Tag.is_deleted.is_(False))
        .order_by(Tag.name)
    )
    tags = []
    for tag, shop_count in result.all():
        response = TagResponse.model_validate(tag)
        response.shop_count = shop_count
        tags.append(response)
    return tags


async def get_tag(db: AsyncSession, tag_id: str) -> TagResponse:
    """태그 한 개를 사용 매장 수와 함께 조회합니다."""
    tag = await get_tag_or_404(db, tag_id)
    response = TagResponse.model_validate(tag)
    response.shop_count = await count_tag_usage(db, tag.id)
    return response


async def create_tag(
    identity: ResolvedIdentity, db: AsyncSession, data: TagCreate
) -> TagResponse:
    """태그를 생성합니다. (super_admin, admin)

    Raises:
        ValidationError: 이름이 비어 있거나 이미 존재하는 경우
    """
    identity = require_admin(identity)
    name = _clean_name(data.name)
    await _ensure_unique_name(db, name)

    tag = Tag(
        name=name,
        description=data.description,
        created_by=identity.id,
        updated_by=identity.id,
    )
    try:
        db.add(tag)
        await db.flush()
        await record_audit(db, "tag.create", "tag", tag.id, identity.id, {"name": name})
        await db.commit()
        await db.refresh(tag)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("태그 생성 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("태그 생성: %s by=%s", name, identity.id)
    return TagResponse.model_validate(tag)


async def update_tag(
    identity: ResolvedIdentity, db: AsyncSession, tag_id: str, data: TagUpdate
) -> TagResponse:
    """태그 이름/설명을 수정합니다. (super_admin, admin)"""
    identity = require_admin(identity)
    tag = await get_tag_or_404(db, tag_id)
    changes = data.model_dump(exclude_unset=True)

    if "name" in changes:
        changes["name"] = _clean_name(changes["name"])
        await _ensure_unique_name(db, changes["name"], exclude_id=tag.id)

    for field, value in changes.items():
        setattr(tag, field, value)
    tag.updated_by = identity.id
    try:
        await record_audit(db, "tag.update", "tag", tag.id, identity.id, changes)
        await db.commit()
        await db.refresh(tag)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("태그 수정 중 예외 발생: %s", e)
        raise InternalError() from e

    return await get_tag(db, tag.id)


async def delete_tag(identity: ResolvedIdentity, db: AsyncSession, tag_id: str):
    """태그를 소프트 삭제합니다. 매장에서 사용 중인 태그는 삭제할 수 없습니다. (super_admin, admin)"""
    identity = require_admin(identity)
    tag = await get_tag_or_404(db, tag_id)

    in_use = await count_tag_usage(db, tag.id)
    if in_use:
        raise ValidationError(f"Tag is used by {in_use} shop(s) and cannot be deleted")

    tag.is_deleted = True
    tag.deleted_at = utcnow()
    tag.updated_by = identity.id
    try:
        await record_audit(db, "tag.delete", "tag", tag.id, identity.id)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("태그 삭제 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("태그 삭제: %s by=%s", tag_id, identity.id)
