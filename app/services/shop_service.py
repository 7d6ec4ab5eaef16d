"""매장 서비스 모듈.

역할과 소유권에 따라 범위가 정해지는 매장 CRUD, 목록 조회, 태그 연결을 제공합니다.

등록 경로:
    - `create_shop`: 관리자 등록. 즉시 verified, 태그 연결 실패는 경고로만 처리
    - `submit_shop`: 인증된 사용자 등록. pending 상태로 저장
    - 일반 사용자 제보(`submission_service.submit`)는 별도 경로로 스팸 제한을 적용
"""

from typing import Any, Iterable, Optional, Sequence, Union

from sqlalchemy import delete, func, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import logger
from app.models.associations import shop_tags
from app.models.shops import Shop, ShopOwner, Tag
from app.models.types import utcnow
from app.schemas.base import SideEffectResult
from app.schemas.identity import ADMIN_ROLES, ResolvedIdentity, Role
from app.schemas.pagination import CustomPage, PageParams
from app.schemas.shops import (
    OwnerShopUpdate,
    ShopCreateResult,
    ShopInput,
    ShopResponse,
    ShopUpdate,
    TagBrief,
)
from app.services.audit_service import record_audit
from app.utils.errors import ForbiddenError, InternalError, NotFoundError, ValidationError
from app.utils.permissions import (
    require_admin,
    require_authenticated,
    require_owner,
    require_super_admin,
)
from app.utils.validation import validate_shop_input, validate_shop_patch

OWNER_EDITABLE_FIELDS = frozenset(
    {
        "description",
        "phone",
        "business_hours",
        "is_24_hours",
        "gacha_machine_count",
        "main_series",
        "detail_address",
        "social_urls",
    }
)


async def get_shop_or_404(db: AsyncSession, shop_id: str) -> Shop:
    """삭제되지 않은 매장을 조회하고 없으면 404 예외를 발생시킵니다."""
    result = await db.execute(
        select(Shop).filter(Shop.id == shop_id, Shop.is_deleted.is_(False))
    )
    shop = result.scalars().first()
    if not shop:
        raise NotFoundError("Shop not found")
    return shop


async def fetch_shop_tags(
    db: AsyncSession, shop_ids: Sequence[str]
) -> dict[str, list[Tag]]:
    """매장 ID별로 연결된 (삭제되지 않은) 태그 목록을 조회합니다."""
    tags_by_shop: dict[str, list[Tag]] = {shop_id: [] for shop_id in shop_ids}
    if not shop_ids:
        return tags_by_shop
    result = await db.execute(
        select(shop_tags.c.shop_id, Tag)
        .join(Tag, Tag.id == shop_tags.c.tag_id)
        .filter(shop_tags.c.shop_id.in_(shop_ids), Tag.is_deleted.is_(False))
        .order_by(Tag.name)
    )
    for shop_id, tag in result.all():
        tags_by_shop[shop_id].append(tag)
    return tags_by_shop


def build_shop_response(shop: Shop, tags: Iterable[Tag] = ()) -> ShopResponse:
    """ORM 매장 객체와 태그 목록으로 응답 스키마를 생성합니다."""
    response = ShopResponse.model_validate(shop)
    response.tags = [TagBrief.model_validate(tag) for tag in tags]
    return response


async def load_shop_response(db: AsyncSession, shop: Shop) -> ShopResponse:
    """태그를 포함한 매장 응답을 생성합니다."""
    tags = await fetch_shop_tags(db, [shop.id])
    return build_shop_response(shop, tags[shop.id])


async def has_verified_ownership(db: AsyncSession, owner_id: str, shop_id: str) -> bool:
    """점주와 매장 사이에 검증된 소유 관계가 있는지 확인합니다."""
    result = await db.execute(
        select(ShopOwner.id).filter(
            ShopOwner.owner_id == owner_id,
            ShopOwner.shop_id == shop_id,
            ShopOwner.verified.is_(True),
        )
    )
    return result.scalars().first() is not None


async def ensure_ownership(identity: ResolvedIdentity, db: AsyncSession, shop_id: str):
    """요청자가 해당 매장의 검증된 점주인지 확인합니다.

    Raises:
        ForbiddenError: owner 역할이 아니거나 검증된 소유 관계가 없는 경우
    """
    identity = require_owner(identity)
    if not await has_verified_ownership(db, identity.id, shop_id):
        logger.warning("소유하지 않은 매장 접근 시도: owner=%s shop=%s", identity.id, shop_id)
        raise ForbiddenError("You do not own this shop")


async def find_unknown_tags(db: AsyncSession, tag_ids: Sequence[str]) -> list[str]:
    """존재하지 않거나 삭제된 태그 ID 목록을 반환합니다."""
    if not tag_ids:
        return []
    result = await db.execute(
        select(Tag.id).filter(Tag.id.in_(tag_ids), Tag.is_deleted.is_(False))
    )
    known = set(result.scalars().all())
    return [tag_id for tag_id in tag_ids if tag_id not in known]


async def insert_shop_tags(
    db: AsyncSession, shop_id: str, tag_ids: Sequence[str], actor_id: Optional[str]
):
    """매장-태그 연결 행을 추가합니다."""
    if not tag_ids:
        return
    await db.execute(
        insert(shop_tags),
        [
            {"shop_id": shop_id, "tag_id": tag_id, "created_by": actor_id, "created_at": utcnow()}
            for tag_id in dict.fromkeys(tag_ids)
        ],
    )


async def attach_tags_leniently(
    db: AsyncSession, shop_id: str, tag_ids: Sequence[str], actor_id: Optional[str]
) -> SideEffectResult:
    """태그를 savepoint 안에서 연결합니다. 실패해도 매장 저장은 유지되며 경고만 반환합니다."""
    result = SideEffectResult()
    if not tag_ids:
        return result

    unknown = await find_unknown_tags(db, tag_ids)
    if unknown:
        result.warn(f"Unknown tags ignored: {', '.join(unknown)}")
    valid = [tag_id for tag_id in tag_ids if tag_id not in unknown]

    try:
        await db.flush()
        async with db.begin_nested():
            await insert_shop_tags(db, shop_id, valid, actor_id)
    except SQLAlchemyError as e:
        logger.warning("태그 연결 실패 (shop=%s): %s", shop_id, e)
        result.warn("Failed to attach tags")

    if not result.ok:
        logger.warning("매장 태그 연결 경고 (shop=%s): %s", shop_id, result.warnings)
    return result


async def _insert_shop(
    identity: ResolvedIdentity,
    db: AsyncSession,
    data: ShopInput,
    **fields: Any,
) -> tuple[Shop, SideEffectResult]:
    values = data.model_dump(exclude={"tag_ids", "created_by", "updated_by", *fields})
    shop = Shop(**values, **fields, created_by=identity.id, updated_by=identity.id)
    try:
        db.add(shop)
        await db.flush()
        tag_result = await attach_tags_leniently(db, shop.id, data.tag_ids or [], identity.id)
        await record_audit(
            db, "shop.create", "shop", shop.id, identity.id, {"data_source": shop.data_source}
        )
        await db.commit()
        await db.refresh(shop)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("매장 등록 중 예외 발생: %s", e)
        raise InternalError() from e
    return shop, tag_result


async def create_shop(
    identity: ResolvedIdentity, db: AsyncSession, data: ShopInput
) -> ShopCreateResult:
    """관리자가 매장을 등록합니다. 등록된 매장은 즉시 verified 상태입니다.

    Args:
        identity (ResolvedIdentity): 요청자 신원 (super_admin, admin)
        db (AsyncSession): 비동기 DB 세션
        data (ShopInput): 매장 정보

    Returns:
        ShopCreateResult: 등록된 매장과 태그 연결 경고

    Raises:
        ForbiddenError: 관리자 역할이 아닌 경우
        ValidationError: 입력 값 검증에 실패한 경우
    """
    identity = require_admin(identity)
    validate_shop_input(data.model_dump())

    shop, tag_result = await _insert_shop(
        identity,
        db,
        data,
        verification_status="verified",
        data_source="admin_input",
        verified_at=utcnow(),
        verified_by=identity.id,
    )
    logger.info("관리자 매장 등록: shop=%s by=%s", shop.id, identity.id)
    return ShopCreateResult(
        shop=await load_shop_response(db, shop), warnings=tag_result.warnings
    )


async def submit_shop(
    identity: ResolvedIdentity, db: AsyncSession, data: ShopInput
) -> ShopCreateResult:
    """인증된 사용자가 매장을 등록합니다. 등록된 매장은 pending 상태로 검토를 기다립니다.

    이 경로는 제보 스팸 제한을 적용하지 않습니다.
    """
    identity = require_authenticated(identity)
    validate_shop_input(data.model_dump())

    shop, tag_result = await _insert_shop(
        identity,
        db,
        data,
        verification_status="pending",
        data_source="user_input",
    )
    logger.info("사용자 매장 등록: shop=%s by=%s", shop.id, identity.id)
    return ShopCreateResult(
        shop=await load_shop_response(db, shop), warnings=tag_result.warnings
    )


def apply_shop_patch(shop: Shop, patch: dict[str, Any], actor_id: str):
    """검증된 패치를 매장 객체에 반영합니다."""
    for field, value in patch.items():
        setattr(shop, field, value)
    if patch.get("verification_status") == "verified":
        shop.verified_at = utcnow()
        shop.verified_by = actor_id
    shop.updated_by = actor_id


async def update_shop(
    identity: ResolvedIdentity, db: AsyncSession, shop_id: str, patch: ShopUpdate
) -> ShopResponse:
    """관리자가 매장을 수정합니다.

    tag_ids 가 전달되면 태그 연결을 같은 트랜잭션 안에서 통째로 교체합니다.

    Raises:
        ForbiddenError: 관리자 역할이 아닌 경우
        NotFoundError: 매장이 없거나 삭제된 경우
        ValidationError: 수정 값 또는 태그 ID가 올바르지 않은 경우
    """
    identity = require_admin(identity)
    shop = await get_shop_or_404(db, shop_id)

    changes = patch.model_dump(exclude_unset=True)
    tag_ids = changes.pop("tag_ids", None)
    validate_shop_patch(changes)
    if tag_ids is not None:
        unknown = await find_unknown_tags(db, tag_ids)
        if unknown:
            raise ValidationError(f"Invalid tag ids: {', '.join(unknown)}")

    apply_shop_patch(shop, changes, identity.id)
    try:
        if tag_ids is not None:
            await db.execute(delete(shop_tags).where(shop_tags.c.shop_id == shop.id))
            await insert_shop_tags(db, shop.id, tag_ids, identity.id)
        await record_audit(db, "shop.update", "shop", shop.id, identity.id, {"fields": sorted(changes)})
        await db.commit()
        await db.refresh(shop)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("매장 수정 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("매장 수정: shop=%s fields=%s by=%s", shop.id, sorted(changes), identity.id)
    return await load_shop_response(db, shop)


async def update_owned_shop(
    identity: ResolvedIdentity,
    db: AsyncSession,
    shop_id: str,
    patch: Union[OwnerShopUpdate, ShopUpdate],
) -> ShopResponse:
    """점주가 자신의 매장을 수정합니다.

    점주 수정 허용 필드(OWNER_EDITABLE_FIELDS) 외의 필드는 오류 없이 무시됩니다.

    Raises:
        ForbiddenError: owner 역할이 아니거나 검증된 소유 관계가 없는 경우
        NotFoundError: 매장이 없거나 삭제된 경우
        ValidationError: 수정 값이 올바르지 않은 경우
    """
    await ensure_ownership(identity, db, shop_id)
    shop = await get_shop_or_404(db, shop_id)

    requested = patch.model_dump(exclude_unset=True)
    changes = {k: v for k, v in requested.items() if k in OWNER_EDITABLE_FIELDS}
    dropped = sorted(set(requested) - set(changes))
    if dropped:
        logger.info("점주 수정 불가 필드 무시: shop=%s fields=%s", shop_id, dropped)
    validate_shop_patch(changes)

    apply_shop_patch(shop, changes, identity.id)
    try:
        await record_audit(db, "shop.owner_update", "shop", shop.id, identity.id, {"fields": sorted(changes)})
        await db.commit()
        await db.refresh(shop)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("점주 매장 수정 중 예외 발생: %s", e)
        raise InternalError() from e

    return await load_shop_response(db, shop)


async def delete_shop(identity: ResolvedIdentity, db: AsyncSession, shop_id: str):
    """매장을 소프트 삭제합니다. (super_admin 전용)"""
    identity = require_super_admin(identity)
    shop = await get_shop_or_404(db, shop_id)

    shop.is_deleted = True
    shop.deleted_at = utcnow()
    shop.deleted_by = identity.id
    shop.updated_by = identity.id
    try:
        await record_audit(db, "shop.delete", "shop", shop.id, identity.id)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("매장 삭제 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("매장 삭제: shop=%s by=%s", shop_id, identity.id)


async def get_shop(
    db: AsyncSession, shop_id: str, verified_only: bool = False
) -> ShopResponse:
    """매장과 태그를 조회합니다.

    Args:
        db (AsyncSession): 비동기 DB 세션
        shop_id (str): 매장 ID
        verified_only (bool): True 이면 verified 매장만 조회 (공개 API)

    Raises:
        NotFoundError: 매장이 없거나 삭제된 경우
    """
    shop = await get_shop_or_404(db, shop_id)
    if verified_only and shop.verification_status != "verified":
        raise NotFoundError("Shop not found")
    return await load_shop_response(db, shop)


async def get_owned_shop(
    identity: ResolvedIdentity, db: AsyncSession, shop_id: str
) -> ShopResponse:
    """점주가 자신의 매장을 조회합니다."""
    await ensure_ownership(identity, db, shop_id)
    return await get_shop(db, shop_id)


async def list_shops(
    identity: Optional[ResolvedIdentity],
    db: AsyncSession,
    params: PageParams,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> CustomPage[ShopResponse]:
    """요청자 역할에 따라 범위가 정해지는 매장 목록을 최신순으로 조회합니다.

    - owner: 검증된 소유 관계가 있는 매장만 (없으면 빈 페이지)
    - super_admin, admin: 삭제되지 않은 모든 매장
    - 그 외/비로그인: verified 매장만

    Args:
        identity (Optional[ResolvedIdentity]): 요청자 신원 (없을 수 있음)
        db (AsyncSession): 비동기 DB 세션
        params (PageParams): 페이지네이션 파라미터
        status (Optional[str]): 검증 상태 필터
        search (Optional[str]): 매장 이름 검색어

    Returns:
        CustomPage[ShopResponse]: 매장 페이지
    """
    query = select(Shop).filter(Shop.is_deleted.is_(False))

    role = identity.role if identity is not None else None
    if role == Role.OWNER:
        owned = select(ShopOwner.shop_id).filter(
            ShopOwner.owner_id == identity.id, ShopOwner.verified.is_(True)
        )
        query = query.filter(Shop.id.in_(owned))
    elif role not in ADMIN_ROLES:
        query = query.filter(Shop.verification_status == "verified")

    if status:
        query = query.filter(Shop.verification_status == status)
    if search:
        query = query.filter(Shop.name.ilike(f"%{search}%"))

    total = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar_one()

    result = await db.execute(
        query.order_by(Shop.created_at.desc(), Shop.id)
        .offset(params.offset)
        .limit(params.size)
    )
    shops = result.scalars().all()
    tags = await fetch_shop_tags(db, [shop.id for shop in shops])

    return CustomPage[ShopResponse].create(
        [build_shop_response(shop, tags[shop.id]) for shop in shops], total, params
    )
