"""관리자 계정 승인/상태 관리 서비스 모듈 (super_admin 전용)."""

from typing import Optional

from sqlalchemy import func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import logger
from app.models.accounts import AdminUser
from app.models.shops import ShopOwner
from app.models.types import utcnow
from app.schemas.admin_users import AdminUserResponse, AdminUserStats
from app.schemas.identity import ResolvedIdentity, Role
from app.schemas.pagination import CustomPage, PageParams
from app.services import notifier
from app.services.audit_service import record_audit
from app.utils.errors import InternalError, NotFoundError, ValidationError
from app.utils.permissions import require_super_admin


async def get_admin_user_or_404(db: AsyncSession, user_id: str) -> AdminUser:
    """관리자 계정을 조회하고 없으면 404 예외를 발생시킵니다."""
    result = await db.execute(select(AdminUser).filter(AdminUser.id == user_id))
    user = result.scalars().first()
    if not user:
        raise NotFoundError("Admin user not found")
    return user


async def list_admin_users(  # noqa: PLR0913
    identity: ResolvedIdentity,
    db: AsyncSession,
    params: PageParams,
    approval_status: Optional[str] = None,
    status: Optional[str] = None,
    role: Optional[str] = None,
    search: Optional[str] = None,
) -> CustomPage[AdminUserResponse]:
    """관리자 계정 목록을 최신 가입순으로 조회합니다.

    search 는 이메일 또는 이름에 대해 부분 일치로 검색합니다.
    """
    require_super_admin(identity)
    query = select(AdminUser)
    if approval_status:
        query = query.filter(AdminUser.approval_status == approval_status)
    if status:
        query = query.filter(AdminUser.status == status)
    if role:
        query = query.filter(AdminUser.role == role)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(AdminUser.email.ilike(pattern), AdminUser.full_name.ilike(pattern))
        )

    total = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar_one()
    result = await db.execute(
        query.order_by(AdminUser.created_at.desc(), AdminUser.id)
        .offset(params.offset)
        .limit(params.size)
    )
    users = [AdminUserResponse.model_validate(u) for u in result.scalars().all()]
    return CustomPage[AdminUserResponse].create(users, total, params)


async def get_admin_user_stats(
    identity: ResolvedIdentity, db: AsyncSession
) -> AdminUserStats:
    """승인 상태와 계정 상태별 관리자 수를 집계합니다. (삭제된 계정 제외)"""
    require_super_admin(identity)
    stats = AdminUserStats()

    result = await db.execute(
        select(AdminUser.approval_status, func.count())
        .filter(AdminUser.status != "deleted")
        .group_by(AdminUser.approval_status)
    )
    for approval_status, count in result.all():
        setattr(stats, approval_status, count)
        stats.total += count

    result = await db.execute(
        select(AdminUser.status, func.count())
        .filter(AdminUser.status != "deleted")
        .group_by(AdminUser.status)
    )
    for status, count in result.all():
        setattr(stats, status, count)
    return stats


async def approve_admin_user(
    identity: ResolvedIdentity, db: AsyncSession, user_id: str
) -> AdminUserResponse:
    """가입 대기 중인 관리자 계정을 승인합니다.

    점주 계정이면 가입 시 연결한 매장 소유 관계도 함께 검증 처리합니다.

    Raises:
        NotFoundError: 계정이 없는 경우
        ValidationError: 대기(pending) 상태가 아닌 경우
    """
    identity = require_super_admin(identity)
    user = await get_admin_user_or_404(db, user_id)
    if user.approval_status != "pending":
        raise ValidationError(f"User is already {user.approval_status}")

    user.approval_status = "approved"
    user.approved_at = utcnow()
    user.approved_by = identity.id
    user.rejection_reason = None
    try:
        if user.role == Role.OWNER.value:
            await db.execute(
                update(ShopOwner).where(ShopOwner.owner_id == user.id).values(verified=True)
            )
        await record_audit(db, "admin_user.approve", "admin_user", user.id, identity.id)
        await db.commit()
        await db.refresh(user)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("관리자 승인 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("관리자 승인: user=%s by=%s", user.id, identity.id)
    await notifier.send_approval_email(user.email, user.full_name)
    return AdminUserResponse.model_validate(user)


async def reject_admin_user(
    identity: ResolvedIdentity, db: AsyncSession, user_id: str, reason: str
) -> AdminUserResponse:
    """가입 대기 중인 관리자 계정을 거절합니다.

    Raises:
        NotFoundError: 계정이 없는 경우
        ValidationError: 거절 사유가 없거나 대기(pending) 상태가 아닌 경우
    """
    identity = require_super_admin(identity)
    if not reason or not reason.strip():
        raise ValidationError("Rejection reason is required")
    user = await get_admin_user_or_404(db, user_id)
    if user.approval_status != "pending":
        raise ValidationError(f"User is already {user.approval_status}")

    user.approval_status = "rejected"
    user.approved_by = identity.id
    user.rejection_reason = reason.strip()
    try:
        await record_audit(
            db, "admin_user.reject", "admin_user", user.id, identity.id, {"reason": reason}
        )
        await db.commit()
        await db.refresh(user)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("관리자 거절 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("관리자 거절: user=%s by=%s", user.id, identity.id)
    await notifier.send_rejection_email(user.email, user.full_name, user.rejection_reason)
    return AdminUserResponse.model_validate(user)


async def update_admin_user_status(
    identity: ResolvedIdentity, db: AsyncSession, user_id: str, status: str
) -> AdminUserResponse:
    """관리자 계정 상태(active, suspended, deleted)를 변경합니다.

    자기 자신의 상태는 변경할 수 없으며, deleted 는 되돌릴 수 없는 종료 상태입니다.
    """
    identity = require_super_admin(identity)
    if user_id == identity.id:
        raise ValidationError("Cannot change your own account status")
    user = await get_admin_user_or_404(db, user_id)
    if user.status == "deleted":
        raise ValidationError("Deleted accounts cannot be modified")

    previous = user.status
    user.status = status
    try:
        await record_audit(
            db,
            "admin_user.status",
            "admin_user",
            user.id,
            identity.id,
            {"from": previous, "to": status},
        )
        await db.commit()
        await db.refresh(user)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("관리자 상태 변경 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("관리자 상태 변경: user=%s %s -> %s by=%s", user.id, previous, status, identity.id)
    return AdminUserResponse.model_validate(user)
