"""관리자 메뉴 및 메뉴 권한 서비스 모듈.

메뉴 트리 조회, 메뉴 CRUD, 관리자별 메뉴 권한 교체를 제공합니다.
super_admin 은 명시적 권한과 관계없이 모든 활성 메뉴에 접근할 수 있습니다.
"""

from typing import Any, Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import logger
from app.models.menus import AdminMenuPermission, Menu
from app.schemas.identity import ResolvedIdentity, Role
from app.schemas.menus import MenuCreate, MenuNode, MenuUpdate
from app.services.audit_service import record_audit
from app.utils.errors import InternalError, NotFoundError, ValidationError
from app.utils.menus import build_menu_tree
from app.utils.permissions import require_administrative, require_super_admin
from app.utils.validation import MENU_NON_NULL_FIELDS, validate_not_null


async def get_menu_or_404(db: AsyncSession, menu_id: str) -> Menu:
    """메뉴를 조회하고 없으면 404 예외를 발생시킵니다."""
    result = await db.execute(select(Menu).filter(Menu.id == menu_id))
    menu = result.scalars().first()
    if not menu:
        raise NotFoundError("Menu not found")
    return menu


async def _ensure_unique_code(
    db: AsyncSession, code: str, exclude_id: Optional[str] = None
):
    query = select(Menu.id).filter(Menu.code == code)
    if exclude_id is not None:
        query = query.filter(Menu.id != exclude_id)
    result = await db.execute(query)
    if result.scalars().first() is not None:
        raise ValidationError(f'Menu with code "{code}" already exists')


async def _is_descendant(db: AsyncSession, menu_id: str, candidate_id: str) -> bool:
    """candidate_id 가 menu_id 의 하위 메뉴인지 확인합니다."""
    result = await db.execute(select(Menu.id, Menu.parent_id))
    parents = {row.id: row.parent_id for row in result.all()}
    seen: set[str] = set()
    current = parents.get(candidate_id)
    while current is not None and current not in seen:
        if current == menu_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False


async def list_accessible_menus(
    identity: ResolvedIdentity, db: AsyncSession
) -> list[MenuNode]:
    """요청자가 접근할 수 있는 활성 메뉴 트리를 반환합니다.

    super_admin 은 모든 활성 메뉴를, 그 외 관리자는 권한이 부여된 활성 메뉴만 받습니다.

    Args:
        identity (ResolvedIdentity): 요청자 신원
        db (AsyncSession): 비동기 DB 세션

    Returns:
        list[MenuNode]: 메뉴 트리

    Raises:
        ForbiddenError: 관리자 계정이 아닌 경우
    """
    identity = require_administrative(identity)

    query = select(Menu).filter(Menu.is_active.is_(True))
    if identity.role != Role.SUPER_ADMIN:
        granted = select(AdminMenuPermission.menu_id).filter(
            AdminMenuPermission.admin_id == identity.id
        )
        query = query.filter(Menu.id.in_(granted))

    result = await db.execute(query.order_by(Menu.display_order))
    menus = result.scalars().all()
    logger.debug("접근 가능한 메뉴 %s개: user=%s", len(menus), identity.id)
    return build_menu_tree(menus)


async def list_all_menus(
    identity: ResolvedIdentity, db: AsyncSession
) -> list[MenuNode]:
    """비활성 메뉴를 포함한 전체 메뉴 트리를 반환합니다. (super_admin 전용)"""
    require_super_admin(identity)
    result = await db.execute(select(Menu).order_by(Menu.display_order))
    return build_menu_tree(result.scalars().all())


async def get_admin_menu_permissions(
    identity: ResolvedIdentity, db: AsyncSession, admin_id: str
) -> list[AdminMenuPermission]:
    """특정 관리자에게 부여된 메뉴 권한 목록을 반환합니다. (super_admin 전용)"""
    require_super_admin(identity)
    result = await db.execute(
        select(AdminMenuPermission)
        .filter(AdminMenuPermission.admin_id == admin_id)
        .order_by(AdminMenuPermission.granted_at)
    )
    return list(result.scalars().all())


async def create_menu(
    identity: ResolvedIdentity, db: AsyncSession, data: MenuCreate
) -> Menu:
    """메뉴를 생성합니다. (super_admin 전용)

    Args:
        identity (ResolvedIdentity): 요청자 신원
        db (AsyncSession): 비동기 DB 세션
        data (MenuCreate): 생성할 메뉴 정보

    Returns:
        Menu: 생성된 메뉴

    Raises:
        ForbiddenError: super_admin 이 아닌 경우
        ValidationError: 메뉴 코드가 이미 존재하는 경우
        NotFoundError: 상위 메뉴가 존재하지 않는 경우
    """
    require_super_admin(identity)
    await _ensure_unique_code(db, data.code)
    if data.parent_id is not None:
        try:
            await get_menu_or_404(db, data.parent_id)
        except NotFoundError as e:
            raise NotFoundError("Parent menu not found") from e

    menu = Menu(
        code=data.code,
        name=data.name,
        description=data.description,
        parent_id=data.parent_id,
        path=data.path,
        icon=data.icon,
        display_order=data.display_order,
        is_active=data.is_active,
        menu_metadata=data.metadata,
        created_by=identity.id,
        updated_by=identity.id,
    )
    try:
        db.add(menu)
        await db.flush()
        await record_audit(db, "menu.create", "menu", menu.id, identity.id, {"code": menu.code})
        await db.commit()
        await db.refresh(menu)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("메뉴 생성 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("메뉴 생성: code=%s by=%s", menu.code, identity.id)
    return menu


async def update_menu(
    identity: ResolvedIdentity, db: AsyncSession, menu_id: str, patch: MenuUpdate
) -> Menu:
    """메뉴를 수정합니다. (super_admin 전용)

    Raises:
        ForbiddenError: super_admin 이 아닌 경우
        NotFoundError: 메뉴 또는 상위 메뉴가 존재하지 않는 경우
        ValidationError: null 로 지울 수 없는 필드, 코드 중복, 자기 자신 또는 하위 메뉴를 상위로 지정한 경우
    """
    require_super_admin(identity)
    menu = await get_menu_or_404(db, menu_id)
    changes: dict[str, Any] = patch.model_dump(exclude_unset=True)
    validate_not_null(changes, MENU_NON_NULL_FIELDS)

    if "code" in changes and changes["code"] != menu.code:
        await _ensure_unique_code(db, changes["code"], exclude_id=menu.id)

    parent_id = changes.get("parent_id")
    if parent_id is not None:
        if parent_id == menu.id:
            raise ValidationError("Menu cannot be its own parent")
        try:
            await get_menu_or_404(db, parent_id)
        except NotFoundError as e:
            raise NotFoundError("Parent menu not found") from e
        if await _is_descendant(db, menu.id, parent_id):
            raise ValidationError("Menu cannot be moved under its own descendant")

    if "metadata" in changes:
        changes["menu_metadata"] = changes.pop("metadata")

    for field, value in changes.items():
        setattr(menu, field, value)
    menu.updated_by = identity.id

    try:
        await record_audit(db, "menu.update", "menu", menu.id, identity.id, patch.model_dump(exclude_unset=True))
        await db.commit()
        await db.refresh(menu)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("메뉴 수정 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("메뉴 수정: id=%s fields=%s", menu.id, list(changes))
    return menu


async def delete_menu(
    identity: ResolvedIdentity, db: AsyncSession, menu_id: str, hard: bool = False
):
    """메뉴를 삭제합니다. (super_admin 전용)

    hard=False 이면 비활성화만 하고, hard=True 이면 행을 삭제합니다.
    영구 삭제 시 남은 메뉴 권한 행은 정리하지 않습니다.
    """
    require_super_admin(identity)
    menu = await get_menu_or_404(db, menu_id)

    try:
        if hard:
            await db.delete(menu)
        else:
            menu.is_active = False
            menu.updated_by = identity.id
        await record_audit(db, "menu.delete", "menu", menu_id, identity.id, {"hard": hard})
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("메뉴 삭제 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("메뉴 삭제: id=%s hard=%s by=%s", menu_id, hard, identity.id)


async def replace_permissions(
    identity: ResolvedIdentity, db: AsyncSession, admin_id: str, menu_ids: list[str]
) -> list[AdminMenuPermission]:
    """관리자의 메뉴 권한을 전달된 목록으로 통째로 교체합니다. (super_admin 전용)

    기존 권한 삭제와 새 권한 추가는 하나의 트랜잭션으로 처리됩니다.
    존재하지 않는 메뉴 ID와 중복 ID는 경고 로그를 남기고 무시합니다.

    Args:
        identity (ResolvedIdentity): 요청자 신원
        db (AsyncSession): 비동기 DB 세션
        admin_id (str): 권한을 받을 관리자 ID
        menu_ids (list[str]): 부여할 메뉴 ID 목록

    Returns:
        list[AdminMenuPermission]: 교체 후 권한 목록
    """
    require_super_admin(identity)

    requested = list(dict.fromkeys(menu_ids))
    existing: set[str] = set()
    if requested:
        result = await db.execute(select(Menu.id).filter(Menu.id.in_(requested)))
        existing = set(result.scalars().all())
    valid_ids = [menu_id for menu_id in requested if menu_id in existing]
    invalid_ids = [menu_id for menu_id in requested if menu_id not in existing]
    if invalid_ids:
        logger.warning("존재하지 않는 메뉴 ID 무시: admin=%s ids=%s", admin_id, invalid_ids)

    try:
        await db.execute(
            delete(AdminMenuPermission).where(AdminMenuPermission.admin_id == admin_id)
        )
        permissions = [
            AdminMenuPermission(admin_id=admin_id, menu_id=menu_id, granted_by=identity.id)
            for menu_id in valid_ids
        ]
        db.add_all(permissions)
        await db.flush()
        await record_audit(
            db,
            "menu_permission.replace",
            "admin_user",
            admin_id,
            identity.id,
            {"menu_ids": valid_ids, "ignored": invalid_ids},
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("메뉴 권한 교체 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("메뉴 권한 교체: admin=%s count=%s by=%s", admin_id, len(permissions), identity.id)
    return permissions
