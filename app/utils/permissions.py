"""이 모듈은 역할 기반 권한 검사 함수를 제공합니다.

모든 함수는 상태가 없는 동기 함수이며, 저장소를 변경하는 작업보다 먼저 호출되어야 합니다.
"""

from typing import Iterable, Optional

from app.config import logger
from app.schemas.identity import (
    ADMIN_ROLES,
    AdministrativeIdentity,
    GeneralIdentity,
    ResolvedIdentity,
    Role,
)
from app.utils.errors import ForbiddenError, UnauthenticatedError


def require_authenticated(identity: Optional[ResolvedIdentity]) -> ResolvedIdentity:
    """신원이 존재하고 ID가 있는지 확인합니다.

    Raises:
        UnauthenticatedError: 신원이 없거나 ID가 비어 있는 경우
    """
    if identity is None or not getattr(identity, "id", None):
        raise UnauthenticatedError("Authentication required")
    return identity


def require_role(
    identity: Optional[ResolvedIdentity], allowed: Iterable[Role]
) -> ResolvedIdentity:
    """신원의 역할이 허용된 역할 집합에 포함되는지 확인합니다.

    Args:
        identity (Optional[ResolvedIdentity]): 요청자 신원
        allowed (Iterable[Role]): 허용할 역할 집합

    Returns:
        ResolvedIdentity: 검사를 통과한 신원

    Raises:
        UnauthenticatedError: 신원이 없는 경우
        ForbiddenError: 역할이 허용되지 않은 경우
    """
    identity = require_authenticated(identity)
    allowed = frozenset(allowed)
    if identity.role not in allowed:
        logger.warning(
            "권한 부족: user=%s role=%s required=%s",
            identity.id,
            identity.role.value,
            sorted(role.value for role in allowed),
        )
        raise ForbiddenError(
            "Forbidden: requires role "
            + " or ".join(sorted(role.value for role in allowed))
        )
    return identity


def require_admin(identity: Optional[ResolvedIdentity]) -> AdministrativeIdentity:
    """super_admin 또는 admin 역할인지 확인합니다."""
    return require_role(identity, ADMIN_ROLES)


def require_super_admin(
    identity: Optional[ResolvedIdentity],
) -> AdministrativeIdentity:
    """super_admin 역할인지 확인합니다."""
    identity = require_authenticated(identity)
    if identity.role != Role.SUPER_ADMIN:
        logger.warning("super_admin 전용 작업 거부: user=%s", identity.id)
        raise ForbiddenError("Forbidden: Only super_admin can perform this action")
    return identity


def require_owner(identity: Optional[ResolvedIdentity]) -> AdministrativeIdentity:
    """owner 역할인지 확인합니다."""
    return require_role(identity, {Role.OWNER})


def require_administrative(
    identity: Optional[ResolvedIdentity],
) -> AdministrativeIdentity:
    """관리자 계정 클래스(super_admin, admin, owner)인지 확인합니다."""
    identity = require_authenticated(identity)
    if not isinstance(identity, AdministrativeIdentity):
        raise ForbiddenError("Administrative account required")
    return identity


def require_general(identity: Optional[ResolvedIdentity]) -> GeneralIdentity:
    """일반 사용자 계정 클래스인지 확인합니다."""
    identity = require_authenticated(identity)
    if not isinstance(identity, GeneralIdentity):
        raise ForbiddenError("Only general users can submit shops")
    return identity


def is_admin(identity: Optional[ResolvedIdentity]) -> bool:
    """super_admin 또는 admin 역할 여부를 예외 없이 반환합니다."""
    return identity is not None and identity.role in ADMIN_ROLES
