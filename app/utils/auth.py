"""이 모듈은 Bearer 토큰을 검증하고 요청자의 신원을 확인하는 유틸리티 함수를 제공합니다.

처리 순서:
    1. `resolve_credential`: Authorization 헤더의 Bearer 토큰을 인증 서비스에서 검증
    2. `classify_identity`: 관리자 계정 → 일반 사용자 계정 순서로 조회하여 ResolvedIdentity 생성
"""

from typing import Annotated, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import logger
from app.models.accounts import AdminUser, GeneralUser
from app.schemas.identity import (
    AdministrativeIdentity,
    GeneralIdentity,
    Identity,
    ResolvedIdentity,
    Role,
    VerifiedIdentity,
)
from app.services.identity_provider import (
    IdentityProvider,
    IdentityProviderError,
    get_identity_provider,
)
from app.utils.db import get_db
from app.utils.errors import ForbiddenError, InternalError, UnauthenticatedError

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Authorization 헤더에서 Bearer 토큰을 꺼냅니다.

    Args:
        authorization (Optional[str]): Authorization 헤더 값

    Returns:
        str: 토큰 문자열

    Raises:
        UnauthenticatedError: 헤더가 없거나 Bearer 형식이 아닌 경우
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthenticatedError("Missing or invalid authorization header")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthenticatedError("Missing or invalid authorization header")
    return token


async def resolve_credential(
    authorization: Optional[str], provider: IdentityProvider
) -> VerifiedIdentity:
    """Bearer 토큰을 인증 서비스에서 검증하여 외부 신원으로 교환합니다.

    Args:
        authorization (Optional[str]): Authorization 헤더 값
        provider (IdentityProvider): 외부 인증 서비스

    Returns:
        VerifiedIdentity: 검증된 사용자 ID와 이메일

    Raises:
        UnauthenticatedError: 헤더 형식 오류, 만료/위조된 토큰
        InternalError: 인증 서비스와 통신할 수 없는 경우
    """
    token = extract_bearer_token(authorization)
    try:
        return await provider.verify_token(token)
    except IdentityProviderError as e:
        if e.is_rejection:
            raise UnauthenticatedError("Invalid or expired token") from e
        raise InternalError("Authentication service unavailable") from e


async def classify_identity(
    verified: VerifiedIdentity, db: AsyncSession
) -> ResolvedIdentity:
    """검증된 외부 신원을 관리자 또는 일반 사용자 신원으로 분류합니다.

    관리자 계정을 먼저 조회하고, 없을 때만 일반 사용자 계정을 조회합니다.

    Args:
        verified (VerifiedIdentity): 인증 서비스가 검증한 신원
        db (AsyncSession): 비동기 DB 세션

    Returns:
        ResolvedIdentity: AdministrativeIdentity 또는 GeneralIdentity

    Raises:
        ForbiddenError: 계정이 비활성/미승인/정지 상태인 경우
        UnauthenticatedError: 어느 계정 테이블에도 없는 경우
    """
    result = await db.execute(select(AdminUser).filter(AdminUser.id == verified.id))
    admin = result.scalars().first()
    if admin:
        if admin.status != "active":
            logger.warning("비활성 관리자 계정 접근 시도: %s", admin.id)
            raise ForbiddenError("Account is not active")
        if admin.approval_status != "approved":
            logger.warning("미승인 관리자 계정 접근 시도: %s", admin.id)
            raise ForbiddenError("Account is not approved")
        return AdministrativeIdentity(
            id=admin.id,
            email=admin.email,
            role=Role(admin.role),
            status=admin.status,
            approval_status=admin.approval_status,
            full_name=admin.full_name,
        )

    result = await db.execute(
        select(GeneralUser).filter(GeneralUser.id == verified.id)
    )
    general = result.scalars().first()
    if general:
        if general.status != "active":
            logger.warning("정지/삭제된 일반 사용자 접근 시도: %s", general.id)
            raise ForbiddenError("Account is suspended or deleted")
        return GeneralIdentity(
            id=general.id,
            email=general.email,
            status=general.status,
            nickname=general.nickname,
            full_name=general.full_name,
        )

    logger.warning("등록되지 않은 사용자 접근 시도: %s", verified.id)
    raise UnauthenticatedError("User not found in system")


async def get_current_identity(
    db: Annotated[AsyncSession, Depends(get_db)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> ResolvedIdentity:
    """Authorization 헤더로 요청자의 신원을 확인합니다.

    Returns:
        ResolvedIdentity: 요청자의 신원

    Raises:
        UnauthenticatedError: 인증 정보가 없거나 유효하지 않은 경우
        ForbiddenError: 계정 상태 검사에 실패한 경우
    """
    verified = await resolve_credential(authorization, provider)
    return await classify_identity(verified, db)


async def get_optional_identity(
    db: Annotated[AsyncSession, Depends(get_db)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> Optional[ResolvedIdentity]:
    """Authorization 헤더가 있을 때만 신원을 확인합니다. 헤더가 없으면 None 을 반환합니다."""
    if authorization is None:
        return None
    verified = await resolve_credential(authorization, provider)
    return await classify_identity(verified, db)


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
OptionalIdentity = Annotated[Optional[Identity], Depends(get_optional_identity)]
