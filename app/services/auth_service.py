"""관리자/점주 회원가입, 로그인, 로그아웃 서비스 모듈.

비밀번호와 토큰은 외부 인증 서비스가 관리하며, 이 모듈은 관리자 계정 행과 점주-매장 연결을 관리합니다.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import logger
from app.models.accounts import AdminUser
from app.models.shops import Shop, ShopOwner
from app.models.types import utcnow
from app.schemas.admin_users import (
    AdminUserResponse,
    SignInRequest,
    SignInResult,
    SignUpRequest,
)
from app.services import notifier
from app.services.audit_service import record_audit
from app.services.identity_provider import IdentityProvider, IdentityProviderError
from app.utils.errors import (
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from app.utils.validation import (
    validate_email,
    validate_full_name,
    validate_password,
    validate_phone_number,
)

SIGN_UP_MESSAGE = "회원가입이 완료되었습니다. 슈퍼 관리자의 승인을 기다려주세요."


async def sign_up(
    data: SignUpRequest, db: AsyncSession, provider: IdentityProvider
) -> AdminUserResponse:
    """관리자 또는 점주 계정으로 회원가입합니다.

    인증 서비스에 계정을 만든 뒤 승인 대기(pending) 상태의 관리자 계정 행을 생성합니다.
    점주 가입은 매장 ID와 연락처가 필요하며, 검증되지 않은 매장 소유 관계가 함께 생성됩니다.

    Args:
        data (SignUpRequest): 회원가입 정보
        db (AsyncSession): 비동기 DB 세션
        provider (IdentityProvider): 외부 인증 서비스

    Returns:
        AdminUserResponse: 생성된 관리자 계정

    Raises:
        ValidationError: 입력 값 오류, 이미 가입된 이메일
        NotFoundError: 점주 가입 시 매장이 없는 경우
        InternalError: 인증 서비스 또는 DB 오류
    """
    email = data.email.strip().lower()
    validate_email(email)
    validate_password(data.password)
    validate_full_name(data.full_name)

    if data.role == "owner":
        if not data.shop_id:
            raise ValidationError("Shop is required for owner accounts")
        validate_phone_number(data.phone)
        result = await db.execute(
            select(Shop.id).filter(Shop.id == data.shop_id, Shop.is_deleted.is_(False))
        )
        if result.scalars().first() is None:
            raise NotFoundError("Shop not found")

    existing = await db.execute(select(AdminUser.id).filter(AdminUser.email == email))
    if existing.scalars().first() is not None:
        raise ValidationError("이미 가입된 이메일입니다.")

    try:
        account = await provider.create_account(
            email, data.password, {"full_name": data.full_name, "role": data.role}
        )
    except IdentityProviderError as e:
        if e.is_rejection:
            raise ValidationError(e.message) from e
        raise InternalError("Authentication service unavailable") from e

    user = AdminUser(
        id=account.id,
        email=email,
        full_name=data.full_name.strip(),
        role=data.role,
        status="active",
        approval_status="pending",
        business_license=data.business_license,
        business_name=data.business_name,
    )
    try:
        db.add(user)
        await db.flush()
        if data.role == "owner":
            db.add(
                ShopOwner(
                    shop_id=data.shop_id,
                    owner_id=user.id,
                    verified=False,
                    phone=data.phone,
                    business_license=data.business_license,
                    business_name=data.business_name,
                )
            )
            await db.flush()
        await record_audit(db, "admin_user.sign_up", "admin_user", user.id, user.id, {"role": data.role})
        await db.commit()
        await db.refresh(user)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("회원가입 처리 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("관리자 회원가입: user=%s role=%s", user.id, user.role)
    await notifier.send_welcome_email(user.email, user.full_name)
    return AdminUserResponse.model_validate(user)


async def sign_in(
    data: SignInRequest, db: AsyncSession, provider: IdentityProvider
) -> SignInResult:
    """관리자 계정으로 로그인합니다.

    관리자 계정이 아니거나 비활성/승인 대기/거절 상태이면 발급된 세션을 종료하고 거부합니다.

    Raises:
        UnauthenticatedError: 이메일 또는 비밀번호가 올바르지 않은 경우
        ForbiddenError: 관리자 계정이 아니거나 로그인할 수 없는 상태인 경우
    """
    try:
        verified, session = await provider.sign_in(data.email.strip().lower(), data.password)
    except IdentityProviderError as e:
        if e.is_rejection:
            raise UnauthenticatedError("이메일 또는 비밀번호가 올바르지 않습니다.") from e
        raise InternalError("Authentication service unavailable") from e

    result = await db.execute(select(AdminUser).filter(AdminUser.id == verified.id))
    user = result.scalars().first()

    denial = None
    if user is None:
        denial = "관리자 권한이 필요합니다."
    elif user.status != "active":
        denial = "계정이 비활성화되었습니다. 관리자에게 문의하세요."
    elif user.approval_status == "pending":
        denial = "계정 승인 대기 중입니다. 슈퍼 관리자의 승인을 기다려주세요."
    elif user.approval_status == "rejected":
        denial = "계정이 거부되었습니다."
        if user.rejection_reason:
            denial += f" 사유: {user.rejection_reason}"

    if denial is not None:
        logger.warning("관리자 로그인 거부: user=%s reason=%s", verified.id, denial)
        await _sign_out_quietly(provider, session.get("access_token"))
        raise ForbiddenError(denial)

    user.last_login_at = utcnow()
    try:
        await record_audit(db, "admin_user.sign_in", "admin_user", user.id, user.id)
        await db.commit()
        await db.refresh(user)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("로그인 처리 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("관리자 로그인: user=%s", user.id)
    return SignInResult(user=AdminUserResponse.model_validate(user), session=session)


async def _sign_out_quietly(provider: IdentityProvider, token: str | None):
    if not token:
        return
    try:
        await provider.sign_out(token)
    except IdentityProviderError as e:
        logger.warning("거부된 로그인 세션 종료 실패: %s", e)


async def sign_out(token: str, provider: IdentityProvider):
    """세션을 종료합니다.

    Raises:
        UnauthenticatedError: 토큰이 이미 만료되었거나 유효하지 않은 경우
    """
    try:
        await provider.sign_out(token)
    except IdentityProviderError as e:
        if e.is_rejection:
            raise UnauthenticatedError("Invalid or expired token") from e
        raise InternalError("Authentication service unavailable") from e
