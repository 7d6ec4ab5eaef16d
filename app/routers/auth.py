"""관리자 인증 API 모듈

API 목록:
    - `POST /auth/signup`: 관리자/점주 회원가입 (승인 대기 상태로 생성)
    - `POST /auth/signin`: 관리자 로그인
    - `POST /auth/signout`: 로그아웃
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Config
from app.schemas.admin_users import (
    AdminUserResponse,
    SignInRequest,
    SignInResult,
    SignUpRequest,
)
from app.schemas.base import BaseSchema, MessageSchema
from app.services import auth_service
from app.services.identity_provider import IdentityProvider, get_identity_provider
from app.utils.auth import extract_bearer_token
from app.utils.db import get_db

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    status_code=Config.HttpStatus.CREATED,
    response_model=BaseSchema[AdminUserResponse],
)
async def sign_up(
    request: SignUpRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
):
    """관리자 또는 점주 계정으로 회원가입합니다.

    가입한 계정은 슈퍼 관리자가 승인하기 전까지 로그인할 수 없습니다.

    Args:
        request (SignUpRequest): 회원가입 정보
        db (AsyncSession): 비동기 DB 세션 객체입니다.
        provider (IdentityProvider): 외부 인증 서비스 클라이언트입니다.

    Returns:
        BaseSchema[AdminUserResponse]: 생성된 관리자 계정

    Raises:
        HTTPException(400): 입력 값 오류 또는 이미 가입된 이메일
        HTTPException(404): 점주 가입 시 매장이 존재하지 않는 경우
    """
    user = await auth_service.sign_up(request, db, provider)
    return BaseSchema[AdminUserResponse](
        data=user, message=auth_service.SIGN_UP_MESSAGE
    )


@router.post("/signin", response_model=BaseSchema[SignInResult])
async def sign_in(
    request: SignInRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
):
    """관리자 계정으로 로그인하고 세션 토큰을 반환합니다.

    Raises:
        HTTPException(401): 이메일 또는 비밀번호가 올바르지 않은 경우
        HTTPException(403): 관리자 계정이 아니거나 승인/활성 상태가 아닌 경우
    """
    result = await auth_service.sign_in(request, db, provider)
    return BaseSchema[SignInResult](data=result)


@router.post("/signout", response_model=MessageSchema)
async def sign_out(
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    authorization: Annotated[Optional[str], Header()] = None,
):
    """현재 세션을 종료합니다."""
    token = extract_bearer_token(authorization)
    await auth_service.sign_out(token, provider)
    return MessageSchema(message="로그아웃되었습니다.")
