"""외부 인증 서비스(GoTrue 호환 API) 연동 모듈.

비밀번호 저장과 토큰 발급은 외부 인증 서비스가 담당하며, 이 모듈은 토큰 검증, 계정 생성,
로그인, 로그아웃 요청만 전달합니다.
"""

from typing import Annotated, Any

from fastapi import Depends
from httpx import AsyncClient, HTTPError, Response

from app.config import Config, logger
from app.schemas.identity import VerifiedIdentity
from app.utils.http import get_async_client


class IdentityProviderError(Exception):
    """인증 서비스가 요청을 거절했거나 응답하지 않은 경우 발생하는 예외.

    Attributes:
        status_code (int | None): 인증 서비스 응답 상태 코드 (통신 실패 시 None)
        message (str): 인증 서비스가 돌려준 오류 메시지
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_rejection(self) -> bool:
        """인증 서비스가 요청 자체를 거절했는지 (4xx) 여부."""
        return self.status_code is not None and 400 <= self.status_code < 500  # noqa: PLR2004


def _error_message(response: Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    for key in ("msg", "message", "error_description", "error"):
        if isinstance(body, dict) and body.get(key):
            return str(body[key])
    return f"HTTP {response.status_code}"


class IdentityProvider:
    """외부 인증 서비스 클라이언트

    Args:
        client (AsyncClient): 인증 서비스 base_url 이 설정된 비동기 HTTP 클라이언트
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    async def _request(self, method: str, url: str, **kwargs) -> dict[str, Any]:
        try:
            response = await self.client.request(method, url, **kwargs)
        except HTTPError as e:
            logger.error("인증 서비스 통신 실패 (%s %s): %s", method, url, e)
            raise IdentityProviderError(str(e)) from e

        if response.is_error:
            message = _error_message(response)
            logger.info(
                "인증 서비스 요청 거절 (%s %s): %s %s",
                method,
                url,
                response.status_code,
                message,
            )
            raise IdentityProviderError(message, response.status_code)

        if not response.content:
            return {}
        return response.json()

    async def verify_token(self, token: str) -> VerifiedIdentity:
        """액세스 토큰을 검증하고 외부 신원을 반환합니다.

        Args:
            token (str): Bearer 액세스 토큰

        Returns:
            VerifiedIdentity: 토큰 소유자의 ID와 이메일

        Raises:
            IdentityProviderError: 토큰이 유효하지 않거나 인증 서비스와 통신할 수 없는 경우
        """
        body = await self._request(
            "GET", "/auth/v1/user", headers={"Authorization": f"Bearer {token}"}
        )
        if not body.get("id"):
            raise IdentityProviderError("Token has no subject", 401)
        return VerifiedIdentity(id=str(body["id"]), email=body.get("email"))

    async def create_account(
        self, email: str, password: str, user_metadata: dict[str, Any] | None = None
    ) -> VerifiedIdentity:
        """인증 서비스에 새 계정을 생성합니다.

        Raises:
            IdentityProviderError: 이미 가입된 이메일이거나 인증 서비스 오류인 경우
        """
        body = await self._request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": user_metadata or {}},
        )
        user = body.get("user", body)
        if not user.get("id"):
            raise IdentityProviderError("Account creation returned no user", 500)
        return VerifiedIdentity(id=str(user["id"]), email=user.get("email", email))

    async def sign_in(self, email: str, password: str) -> tuple[VerifiedIdentity, dict]:
        """이메일/비밀번호로 로그인하고 (신원, 세션) 을 반환합니다.

        Raises:
            IdentityProviderError: 인증 정보가 올바르지 않거나 인증 서비스 오류인 경우
        """
        body = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        user = body.get("user") or {}
        if not user.get("id"):
            raise IdentityProviderError("Sign-in returned no user", 500)
        session = {
            key: body[key]
            for key in ("access_token", "refresh_token", "token_type", "expires_in")
            if key in body
        }
        return VerifiedIdentity(id=str(user["id"]), email=user.get("email")), session

    async def sign_out(self, token: str):
        """액세스 토큰에 해당하는 세션을 종료합니다."""
        await self._request(
            "POST", "/auth/v1/logout", headers={"Authorization": f"Bearer {token}"}
        )


async def get_identity_provider(
    client: Annotated[AsyncClient, Depends(get_async_client)],
) -> IdentityProvider:
    """요청 범위의 IdentityProvider 를 반환합니다."""
    logger.debug("Identity provider: %s", Config.AUTH_SERVICE_URL)
    return IdentityProvider(client)
