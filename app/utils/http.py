"""이 모듈은 외부 인증 서비스, Instagram Graph API 와 통신하는 HTTP 비동기 클라이언트를 생성하는 유틸리티 함수를 제공합니다."""

from typing import AsyncGenerator, Optional
from httpx import AsyncClient, Request, Timeout

from app.config import Config


class IdentityProviderClient(AsyncClient):
    """IdentityProviderClient 클래스는 비동기 HTTP 클라이언트로, 요청 헤더에 서비스 API 키를 포함하여 전송합니다.

    Attributes:
        api_key (Optional[str]): 요청 헤더에 포함될 API 키 (없을 수 있음).

    Methods:
        __init__(api_key: Optional[str], *args, **kwargs):
            IdentityProviderClient 객체를 초기화합니다.
            API 키와 추가적인 인자를 설정합니다.

        send(request: Request, **kwargs):
            요청 객체에 "apikey" 헤더를 (존재할 경우) 추가한 후, 부모 클래스의 send 메서드를 호출합니다.
    """

    def __init__(self, api_key: Optional[str], *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.api_key = api_key

    async def send(self, request: Request, **kwargs):
        if self.api_key:
            request.headers["apikey"] = self.api_key
        return await super().send(request, **kwargs)


async def get_async_client() -> AsyncGenerator[IdentityProviderClient, None]:
    """인증 서비스용 비동기 HTTP 클라이언트를 생성하고 반환합니다.

    Yields:
        IdentityProviderClient: API 키를 포함하는 비동기 HTTP 클라이언트
    """
    async with IdentityProviderClient(
        api_key=Config.AUTH_SERVICE_API_KEY,
        base_url=Config.AUTH_SERVICE_URL,
        timeout=Timeout(Config.AUTH_SERVICE_TIMEOUT),
    ) as client:
        yield client


async def get_instagram_client() -> AsyncGenerator[AsyncClient, None]:
    """Instagram Graph API 용 비동기 HTTP 클라이언트를 생성하고 반환합니다.

    Yields:
        AsyncClient: Graph API 버전 경로를 base_url 로 갖는 비동기 HTTP 클라이언트
    """
    async with AsyncClient(
        base_url=Config.INSTAGRAM_GRAPH_URL,
        timeout=Timeout(Config.INSTAGRAM_TIMEOUT),
    ) as client:
        yield client
