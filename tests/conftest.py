import json
from dataclasses import dataclass
from typing import Any, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient, MockTransport, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base
from app.models.accounts import AdminUser, GeneralUser
from app.models.shops import Shop, ShopOwner, Tag
from app.models.types import new_uuid, utcnow
from app.schemas.identity import VerifiedIdentity
from app.services.identity_provider import IdentityProvider, get_identity_provider
from app.utils.auth import classify_identity
from app.utils.db import get_db
from main import app as fastapi_app


class FakeAuthServer:
    """GoTrue 호환 인증 서비스를 흉내 내는 MockTransport 핸들러."""

    def __init__(self):
        self.tokens: dict[str, dict[str, Any]] = {}
        self.accounts: dict[str, dict[str, Any]] = {}
        self.signed_out: list[str] = []

    def issue(self, user_id: str, email: str) -> str:
        token = f"token-{user_id}"
        self.tokens[token] = {"id": user_id, "email": email}
        return token

    def register(self, user_id: str, email: str, password: str):
        self.accounts[email] = {"id": user_id, "email": email, "password": password}

    @staticmethod
    def _bearer(request: Request) -> str:
        return request.headers.get("authorization", "").removeprefix("Bearer ")

    def handler(self, request: Request) -> Response:
        path = request.url.path
        if path == "/auth/v1/user":
            user = self.tokens.get(self._bearer(request))
            if user is None:
                return Response(401, json={"msg": "invalid JWT"})
            return Response(200, json=user)

        if path == "/auth/v1/signup":
            body = json.loads(request.content)
            if body["email"] in self.accounts:
                return Response(422, json={"msg": "User already registered"})
            user_id = new_uuid()
            self.register(user_id, body["email"], body["password"])
            return Response(200, json={"id": user_id, "email": body["email"]})

        if path == "/auth/v1/token":
            body = json.loads(request.content)
            account = self.accounts.get(body["email"])
            if account is None or account["password"] != body["password"]:
                return Response(
                    400, json={"error_description": "Invalid login credentials"}
                )
            token = self.issue(account["id"], account["email"])
            return Response(
                200,
                json={
                    "access_token": token,
                    "refresh_token": f"refresh-{account['id']}",
                    "token_type": "bearer",
                    "expires_in": 3600,
                    "user": {"id": account["id"], "email": account["email"]},
                },
            )

        if path == "/auth/v1/logout":
            token = self._bearer(request)
            if token not in self.tokens:
                return Response(401, json={"msg": "invalid JWT"})
            self.tokens.pop(token)
            self.signed_out.append(token)
            return Response(204)

        return Response(404, json={"msg": "not found"})


@dataclass
class SeededAccounts:
    super_admin: AdminUser
    admin: AdminUser
    owner: AdminUser
    general: GeneralUser
    other_general: GeneralUser
    tokens: dict[str, str]

    def headers(self, name: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.tokens[name]}"}


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def auth_server():
    return FakeAuthServer()


@pytest.fixture
def provider_factory(auth_server):
    def factory() -> IdentityProvider:
        return IdentityProvider(
            AsyncClient(
                transport=MockTransport(auth_server.handler),
                base_url="http://auth.test",
            )
        )

    return factory


@pytest_asyncio.fixture
async def provider(provider_factory):
    provider = provider_factory()
    yield provider
    await provider.client.aclose()


@pytest_asyncio.fixture
async def accounts(db, auth_server) -> SeededAccounts:
    def admin_user(role: str, email: str, full_name: str) -> AdminUser:
        return AdminUser(
            id=new_uuid(),
            email=email,
            full_name=full_name,
            role=role,
            status="active",
            approval_status="approved",
            approved_at=utcnow(),
        )

    super_admin = admin_user("super_admin", "super@gachastore.kr", "슈퍼관리자")
    admin = admin_user("admin", "admin@gachastore.kr", "관리자")
    owner = admin_user("owner", "owner@gachastore.kr", "점주")
    general = GeneralUser(
        id=new_uuid(),
        email="collector@example.com",
        nickname="가챠러버",
        provider="kakao",
        status="active",
    )
    other_general = GeneralUser(
        id=new_uuid(),
        email="figure@example.com",
        nickname="피규어왕",
        provider="google",
        status="active",
    )
    db.add_all([super_admin, admin, owner, general, other_general])
    await db.commit()

    seeded = {
        "super_admin": super_admin,
        "admin": admin,
        "owner": owner,
        "general": general,
        "other_general": other_general,
    }
    tokens = {name: auth_server.issue(user.id, user.email) for name, user in seeded.items()}
    return SeededAccounts(tokens=tokens, **seeded)


@pytest_asyncio.fixture
async def identities(db, accounts) -> dict[str, Any]:
    resolved = {}
    for name in ("super_admin", "admin", "owner", "general", "other_general"):
        user = getattr(accounts, name)
        resolved[name] = await classify_identity(
            VerifiedIdentity(id=user.id, email=user.email), db
        )
    return resolved


@pytest.fixture
def shop_payload() -> Callable[..., dict[str, Any]]:
    def build(**overrides) -> dict[str, Any]:
        data = {
            "name": "가챠샵 홍대점",
            "shop_type": ["gacha"],
            "road_address": "서울 마포구 양화로 160",
            "sido": "서울",
            "latitude": 37.5,
            "longitude": 127.0,
        }
        data.update(overrides)
        return data

    return build


@pytest_asyncio.fixture
async def make_shop(db):
    async def create(
        name: str = "피규어 하우스",
        verification_status: str = "verified",
        **fields,
    ) -> Shop:
        shop = Shop(
            name=name,
            shop_type=fields.pop("shop_type", ["figure"]),
            road_address=fields.pop("road_address", "서울 용산구 한강대로 23"),
            sido=fields.pop("sido", "서울"),
            verification_status=verification_status,
            data_source=fields.pop("data_source", "admin_input"),
            **fields,
        )
        db.add(shop)
        await db.commit()
        return shop

    return create


@pytest_asyncio.fixture
async def make_tag(db):
    async def create(name: str) -> Tag:
        tag = Tag(name=name)
        db.add(tag)
        await db.commit()
        return tag

    return create


@pytest_asyncio.fixture
async def link_owner(db):
    async def link(owner: AdminUser, shop: Shop, verified: bool = True) -> ShopOwner:
        ownership = ShopOwner(shop_id=shop.id, owner_id=owner.id, verified=verified)
        db.add(ownership)
        await db.commit()
        return ownership

    return link


@pytest_asyncio.fixture
async def client(session_factory, provider_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_identity_provider():
        provider = provider_factory()
        try:
            yield provider
        finally:
            await provider.client.aclose()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_identity_provider] = (
        override_get_identity_provider
    )
    async with AsyncClient(
        transport=ASGITransport(app=fastapi_app), base_url="http://test"
    ) as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()
