from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, MockTransport, Request, Response
from sqlalchemy import select

from app.models.instagram import InstagramCredential, InstagramHashtag
from app.models.types import utcnow
from app.schemas.instagram import InstagramCredentialUpsert
from app.services import instagram_service
from app.utils.errors import ForbiddenError, NotFoundError, ValidationError
from app.utils.http import get_instagram_client
from main import app as fastapi_app


class FakeGraphApi:
    """ig_hashtag_search 엔드포인트를 흉내 내는 MockTransport 핸들러."""

    def __init__(self, hashtags=None):
        self.hashtags = hashtags or {"가챠": "17843853986012965", "gacha": "17843853986012965"}
        self.requests: list[Request] = []

    def handler(self, request: Request) -> Response:
        self.requests.append(request)
        if not request.url.path.endswith("/ig_hashtag_search"):
            return Response(404, json={"error": {"message": "Unknown path"}})
        if request.url.params.get("access_token") != "valid-token":
            return Response(
                400, json={"error": {"message": "Invalid OAuth access token."}}
            )
        found = self.hashtags.get(request.url.params.get("q"))
        return Response(200, json={"data": [{"id": found}] if found else []})


@pytest.fixture
def graph_api():
    return FakeGraphApi()


@pytest_asyncio.fixture
async def graph_client(graph_api):
    client = AsyncClient(
        transport=MockTransport(graph_api.handler), base_url="https://graph.test/v24.0"
    )
    yield client
    await client.aclose()


@pytest.fixture
def configure(db, identities):
    async def upsert(access_token="valid-token", user_id="17841400000000000", expires_in=3600):
        return await instagram_service.upsert_credential(
            identities["super_admin"],
            db,
            InstagramCredentialUpsert(
                access_token=access_token, user_id=user_id, expires_in=expires_in
            ),
        )

    return upsert


async def test_only_one_credential_stays_active(db, configure):
    first = await configure(user_id="first")
    second = await configure(user_id="second")

    assert second.is_active is True
    result = await db.execute(select(InstagramCredential).order_by(InstagramCredential.user_id))
    stored = {c.user_id: c for c in result.scalars().all()}
    await db.refresh(stored["first"])
    assert stored["first"].id == first.id
    assert stored["first"].is_active is False
    assert stored["second"].is_active is True
    assert stored["second"].token_type == "user"


async def test_credential_upsert_rules(db, identities):
    with pytest.raises(ForbiddenError):
        await instagram_service.upsert_credential(
            identities["admin"],
            db,
            InstagramCredentialUpsert(access_token="valid-token", user_id="1"),
        )
    with pytest.raises(ValidationError, match="access_token and user_id are required"):
        await instagram_service.upsert_credential(
            identities["super_admin"], db, InstagramCredentialUpsert(access_token="  ")
        )


async def test_credential_status_reports_expiry(db, identities, configure):
    with pytest.raises(NotFoundError, match="No active Instagram credential found"):
        await instagram_service.get_credential_status(identities["admin"], db)

    await configure(expires_in=3600)
    status = await instagram_service.get_credential_status(identities["admin"], db)
    assert status.minutes_remaining == 60
    assert status.is_expiring_soon is False

    await configure(expires_in=300)
    status = await instagram_service.get_credential_status(identities["admin"], db)
    assert status.minutes_remaining == 5
    assert status.is_expiring_soon is True


async def test_search_registers_hashtag(db, identities, configure, graph_api, graph_client):
    await configure()

    hashtag = await instagram_service.search_hashtag(
        identities["admin"], db, graph_client, "  가챠 "
    )

    assert hashtag.keyword == "가챠"
    assert hashtag.hashtag_id == "17843853986012965"
    assert hashtag.is_active is True
    request = graph_api.requests[0]
    assert request.url.path == "/v24.0/ig_hashtag_search"
    assert request.url.params["user_id"] == "17841400000000000"
    assert request.url.params["q"] == "가챠"


async def test_search_requires_keyword_and_credential(db, identities, graph_client):
    with pytest.raises(ValidationError, match="keyword is required"):
        await instagram_service.search_hashtag(identities["admin"], db, graph_client, " ")
    with pytest.raises(NotFoundError, match="Please configure Instagram credentials first"):
        await instagram_service.search_hashtag(identities["admin"], db, graph_client, "가챠")


async def test_search_rejects_duplicates(db, identities, configure, graph_api, graph_client):
    await configure()
    admin = identities["admin"]
    await instagram_service.search_hashtag(admin, db, graph_client, "가챠")

    with pytest.raises(ValidationError, match='keyword "가챠" already exists'):
        await instagram_service.search_hashtag(admin, db, graph_client, "가챠")
    # 이미 등록된 키워드는 Graph API 를 호출하지 않음
    assert len(graph_api.requests) == 1

    with pytest.raises(ValidationError, match='already registered with keyword "가챠"'):
        await instagram_service.search_hashtag(admin, db, graph_client, "gacha")


async def test_search_surfaces_graph_api_errors(db, identities, configure, graph_client):
    admin = identities["admin"]

    await configure(access_token="expired-token")
    with pytest.raises(ValidationError, match="Instagram API error: Invalid OAuth access token."):
        await instagram_service.search_hashtag(admin, db, graph_client, "가챠")

    await configure()
    with pytest.raises(NotFoundError, match="No hashtag found for keyword: 없는태그"):
        await instagram_service.search_hashtag(admin, db, graph_client, "없는태그")

    result = await db.execute(select(InstagramHashtag))
    assert result.scalars().all() == []


async def test_list_counts_recent_hashtags(db, identities):
    now = utcnow()
    db.add_all(
        [
            InstagramHashtag(keyword="오래된", hashtag_id="1", created_at=now - timedelta(days=10)),
            InstagramHashtag(keyword="어제", hashtag_id="2", created_at=now - timedelta(days=1)),
            InstagramHashtag(keyword="오늘", hashtag_id="3", created_at=now),
        ]
    )
    await db.commit()

    listed = await instagram_service.list_hashtags(identities["admin"], db)

    assert [h.keyword for h in listed.hashtags] == ["오늘", "어제", "오래된"]
    assert listed.total == 3
    assert listed.within_7_days_count == 2
    assert listed.limit_info.max_hashtags_per_7_days == 30
    assert listed.limit_info.remaining == 28

    with pytest.raises(ForbiddenError):
        await instagram_service.list_hashtags(identities["owner"], db)


async def test_toggle_flips_active_flag(db, identities):
    hashtag = InstagramHashtag(keyword="가챠", hashtag_id="1")
    db.add(hashtag)
    await db.commit()

    toggled = await instagram_service.toggle_hashtag(identities["admin"], db, hashtag.id)
    assert toggled.is_active is False
    toggled = await instagram_service.toggle_hashtag(identities["admin"], db, hashtag.id)
    assert toggled.is_active is True

    with pytest.raises(NotFoundError, match="Hashtag not found"):
        await instagram_service.toggle_hashtag(identities["admin"], db, "missing")


async def test_instagram_routes(client, accounts, graph_api):
    async def override_get_instagram_client():
        async with AsyncClient(
            transport=MockTransport(graph_api.handler), base_url="https://graph.test/v24.0"
        ) as graph_client:
            yield graph_client

    fastapi_app.dependency_overrides[get_instagram_client] = override_get_instagram_client

    denied = await client.post(
        "/admin/instagram/credentials",
        json={"access_token": "valid-token", "user_id": "1784"},
        headers=accounts.headers("admin"),
    )
    assert denied.status_code == 403

    created = await client.post(
        "/admin/instagram/credentials",
        json={"access_token": "valid-token", "user_id": "1784", "expires_in": 5184000},
        headers=accounts.headers("super_admin"),
    )
    assert created.status_code == 201
    assert "access_token" not in created.json()["data"]

    status = await client.get(
        "/admin/instagram/credentials", headers=accounts.headers("admin")
    )
    assert status.status_code == 200
    assert status.json()["data"]["user_id"] == "1784"
    assert "access_token" not in status.json()["data"]

    registered = await client.post(
        "/admin/instagram/hashtags/search",
        json={"keyword": "가챠"},
        headers=accounts.headers("admin"),
    )
    assert registered.status_code == 201
    hashtag_id = registered.json()["data"]["id"]

    toggled = await client.patch(
        f"/admin/instagram/hashtags/{hashtag_id}/toggle", headers=accounts.headers("admin")
    )
    assert toggled.status_code == 200
    assert toggled.json()["data"]["is_active"] is False

    listed = await client.get("/admin/instagram/hashtags", headers=accounts.headers("admin"))
    assert listed.json()["data"]["total"] == 1
    assert listed.json()["data"]["limit_info"]["current_count"] == 1

    missing = await client.patch(
        "/admin/instagram/hashtags/missing/toggle", headers=accounts.headers("admin")
    )
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Hashtag not found"}
