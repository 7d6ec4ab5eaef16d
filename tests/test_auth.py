from sqlalchemy import select

from app.models.shops import ShopOwner
from app.services.auth_service import SIGN_UP_MESSAGE

SIGN_UP = {
    "email": "New.Admin@gachastore.kr",
    "password": "gacha-pass-1",
    "full_name": "새 관리자",
    "role": "admin",
}


async def test_sign_up_creates_pending_admin(client, accounts):
    response = await client.post("/auth/signup", json=SIGN_UP)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == SIGN_UP_MESSAGE
    assert body["data"]["email"] == "new.admin@gachastore.kr"
    assert body["data"]["approval_status"] == "pending"
    assert body["data"]["role"] == "admin"


async def test_sign_up_with_taken_email(client, accounts):
    response = await client.post(
        "/auth/signup", json={**SIGN_UP, "email": "admin@gachastore.kr"}
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_sign_up_validates_input(client, accounts):
    short = await client.post("/auth/signup", json={**SIGN_UP, "password": "short"})
    assert short.status_code == 400
    assert short.json()["error"] == "Password must be at least 8 characters"

    owner_without_shop = await client.post(
        "/auth/signup", json={**SIGN_UP, "role": "owner", "phone": "010-1234-5678"}
    )
    assert owner_without_shop.status_code == 400


async def test_pending_admin_cannot_sign_in_until_approved(client, accounts, auth_server):
    created = await client.post("/auth/signup", json=SIGN_UP)
    user_id = created.json()["data"]["id"]
    credentials = {"email": SIGN_UP["email"], "password": SIGN_UP["password"]}

    denied = await client.post("/auth/signin", json=credentials)
    assert denied.status_code == 403
    assert "승인 대기" in denied.json()["error"]
    # 거부된 로그인으로 발급된 세션은 즉시 종료
    assert auth_server.signed_out == [f"token-{user_id}"]

    approved = await client.put(
        f"/admin/users/{user_id}/approve", headers=accounts.headers("super_admin")
    )
    assert approved.status_code == 200
    assert approved.json()["data"]["approval_status"] == "approved"

    signed_in = await client.post("/auth/signin", json=credentials)
    assert signed_in.status_code == 200
    data = signed_in.json()["data"]
    assert data["session"]["access_token"] == f"token-{user_id}"
    assert data["user"]["last_login_at"] is not None


async def test_rejected_admin_sees_reason(client, accounts):
    created = await client.post("/auth/signup", json=SIGN_UP)
    user_id = created.json()["data"]["id"]

    await client.put(
        f"/admin/users/{user_id}/reject",
        json={"reason": "소속 확인 불가"},
        headers=accounts.headers("super_admin"),
    )

    denied = await client.post(
        "/auth/signin", json={"email": SIGN_UP["email"], "password": SIGN_UP["password"]}
    )
    assert denied.status_code == 403
    assert denied.json()["error"] == "계정이 거부되었습니다. 사유: 소속 확인 불가"


async def test_owner_sign_up_links_shop_until_approved(
    client, accounts, make_shop, session_factory
):
    shop = await make_shop(name="점주 가게")

    created = await client.post(
        "/auth/signup",
        json={
            **SIGN_UP,
            "email": "owner2@gachastore.kr",
            "role": "owner",
            "shop_id": shop.id,
            "phone": "010-1234-5678",
            "business_name": "가챠상회",
        },
    )
    assert created.status_code == 201
    user_id = created.json()["data"]["id"]

    async def ownership() -> ShopOwner:
        async with session_factory() as session:
            result = await session.execute(
                select(ShopOwner).filter(ShopOwner.owner_id == user_id)
            )
            return result.scalars().one()

    assert (await ownership()).verified is False

    await client.put(
        f"/admin/users/{user_id}/approve", headers=accounts.headers("super_admin")
    )
    linked = await ownership()
    assert linked.verified is True
    assert linked.shop_id == shop.id


async def test_owner_sign_up_for_missing_shop(client, accounts):
    response = await client.post(
        "/auth/signup",
        json={**SIGN_UP, "role": "owner", "shop_id": "missing", "phone": "010-1234-5678"},
    )

    assert response.status_code == 404


async def test_wrong_password(client, accounts):
    await client.post("/auth/signup", json=SIGN_UP)

    response = await client.post(
        "/auth/signin", json={"email": SIGN_UP["email"], "password": "wrong-password"}
    )

    assert response.status_code == 401


async def test_sign_out(client, accounts, auth_server):
    headers = accounts.headers("admin")

    response = await client.post("/auth/signout", headers=headers)
    assert response.status_code == 200
    assert auth_server.signed_out == [accounts.tokens["admin"]]

    again = await client.post("/auth/signout", headers=headers)
    assert again.status_code == 401
    assert again.json()["error"] == "Invalid or expired token"
