async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {"status": "ok"}}


async def test_protected_route_without_header(client, accounts):
    response = await client.get("/admin/menus")

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": "Missing or invalid authorization header",
    }


async def test_protected_route_with_unknown_token(client, accounts):
    response = await client.get("/admin/menus", headers={"Authorization": "Bearer forged"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


async def test_cors_preflight(client):
    response = await client.options(
        "/shops",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


async def test_request_body_errors_use_envelope(client, accounts):
    response = await client.post(
        "/admin/tags", json={"description": "이름 없음"}, headers=accounts.headers("admin")
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("name")


async def test_unknown_shop_is_not_found(client):
    response = await client.get("/shops/does-not-exist")

    assert response.status_code == 404
    assert response.json()["success"] is False


async def test_public_shop_list_pagination(client, make_shop):
    for i in range(3):
        await make_shop(name=f"매장 {i}")

    response = await client.get("/shops", params={"page": 2, "size": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["data"]) == 1
    assert body["meta"]["total"] == 3
    assert body["meta"]["page"] == 2
    assert body["meta"]["has_next"] is False
    assert body["meta"]["has_prev"] is True
