import pytest

from app.schemas.menus import MenuCreate, MenuUpdate
from app.services import menu_service
from app.utils.errors import ForbiddenError, NotFoundError, ValidationError


def flatten(nodes):
    ids = []
    for node in nodes:
        ids.append(node.code)
        ids.extend(flatten(node.children))
    return ids


@pytest.fixture
def create_menu(db, identities):
    async def create(code, **fields):
        return await menu_service.create_menu(
            identities["super_admin"],
            db,
            MenuCreate(code=code, name=fields.pop("name", code.title()), **fields),
        )

    return create


async def test_duplicate_menu_code_is_rejected(create_menu):
    await create_menu("reports")

    with pytest.raises(ValidationError, match='Menu with code "reports" already exists'):
        await create_menu("reports")


async def test_only_super_admin_creates_menus(db, identities):
    with pytest.raises(ForbiddenError):
        await menu_service.create_menu(
            identities["admin"], db, MenuCreate(code="shops", name="Shops")
        )


async def test_create_menu_with_missing_parent(create_menu):
    with pytest.raises(NotFoundError, match="Parent menu not found"):
        await create_menu("child", parent_id="missing")


async def test_menu_cannot_be_its_own_parent_or_descendant(db, identities, create_menu):
    root = await create_menu("shops")
    child = await create_menu("shop-list", parent_id=root.id)
    grandchild = await create_menu("shop-detail", parent_id=child.id)
    super_admin = identities["super_admin"]

    with pytest.raises(ValidationError, match="its own parent"):
        await menu_service.update_menu(super_admin, db, root.id, MenuUpdate(parent_id=root.id))
    with pytest.raises(ValidationError, match="descendant"):
        await menu_service.update_menu(
            super_admin, db, root.id, MenuUpdate(parent_id=grandchild.id)
        )

    moved = await menu_service.update_menu(
        super_admin, db, grandchild.id, MenuUpdate(parent_id=root.id, display_order=9)
    )
    assert moved.parent_id == root.id
    assert moved.display_order == 9


async def test_required_menu_columns_cannot_be_cleared(db, identities, create_menu):
    menu = await create_menu("reports", name="리포트")
    super_admin = identities["super_admin"]

    for field in ("name", "code", "display_order", "is_active"):
        with pytest.raises(ValidationError, match=f"{field} cannot be null"):
            await menu_service.update_menu(
                super_admin, db, menu.id, MenuUpdate.model_validate({field: None})
            )

    renamed = await menu_service.update_menu(
        super_admin, db, menu.id, MenuUpdate(name="월간 리포트", icon=None)
    )
    assert renamed.name == "월간 리포트"


async def test_super_admin_sees_every_active_menu(db, identities, create_menu):
    root = await create_menu("shops", display_order=2)
    await create_menu("dashboard", display_order=1)
    await create_menu("shop-list", parent_id=root.id)
    await create_menu("legacy", is_active=False)

    tree = await menu_service.list_accessible_menus(identities["super_admin"], db)

    assert [node.code for node in tree] == ["dashboard", "shops"]
    assert [node.code for node in tree[1].children] == ["shop-list"]

    everything = await menu_service.list_all_menus(identities["super_admin"], db)
    assert sorted(flatten(everything)) == ["dashboard", "legacy", "shop-list", "shops"]


async def test_general_user_cannot_list_menus(db, identities):
    with pytest.raises(ForbiddenError):
        await menu_service.list_accessible_menus(identities["general"], db)


async def test_replace_permissions_defines_accessible_menus(db, identities, accounts, create_menu):
    dashboard = await create_menu("dashboard")
    shops = await create_menu("shops")
    tags = await create_menu("tags")
    hidden = await create_menu("hidden", is_active=False)
    super_admin = identities["super_admin"]
    admin_id = accounts.admin.id

    await menu_service.replace_permissions(super_admin, db, admin_id, [dashboard.id, tags.id])
    granted = await menu_service.replace_permissions(
        super_admin, db, admin_id, [shops.id, hidden.id, "missing", shops.id]
    )

    assert sorted(p.menu_id for p in granted) == sorted([shops.id, hidden.id])
    tree = await menu_service.list_accessible_menus(identities["admin"], db)
    assert flatten(tree) == ["shops"]

    again = await menu_service.replace_permissions(
        super_admin, db, admin_id, [shops.id, hidden.id, "missing"]
    )
    assert sorted(p.menu_id for p in again) == sorted(p.menu_id for p in granted)
    stored = await menu_service.get_admin_menu_permissions(super_admin, db, admin_id)
    assert len(stored) == 2


async def test_replace_permissions_with_empty_list_revokes_all(db, identities, accounts, create_menu):
    dashboard = await create_menu("dashboard")
    super_admin = identities["super_admin"]
    await menu_service.replace_permissions(super_admin, db, accounts.admin.id, [dashboard.id])

    await menu_service.replace_permissions(super_admin, db, accounts.admin.id, [])

    assert await menu_service.list_accessible_menus(identities["admin"], db) == []


async def test_soft_and_hard_delete(db, identities, accounts, create_menu):
    soft = await create_menu("soft")
    hard = await create_menu("hard")
    super_admin = identities["super_admin"]
    await menu_service.replace_permissions(
        super_admin, db, accounts.admin.id, [soft.id, hard.id]
    )

    await menu_service.delete_menu(super_admin, db, soft.id)
    await menu_service.delete_menu(super_admin, db, hard.id, hard=True)

    assert await menu_service.list_accessible_menus(identities["admin"], db) == []
    assert flatten(await menu_service.list_all_menus(super_admin, db)) == ["soft"]
    with pytest.raises(NotFoundError):
        await menu_service.get_menu_or_404(db, hard.id)


async def test_menu_routes(client, accounts):
    headers = accounts.headers("super_admin")

    created = await client.post(
        "/admin/menus",
        json={"code": "reports", "name": "리포트", "metadata": {"badge": "new"}},
        headers=headers,
    )
    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    assert body["data"]["metadata"] == {"badge": "new"}

    duplicate = await client.post(
        "/admin/menus", json={"code": "reports", "name": "리포트"}, headers=headers
    )
    assert duplicate.status_code == 400
    assert duplicate.json() == {
        "success": False,
        "error": 'Menu with code "reports" already exists',
    }

    forbidden = await client.get("/admin/menus/all", headers=accounts.headers("admin"))
    assert forbidden.status_code == 403

    replaced = await client.put(
        f"/admin/menus/permissions/{accounts.admin.id}",
        json={"menu_ids": [body["data"]["id"]]},
        headers=headers,
    )
    assert replaced.status_code == 200
    assert len(replaced.json()["data"]) == 1

    visible = await client.get("/admin/menus", headers=accounts.headers("admin"))
    assert [node["code"] for node in visible.json()["data"]] == ["reports"]

    cleared = await client.put(
        f"/admin/menus/{body['data']['id']}", json={"name": None}, headers=headers
    )
    assert cleared.status_code == 400
    assert cleared.json() == {"success": False, "error": "name cannot be null"}
