import pytest
from sqlalchemy import insert

from app.models.associations import shop_tags
from app.schemas.tags import TagCreate, TagUpdate
from app.services import tag_service
from app.utils.errors import ForbiddenError, NotFoundError, ValidationError


async def test_create_tag_trims_and_rejects_duplicates(db, identities):
    created = await tag_service.create_tag(
        identities["admin"], db, TagCreate(name="  캡슐토이 ", description="소형 가챠")
    )

    assert created.name == "캡슐토이"
    with pytest.raises(ValidationError, match='Tag "캡슐토이" already exists'):
        await tag_service.create_tag(identities["super_admin"], db, TagCreate(name="캡슐토이"))
    with pytest.raises(ValidationError, match="Tag name is required"):
        await tag_service.create_tag(identities["admin"], db, TagCreate(name="   "))


async def test_tag_management_requires_admin(db, identities):
    for name in ("owner", "general"):
        with pytest.raises(ForbiddenError):
            await tag_service.create_tag(identities[name], db, TagCreate(name="피규어"))


async def test_tag_in_use_cannot_be_deleted(db, identities, make_shop, make_tag):
    tag = await make_tag("인형뽑기")
    shop = await make_shop()
    await db.execute(insert(shop_tags).values(shop_id=shop.id, tag_id=tag.id))
    await db.commit()

    listed = await tag_service.list_tags(db)
    assert [(t.name, t.shop_count) for t in listed] == [("인형뽑기", 1)]

    with pytest.raises(ValidationError, match="used by 1 shop"):
        await tag_service.delete_tag(identities["admin"], db, tag.id)


async def test_delete_and_rename_tag(db, identities, make_tag):
    keep = await make_tag("피규어")
    gone = await make_tag("한정판")
    admin = identities["admin"]

    await tag_service.delete_tag(admin, db, gone.id)
    with pytest.raises(NotFoundError):
        await tag_service.get_tag(db, gone.id)

    # 삭제된 태그 이름은 다시 사용할 수 있음
    renamed = await tag_service.update_tag(admin, db, keep.id, TagUpdate(name="한정판"))
    assert renamed.name == "한정판"
    assert [t.name for t in await tag_service.list_tags(db)] == ["한정판"]


async def test_tag_routes(client, accounts):
    created = await client.post(
        "/admin/tags", json={"name": "24시간"}, headers=accounts.headers("admin")
    )
    assert created.status_code == 201
    tag_id = created.json()["data"]["id"]

    public = await client.get(f"/tags/{tag_id}")
    assert public.json()["data"]["shop_count"] == 0

    forbidden = await client.post(
        "/admin/tags", json={"name": "야간"}, headers=accounts.headers("general")
    )
    assert forbidden.status_code == 403

    deleted = await client.delete(f"/admin/tags/{tag_id}", headers=accounts.headers("admin"))
    assert deleted.json() == {"success": True, "message": "태그가 삭제되었습니다."}
    assert (await client.get("/tags")).json()["data"] == []
