from datetime import timedelta

import pytest
from sqlalchemy import func, select, update

from app.models.shops import Shop
from app.models.submissions import UserSubmission
from app.models.types import utcnow
from app.schemas.pagination import PageParams
from app.schemas.shops import ShopInput, ShopUpdate
from app.schemas.submissions import SubmissionCreate, SubmissionMetadata
from app.services import submission_service
from app.utils.errors import ForbiddenError, NotFoundError, ValidationError


@pytest.fixture
def submit(db, identities, shop_payload):
    async def send(who="general", **shop_fields):
        data = SubmissionCreate(
            shop_data=shop_payload(**shop_fields), submission_note="동네에 새로 생겼어요"
        )
        return await submission_service.submit(identities[who], db, data)

    return send


async def count_rows(db, model):
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def test_general_user_submission_is_pending(submit, identities):
    result = await submit()

    assert result.submission.status == "pending"
    assert result.submission.submitter_id == identities["general"].id
    assert result.submission.submitted_data["shop_data"]["latitude"] == 37.5
    assert result.shop.verification_status == "pending"
    assert result.shop.data_source == "user_submit"
    assert result.shop.submission_note == "동네에 새로 생겼어요"


async def test_only_general_users_submit(submit):
    with pytest.raises(ForbiddenError, match="Only general users can submit shops"):
        await submit("admin")


async def test_submission_with_unknown_tag_stores_nothing(db, submit):
    with pytest.raises(ValidationError, match="Invalid tag ids: ghost"):
        await submit(tag_ids=["ghost"])

    assert await count_rows(db, Shop) == 0
    assert await count_rows(db, UserSubmission) == 0


async def test_sixth_submission_within_an_hour_is_rejected(db, submit):
    for i in range(5):
        await submit("general", name=f"가챠샵 {i}")

    with pytest.raises(ValidationError, match="Too many submissions"):
        await submit()

    assert await count_rows(db, Shop) == 5
    assert await count_rows(db, UserSubmission) == 5

    # 다른 사용자는 영향을 받지 않음
    other = await submit("other_general")
    assert other.submission.status == "pending"


async def test_rate_limit_window_resets(db, submit, identities):
    for _ in range(5):
        await submit()

    await db.execute(
        update(UserSubmission)
        .where(UserSubmission.submitter_id == identities["general"].id)
        .values(submitted_at=utcnow() - timedelta(hours=2))
    )
    await db.commit()

    result = await submit()
    assert result.submission.status == "pending"
    assert await submission_service.count_recent_submissions(db, identities["general"].id) == 1


async def test_approve_then_review_again_conflicts(db, submit, identities):
    created = await submit()
    admin = identities["admin"]

    reviewed = await submission_service.review(
        admin, db, created.submission.id, "approve", note="ok"
    )

    assert reviewed.action == "approved"
    assert reviewed.shop.verification_status == "verified"
    assert reviewed.shop.verified_by == admin.id
    assert reviewed.submission.status == "approved"
    assert reviewed.submission.review_note == "ok"

    with pytest.raises(ValidationError, match="Submission already reviewed"):
        await submission_service.review(admin, db, created.submission.id, "reject", note="no")

    shop = await db.get(Shop, created.shop.id)
    assert shop.verification_status == "verified"


async def test_approve_applies_shop_updates(db, submit, identities):
    created = await submit()

    reviewed = await submission_service.review(
        identities["super_admin"],
        db,
        created.submission.id,
        "approve",
        shop_updates=ShopUpdate(name="가챠샵 홍대 본점", gacha_machine_count=120),
    )

    assert reviewed.shop.name == "가챠샵 홍대 본점"
    assert reviewed.shop.gacha_machine_count == 120


async def test_reject_records_reason_on_shop(db, submit, identities):
    created = await submit()

    reviewed = await submission_service.review(
        identities["admin"], db, created.submission.id, "reject", note="중복 제보"
    )

    assert reviewed.action == "rejected"
    assert reviewed.shop.verification_status == "rejected"
    assert reviewed.shop.rejection_reason == "중복 제보"


async def test_review_guards(db, submit, identities):
    created = await submit()

    with pytest.raises(ForbiddenError):
        await submission_service.review(identities["owner"], db, created.submission.id, "approve")
    with pytest.raises(ValidationError, match="Invalid action"):
        await submission_service.review(identities["admin"], db, created.submission.id, "archive")
    with pytest.raises(NotFoundError):
        await submission_service.review(identities["admin"], db, "missing", "approve")


async def test_review_of_deleted_shop_is_not_found(db, submit, identities):
    created = await submit()
    await db.execute(
        update(Shop).where(Shop.id == created.shop.id).values(is_deleted=True)
    )
    await db.commit()

    with pytest.raises(NotFoundError, match="Shop not found"):
        await submission_service.review(
            identities["admin"], db, created.submission.id, "approve"
        )

    submission = await db.get(UserSubmission, created.submission.id)
    await db.refresh(submission)
    assert submission.status == "pending"
    assert submission.reviewed_by is None


async def test_submitted_fields_cannot_override_review_state(db, identities, shop_payload):
    class ExtendedShopInput(ShopInput):
        verification_status: str = "verified"
        data_source: str = "admin_input"

    result = await submission_service.submit(
        identities["general"],
        db,
        SubmissionCreate(shop_data=ExtendedShopInput(**shop_payload())),
    )

    assert result.shop.verification_status == "pending"
    assert result.shop.data_source == "user_submit"


async def test_listing_submissions(db, submit, identities):
    await submit("general", name="홍대 가챠")
    await submit("other_general", name="강남 피규어")

    mine = await submission_service.list_mine(identities["general"], db, PageParams())
    assert [s.shop.name for s in mine.data] == ["홍대 가챠"]
    assert mine.data[0].submitter.nickname == "가챠러버"

    everything = await submission_service.list_all(identities["admin"], db, PageParams())
    assert everything.meta.total == 2

    by_nickname = await submission_service.list_all(
        identities["admin"], db, PageParams(), search="피규어왕"
    )
    assert [s.shop.name for s in by_nickname.data] == ["강남 피규어"]

    by_shop = await submission_service.list_all(
        identities["admin"], db, PageParams(), search="홍대"
    )
    assert [s.shop.name for s in by_shop.data] == ["홍대 가챠"]

    with pytest.raises(ForbiddenError):
        await submission_service.list_all(identities["general"], db, PageParams())


async def test_submission_metadata_is_kept(db, identities, shop_payload):
    result = await submission_service.submit(
        identities["general"],
        db,
        SubmissionCreate(shop_data=shop_payload()),
        SubmissionMetadata(ip_address="203.0.113.7", user_agent="gacha-app/1.0"),
    )

    history = await submission_service.history_for_shop(
        identities["admin"], db, result.shop.id
    )
    assert [s.id for s in history] == [result.submission.id]
    assert history[0].ip_address == "203.0.113.7"
    assert history[0].user_agent == "gacha-app/1.0"


async def test_submission_routes(client, accounts, shop_payload):
    created = await client.post(
        "/submissions",
        json={"shop_data": shop_payload(), "submission_note": "제보합니다"},
        headers={
            **accounts.headers("general"),
            "x-forwarded-for": "198.51.100.4, 10.0.0.1",
            "user-agent": "gacha-app/2.0",
        },
    )
    assert created.status_code == 201
    submission = created.json()["data"]["submission"]
    assert submission["status"] == "pending"
    assert submission["ip_address"] == "198.51.100.4"

    as_admin = await client.post(
        "/submissions", json={"shop_data": shop_payload()}, headers=accounts.headers("admin")
    )
    assert as_admin.status_code == 403

    reviewed = await client.put(
        f"/admin/submissions/{submission['id']}/review",
        json={"action": "approve", "review_note": "ok"},
        headers=accounts.headers("admin"),
    )
    assert reviewed.status_code == 200
    assert reviewed.json()["data"]["action"] == "approved"
    assert reviewed.json()["data"]["shop"]["verification_status"] == "verified"

    again = await client.put(
        f"/admin/submissions/{submission['id']}/review",
        json={"action": "reject"},
        headers=accounts.headers("admin"),
    )
    assert again.status_code == 400
    assert again.json() == {"success": False, "error": "Submission already reviewed"}

    mine = await client.get("/submissions/me", headers=accounts.headers("general"))
    assert mine.json()["meta"]["total"] == 1
    assert mine.json()["data"][0]["status"] == "approved"
