"""일반 사용자 매장 제보(검토 워크플로) 서비스 모듈.

제보 상태는 pending → approved | rejected 로 한 번만 전이합니다.
검토 시 매장 상태 변경과 제보 상태 변경은 하나의 트랜잭션으로 커밋되며,
제보 상태는 `WHERE status = 'pending'` 조건부 UPDATE 로 다시 확인하여 동시 검토를 막습니다.
"""

from datetime import timedelta
from typing import Optional

from sqlalchemy import func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import Config, logger
from app.models.accounts import GeneralUser
from app.models.shops import Shop
from app.models.submissions import UserSubmission
from app.models.types import utcnow
from app.schemas.identity import ResolvedIdentity
from app.schemas.pagination import CustomPage, PageParams
from app.schemas.shops import ShopUpdate
from app.schemas.submissions import (
    ReviewResult,
    SubmissionCreate,
    SubmissionCreateResult,
    SubmissionDetail,
    SubmissionMetadata,
    SubmissionResponse,
    SubmitterBrief,
)
from app.services.audit_service import record_audit
from app.services.notifier import send_submission_result_email
from app.services.shop_service import (
    apply_shop_patch,
    build_shop_response,
    fetch_shop_tags,
    find_unknown_tags,
    insert_shop_tags,
    load_shop_response,
)
from app.utils.errors import InternalError, NotFoundError, ValidationError
from app.utils.permissions import require_admin, require_general
from app.utils.validation import validate_shop_input, validate_shop_patch

REVIEW_ACTIONS = {"approve": "approved", "reject": "rejected"}
# 제보 서비스가 직접 정하는 매장 컬럼
SUBMITTED_SHOP_EXCLUDE = {
    "tag_ids",
    "verification_status",
    "data_source",
    "submission_note",
    "created_by",
    "updated_by",
}


async def count_recent_submissions(db: AsyncSession, submitter_id: str) -> int:
    """제보 제한 시간 창(기본 1시간) 안에 제출된 제보 수를 반환합니다."""
    window_start = utcnow() - timedelta(hours=Config.SUBMISSION_RATE_WINDOW_HOURS)
    result = await db.execute(
        select(func.count(UserSubmission.id)).filter(
            UserSubmission.submitter_id == submitter_id,
            UserSubmission.submitted_at >= window_start,
        )
    )
    return result.scalar_one()


async def get_submission_or_404(db: AsyncSession, submission_id: str) -> UserSubmission:
    """제보를 조회하고 없으면 404 예외를 발생시킵니다."""
    result = await db.execute(
        select(UserSubmission).filter(UserSubmission.id == submission_id)
    )
    submission = result.scalars().first()
    if not submission:
        raise NotFoundError("Submission not found")
    return submission


async def submit(
    identity: ResolvedIdentity,
    db: AsyncSession,
    data: SubmissionCreate,
    metadata: Optional[SubmissionMetadata] = None,
) -> SubmissionCreateResult:
    """일반 사용자가 새 매장을 제보합니다.

    최근 1시간 동안 5건 이상 제보한 경우 아무것도 저장하지 않고 거절합니다.
    매장(pending, user_submit), 태그 연결, 제보 행이 하나의 트랜잭션으로 저장되며,
    존재하지 않는 태그가 있으면 전체가 취소됩니다.

    Args:
        identity (ResolvedIdentity): 요청자 신원 (일반 사용자)
        db (AsyncSession): 비동기 DB 세션
        data (SubmissionCreate): 제보 내용
        metadata (Optional[SubmissionMetadata]): 요청 IP, User-Agent

    Returns:
        SubmissionCreateResult: 생성된 매장과 제보

    Raises:
        ForbiddenError: 일반 사용자가 아닌 경우
        ValidationError: 제보 제한 초과, 입력 값 오류, 존재하지 않는 태그
    """
    identity = require_general(identity)
    metadata = metadata or SubmissionMetadata()

    recent = await count_recent_submissions(db, identity.id)
    if recent >= Config.SUBMISSION_RATE_LIMIT:
        logger.warning("제보 제한 초과: user=%s count=%s", identity.id, recent)
        raise ValidationError("Too many submissions. Please wait before submitting again.")

    shop_data = data.shop_data
    validate_shop_input(shop_data.model_dump())
    tag_ids = shop_data.tag_ids or []
    unknown = await find_unknown_tags(db, tag_ids)
    if unknown:
        raise ValidationError(f"Invalid tag ids: {', '.join(unknown)}")

    shop = Shop(
        **shop_data.model_dump(exclude=SUBMITTED_SHOP_EXCLUDE),
        verification_status="pending",
        data_source="user_submit",
        submission_note=data.submission_note,
        created_by=identity.id,
        updated_by=identity.id,
    )
    try:
        db.add(shop)
        await db.flush()
        await insert_shop_tags(db, shop.id, tag_ids, identity.id)

        submission = UserSubmission(
            shop_id=shop.id,
            submitter_id=identity.id,
            submission_type="new",
            submission_note=data.submission_note,
            status="pending",
            submitted_data=data.model_dump(mode="json"),
            ip_address=metadata.ip_address,
            user_agent=metadata.user_agent,
        )
        db.add(submission)
        await db.flush()
        await record_audit(db, "submission.create", "user_submission", submission.id, identity.id)
        await db.commit()
        await db.refresh(shop)
        await db.refresh(submission)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("제보 처리 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("매장 제보 접수: submission=%s shop=%s user=%s", submission.id, shop.id, identity.id)
    return SubmissionCreateResult(
        shop=await load_shop_response(db, shop),
        submission=SubmissionResponse.model_validate(submission),
    )


async def review(  # noqa: PLR0913
    identity: ResolvedIdentity,
    db: AsyncSession,
    submission_id: str,
    action: str,
    note: Optional[str] = None,
    shop_updates: Optional[ShopUpdate] = None,
) -> ReviewResult:
    """관리자가 제보를 승인하거나 거절합니다.

    승인 시 매장을 verified 로 바꾸고 검증자/시각을 기록하며 shop_updates 를 함께 반영합니다.
    거절 시 매장을 rejected 로 바꾸고 review_note 를 거절 사유로 기록합니다.

    Args:
        identity (ResolvedIdentity): 요청자 신원 (super_admin, admin)
        db (AsyncSession): 비동기 DB 세션
        submission_id (str): 제보 ID
        action (str): "approve" 또는 "reject"
        note (Optional[str]): 검토 메모
        shop_updates (Optional[ShopUpdate]): 승인 시 반영할 매장 필드

    Returns:
        ReviewResult: 수행된 조치, 갱신된 매장, 제보

    Raises:
        ForbiddenError: 관리자 역할이 아닌 경우
        NotFoundError: 제보 또는 매장이 없는 경우
        ValidationError: 잘못된 action, 이미 검토된 제보, 잘못된 shop_updates
    """
    identity = require_admin(identity)
    if action not in REVIEW_ACTIONS:
        raise ValidationError("Invalid action")
    new_status = REVIEW_ACTIONS[action]

    submission = await get_submission_or_404(db, submission_id)
    if submission.status != "pending":
        raise ValidationError("Submission already reviewed")

    result = await db.execute(
        select(Shop).filter(Shop.id == submission.shop_id, Shop.is_deleted.is_(False))
    )
    shop = result.scalars().first()
    if not shop:
        raise NotFoundError("Shop not found")

    updates = {}
    if action == "approve" and shop_updates is not None:
        updates = shop_updates.model_dump(exclude_unset=True, exclude={"tag_ids", "verification_status", "rejection_reason"})
        validate_shop_patch(updates)

    now = utcnow()
    try:
        transitioned = await db.execute(
            update(UserSubmission)
            .where(UserSubmission.id == submission.id, UserSubmission.status == "pending")
            .values(status=new_status, reviewed_at=now, reviewed_by=identity.id, review_note=note)
            .execution_options(synchronize_session=False)
        )
        if transitioned.rowcount != 1:
            await db.rollback()
            raise ValidationError("Submission already reviewed")

        if action == "approve":
            apply_shop_patch(shop, updates, identity.id)
            shop.verification_status = "verified"
            shop.verified_at = now
            shop.verified_by = identity.id
            shop.rejection_reason = None
        else:
            shop.verification_status = "rejected"
            shop.rejection_reason = note
            shop.updated_by = identity.id

        await record_audit(
            db,
            f"submission.{action}",
            "user_submission",
            submission.id,
            identity.id,
            {"shop_id": shop.id, "note": note},
        )
        await db.commit()
        await db.refresh(shop)
        await db.refresh(submission)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("제보 검토 중 예외 발생: %s", e)
        raise InternalError() from e

    logger.info("제보 검토: submission=%s action=%s by=%s", submission.id, new_status, identity.id)

    submitter = await db.get(GeneralUser, submission.submitter_id)
    if submitter is not None:
        await send_submission_result_email(
            submitter.email, shop.name, approved=action == "approve", note=note
        )

    return ReviewResult(
        action=new_status,
        shop=await load_shop_response(db, shop),
        submission=SubmissionResponse.model_validate(submission),
    )


async def _page_with_details(
    db: AsyncSession, query, params: PageParams
) -> CustomPage[SubmissionDetail]:
    total = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar_one()

    result = await db.execute(
        query.order_by(UserSubmission.submitted_at.desc(), UserSubmission.id)
        .offset(params.offset)
        .limit(params.size)
    )
    submissions = result.scalars().all()
    return CustomPage[SubmissionDetail].create(
        await build_submission_details(db, submissions), total, params
    )


async def build_submission_details(
    db: AsyncSession, submissions
) -> list[SubmissionDetail]:
    """제보 목록에 매장과 제보자 정보를 붙입니다."""
    shop_ids = list({s.shop_id for s in submissions})
    submitter_ids = list({s.submitter_id for s in submissions})

    shops: dict[str, Shop] = {}
    if shop_ids:
        result = await db.execute(select(Shop).filter(Shop.id.in_(shop_ids)))
        shops = {shop.id: shop for shop in result.scalars().all()}
    submitters: dict[str, GeneralUser] = {}
    if submitter_ids:
        result = await db.execute(
            select(GeneralUser).filter(GeneralUser.id.in_(submitter_ids))
        )
        submitters = {user.id: user for user in result.scalars().all()}
    tags = await fetch_shop_tags(db, shop_ids)

    details = []
    for submission in submissions:
        detail = SubmissionDetail.model_validate(submission)
        shop = shops.get(submission.shop_id)
        if shop is not None:
            detail.shop = build_shop_response(shop, tags.get(shop.id, []))
        submitter = submitters.get(submission.submitter_id)
        if submitter is not None:
            detail.submitter = SubmitterBrief.model_validate(submitter)
        details.append(detail)
    return details


async def list_mine(
    identity: ResolvedIdentity,
    db: AsyncSession,
    params: PageParams,
    status: Optional[str] = None,
) -> CustomPage[SubmissionDetail]:
    """일반 사용자가 자신의 제보 목록을 최신순으로 조회합니다."""
    identity = require_general(identity)
    query = select(UserSubmission).filter(UserSubmission.submitter_id == identity.id)
    if status:
        query = query.filter(UserSubmission.status == status)
    return await _page_with_details(db, query, params)


async def list_all(
    identity: ResolvedIdentity,
    db: AsyncSession,
    params: PageParams,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> CustomPage[SubmissionDetail]:
    """관리자가 전체 제보 목록을 조회합니다.

    search 는 매장 이름 또는 제보자 닉네임에 대해 대소문자 구분 없이 부분 일치로 검색합니다.
    """
    require_admin(identity)
    query = select(UserSubmission)
    if status:
        query = query.filter(UserSubmission.status == status)
    if search:
        pattern = f"%{search}%"
        query = (
            query.join(Shop, Shop.id == UserSubmission.shop_id)
            .outerjoin(GeneralUser, GeneralUser.id == UserSubmission.submitter_id)
            .filter(or_(Shop.name.ilike(pattern), GeneralUser.nickname.ilike(pattern)))
        )
    return await _page_with_details(db, query, params)


async def history_for_shop(
    identity: ResolvedIdentity, db: AsyncSession, shop_id: str
) -> list[SubmissionResponse]:
    """관리자가 매장 한 곳의 전체 제보 이력을 최신순으로 조회합니다."""
    require_admin(identity)
    result = await db.execute(
        select(UserSubmission)
        .filter(UserSubmission.shop_id == shop_id)
        .order_by(UserSubmission.submitted_at.desc(), UserSubmission.id)
    )
    return [SubmissionResponse.model_validate(s) for s in result.scalars().all()]
