"""감사 로그 기록 모듈.

감사 로그는 부가 작업이므로 기록에 실패해도 호출한 작업을 중단하지 않고 경고만 남깁니다.
"""

from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import logger
from app.models.submissions import AuditLog
from app.schemas.base import SideEffectResult


async def record_audit(  # noqa: PLR0913
    db: AsyncSession,
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    actor_id: Optional[str] = None,
    changes: Optional[dict[str, Any]] = None,
) -> SideEffectResult:
    """감사 로그를 현재 트랜잭션 안의 savepoint 에 기록합니다.

    실제 반영은 호출자의 commit 시점에 이루어집니다.
    호출자의 대기 중인 변경을 flush 하다 발생한 오류는 그대로 전파됩니다.

    Args:
        db (AsyncSession): 비동기 DB 세션
        action (str): 작업 이름
        entity_type (str): 대상 엔티티 종류
        entity_id (Optional[str]): 대상 엔티티 ID
        actor_id (Optional[str]): 작업 수행자 ID
        changes (Optional[dict]): 변경 내용

    Returns:
        SideEffectResult: 기록 성공 여부와 경고
    """
    result = SideEffectResult()
    # 호출자의 변경은 먼저 반영해 두어야 실패가 감사 로그 실패로 숨겨지지 않음
    await db.flush()
    try:
        async with db.begin_nested():
            db.add(
                AuditLog(
                    action=action,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    actor_id=actor_id,
                    changes=changes,
                )
            )
    except SQLAlchemyError as e:
        logger.warning("감사 로그 기록 실패 (%s %s): %s", action, entity_id, e)
        result.warn(f"audit log not recorded: {action}")
    return result
