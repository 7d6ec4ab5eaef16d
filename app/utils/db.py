"""요청 단위 데이터베이스 세션 의존성을 제공합니다."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from app.database import AsyncSessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """요청마다 새 세션을 열고, 처리 중 예외가 발생하면 커밋되지 않은 변경을 되돌립니다.

    Yields:
        AsyncSession: 비동기 데이터베이스 세션 객체
    """
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception:
            await db.rollback()
            raise
