"""데이터베이스 연결과 세션 팩토리를 정의하는 모듈입니다.

기본 저장소는 aiosqlite 이며, DATABASE_URL 로 다른 비동기 드라이버를 지정할 수 있습니다.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.config import Config, logger

async_engine = create_async_engine(Config.DATABASE_URL, echo=Config.debug)

if async_engine.dialect.name == "sqlite":

    @event.listens_for(async_engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # shop_tags 의 ON DELETE CASCADE 가 동작하려면 연결마다 켜야 함
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def init_db():
    """등록된 모든 모델의 테이블을 생성합니다. 운영 환경의 스키마 변경은 alembic 으로 관리합니다."""
    import app.models  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("데이터베이스 테이블 확인 완료: %s", async_engine.dialect.name)
