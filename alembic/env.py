import os
import sys
from logging.config import fileConfig
from sqlalchemy import create_engine
from sqlalchemy.engine.url import make_url
from sqlalchemy import pool
from alembic import context
from dotenv import load_dotenv

# 환경 변수 로드
load_dotenv()

# 프로젝트 경로 추가 (어디서든 `app` import 가능)
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

DATABASE_URL = os.environ.get("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("❌ DATABASE_URL 환경 변수가 설정되지 않았습니다.")

config = context.config
url = make_url(DATABASE_URL)
# alembic은 sync driver 사용
if url.drivername.startswith("postgresql+asyncpg"):
    url = url.set(drivername="postgresql")
elif url.drivername.startswith("sqlite+aiosqlite"):
    url = url.set(drivername="sqlite")
config.set_main_option(
    "sqlalchemy.url", url.render_as_string(hide_password=False)
)

# Python 로깅 설정
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# SQLAlchemy 모델 자동 감지
from app.database import Base  # noqa: E402
import app.models  # noqa: E402,F401
from app.models.types import NonEscapedJSON  # noqa: E402

target_metadata = Base.metadata


def render_item(type_, obj, autogen_context):
    """Alembic이 마이그레이션 파일을 생성할 때 커스텀 타입을 자동으로 인식"""
    if isinstance(obj, NonEscapedJSON):
        autogen_context.imports.add("from app.models.types import NonEscapedJSON")
        return "NonEscapedJSON()"
    return False  # 기본 동작 유지


connectable = create_engine(url, poolclass=pool.NullPool, future=True)


def run_migrations_offline():
    """오프라인 모드에서 마이그레이션 실행"""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        render_item=render_item,
        render_as_batch=url.get_backend_name() == "sqlite",
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """온라인 모드에서 마이그레이션 실행"""
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_item=render_item,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
