"""가챠스토어 관리자 서비스의 메인 애플리케이션 파일입니다."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from app.config import logger, Config
from app.database import init_db
from app.routers import (
    admin_instagram_router,
    admin_shops_router,
    admin_submissions_router,
    admin_tags_router,
    admin_users_router,
    auth_router,
    menus_router,
    owner_shops_router,
    shops_router,
    submissions_router,
    tags_router,
)
from app.utils.errors import setup_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI의 lifespan 이벤트 핸들러"""
    logger.info("🚀 서비스 시작: 데이터베이스 초기화")
    logger.debug(
        "Config 정보 로드: %s",
        {
            "debug": Config.debug,
            "timezone": Config.TIMEZONE,
            "database_url": Config.DATABASE_URL,
            "auth_service_url": Config.AUTH_SERVICE_URL,
            "mail_enabled": Config.MAIL_ENABLED,
        },
    )

    await init_db()

    yield  # FastAPI 실행 유지

    logger.info("🛑 서비스 종료: 정리 작업 완료")


app = FastAPI(lifespan=lifespan, title="Gachastore Admin Service")

# 와일드카드 origin 에는 자격 증명을 허용할 수 없음
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials="*" not in Config.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

setup_exception_handlers(app)

# 라우터 추가
app.include_router(auth_router)
app.include_router(menus_router)
app.include_router(shops_router)
app.include_router(admin_shops_router)
app.include_router(owner_shops_router)
app.include_router(submissions_router)
app.include_router(admin_submissions_router)
app.include_router(tags_router)
app.include_router(admin_tags_router)
app.include_router(admin_users_router)
app.include_router(admin_instagram_router)


@app.get("/")
async def root():
    """루트 엔드포인트입니다."""
    logger.info("Root endpoint accessed")
    return {"success": True, "message": "Gachastore admin service"}


@app.get("/health")
async def health_check():
    """헬스 체크 엔드포인트입니다."""
    return {"success": True, "data": {"status": "ok"}}


if __name__ == "__main__":
    HOST = "0.0.0.0"  # noqa: S104
    PORT = 5600
    logger.info("Starting Gachastore admin server on %s:%s", HOST, PORT)
    uvicorn.run("main:app", host=HOST, port=PORT, reload=True)
