"""FastAPI 앱의 설정을 정의하는 모듈입니다.

이 모듈은 환경 변수를 로드하고, 로깅을 설정하며, FastAPI 애플리케이션의 설정 값을 관리하는 Config 클래스를 제공합니다.
"""

import os
import logging
from dotenv import load_dotenv
from pytz import timezone

# 환경 변수 로딩
load_dotenv()

# 현재 파일이 위치한 디렉터리 (config 폴더의 절대 경로)
CONFIG_DIR = os.path.dirname(__file__)
CONFIG_DIR = os.path.abspath(CONFIG_DIR)

SERVICE_DIR = os.path.abspath(os.path.join(CONFIG_DIR, "../.."))

# 로깅 설정
logger = logging.getLogger("gachastore_admin_service")
logger.setLevel(logging.DEBUG)  # 모든 로그 기록

# 핸들러 1: 파일에 모든 로그 저장 (디버깅용)
file_handler = logging.FileHandler(
    os.getenv("LOG_FILE", os.path.join(SERVICE_DIR, "app.log")), encoding="utf-8"
)
file_handler.setLevel(logging.DEBUG)  # DEBUG 이상 저장
file_formatter = logging.Formatter(
    "%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
)
file_handler.setFormatter(file_formatter)

# 핸들러 2: 콘솔에 INFO 이상만 출력 (간결한 버전)
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)  # INFO 이상만 출력
console_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
console_handler.setFormatter(console_formatter)

# 로거에 핸들러 추가
logger.addHandler(file_handler)
logger.addHandler(console_handler)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """FastAPI 설정 값을 관리하는 클래스

    이 클래스는 환경 변수에서 설정 값을 로드하고, 기본 값을 제공합니다.
    인증 서비스, 데이터베이스, 제보 제한, 메일 발송, Instagram 연동 설정을 포함합니다.
    """

    debug = os.getenv("DEBUG", "False").lower() == "true"

    SERVICE_DIR = SERVICE_DIR
    CONFIG_DIR = CONFIG_DIR

    DATABASE_URL = os.getenv(
        "DATABASE_URL", "sqlite+aiosqlite:///./gachastore_admin.db"
    )

    TIMEZONE = os.getenv("TIMEZONE", "Asia/Seoul")
    TZ = timezone(TIMEZONE)

    # 외부 인증 서비스 (GoTrue 호환 API)
    AUTH_SERVICE_URL = os.getenv("AUTH_SERVICE_URL", "http://auth-service:9999")
    AUTH_SERVICE_API_KEY = os.getenv("AUTH_SERVICE_API_KEY", "")
    AUTH_SERVICE_TIMEOUT = float(os.getenv("AUTH_SERVICE_TIMEOUT", "10"))

    CORS_ORIGINS = _split_csv(os.getenv("CORS_ORIGINS", "*"))

    # 일반 사용자 제보 스팸 방지
    SUBMISSION_RATE_LIMIT = int(os.getenv("SUBMISSION_RATE_LIMIT", "5"))
    SUBMISSION_RATE_WINDOW_HOURS = int(os.getenv("SUBMISSION_RATE_WINDOW_HOURS", "1"))

    DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # 메일 발송 설정
    MAIL_ENABLED = os.getenv("MAIL_ENABLED", "False").lower() == "true"
    SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
    MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@gachastore.kr")
    MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "가챠스토어")
    ADMIN_DASHBOARD_URL = os.getenv("ADMIN_DASHBOARD_URL", "http://localhost:3000")

    # Instagram Graph API
    INSTAGRAM_GRAPH_URL = os.getenv("INSTAGRAM_GRAPH_URL", "https://graph.facebook.com/v24.0")
    INSTAGRAM_TIMEOUT = float(os.getenv("INSTAGRAM_TIMEOUT", "10"))
    INSTAGRAM_HASHTAG_WEEKLY_LIMIT = int(os.getenv("INSTAGRAM_HASHTAG_WEEKLY_LIMIT", "30"))
    INSTAGRAM_TOKEN_WARNING_MINUTES = int(os.getenv("INSTAGRAM_TOKEN_WARNING_MINUTES", "10"))

    class HttpStatus:
        """HTTP 상태 코드를 정의하는 클래스"""

        OK = 200
        CREATED = 201
        NO_CONTENT = 204
        BAD_REQUEST = 400
        UNAUTHORIZED = 401
        FORBIDDEN = 403
        NOT_FOUND = 404
        CONFLICT = 409
        INTERNAL_SERVER_ERROR = 500
