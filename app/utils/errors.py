"""이 모듈은 서비스 전반에서 사용하는 예외 클래스와 전역 예외 핸들러를 정의합니다.

모든 예외는 Starlette의 HTTPException을 상속하므로 라우터와 서비스 어디에서 발생하더라도
`{success: false, error: <메시지>}` 형태의 응답으로 변환됩니다.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Config, logger


class UnauthenticatedError(StarletteHTTPException):
    """인증 정보가 없거나 유효하지 않은 경우 (401)"""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(status_code=Config.HttpStatus.UNAUTHORIZED, detail=detail)


class ForbiddenError(StarletteHTTPException):
    """역할, 소유권, 계정 상태 검사에 실패한 경우 (403)"""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=Config.HttpStatus.FORBIDDEN, detail=detail)


class NotFoundError(StarletteHTTPException):
    """대상 엔티티가 없거나 소프트 삭제된 경우 (404)"""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=Config.HttpStatus.NOT_FOUND, detail=detail)


class ValidationError(StarletteHTTPException):
    """입력 값 오류, 중복, 요청 제한 초과, 잘못된 상태 전이 (400)"""

    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=Config.HttpStatus.BAD_REQUEST, detail=detail)


class InternalError(StarletteHTTPException):
    """저장소 또는 인증 서비스의 예기치 못한 오류 (500)"""

    def __init__(self, detail: str = "서버 내부 오류 발생"):
        super().__init__(
            status_code=Config.HttpStatus.INTERNAL_SERVER_ERROR, detail=detail
        )


def error_response(status_code: int, message: str) -> JSONResponse:
    """실패 응답 envelope 을 생성합니다.

    Args:
        status_code (int): HTTP 상태 코드
        message (str): 사용자에게 보여줄 오류 메시지

    Returns:
        JSONResponse: `{success: false, error: message}` 응답
    """
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


def setup_exception_handlers(app: FastAPI):
    """FastAPI 앱에 전역 예외 핸들러를 등록합니다."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        if exc.status_code >= Config.HttpStatus.INTERNAL_SERVER_ERROR:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, detail)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, detail)
        return error_response(exc.status_code, detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.info("Validation error on %s: %s", request.url.path, errors)
        message = "Invalid request body"
        if errors:
            first = errors[0]
            loc = ".".join(str(p) for p in first.get("loc", []) if p != "body")
            msg = first.get("msg", "")
            message = f"{loc}: {msg}" if loc else msg
        return error_response(Config.HttpStatus.BAD_REQUEST, message)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s: %s", request.url.path, exc)
        return error_response(
            Config.HttpStatus.INTERNAL_SERVER_ERROR, "서버 내부 오류 발생"
        )
