"""이 모듈은 기본 스키마를 정의합니다.

Pydantic을 사용하여 응답 envelope 스키마를 정의하고, KST(서울 시간)으로 자동 변환되는 datetime 필드를 제공합니다.
"""

from typing import Generic, Optional, TypeVar
from datetime import datetime, timezone

from pydantic import BaseModel, GetCoreSchemaHandler
from pydantic_core import core_schema

from app.config import Config, logger


T = TypeVar("T")


class BaseSchema(BaseModel, Generic[T]):
    """모든 성공 응답이 사용하는 envelope 제네릭 클래스.

    Attributes:
        success (bool): 성공 여부. 기본값은 True.
        message (Optional[str]): 사용자에게 보여줄 메시지.
        data (T): 데이터 객체.
    """

    success: bool = True
    message: Optional[str] = None
    data: T


class MessageSchema(BaseModel):
    """데이터 없이 메시지만 반환하는 응답 envelope."""

    success: bool = True
    message: str


class SideEffectResult(BaseModel):
    """핵심 작업의 성공과 무관한 부가 작업(태그 연결, 감사 로그 등)의 결과.

    Attributes:
        ok (bool): 부가 작업이 모두 성공했는지 여부.
        warnings (list[str]): 실패한 부가 작업에 대한 경고 메시지.
    """

    ok: bool = True
    warnings: list[str] = []

    def warn(self, message: str):
        """경고를 추가하고 실패로 표시합니다."""
        self.ok = False
        self.warnings.append(message)


class Timestamp:
    """KST(서울 시간)으로 자동 변환되는 datetime 필드"""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler: GetCoreSchemaHandler):
        """Pydantic이 사용할 스키마를 정의합니다.

        Args:
            source_type (type): 원본 타입.
            handler (GetCoreSchemaHandler): 스키마 핸들러.

        Returns:
            core_schema: Pydantic 코어 스키마.
        """
        return core_schema.no_info_after_validator_function(
            cls.convert_to_kst, handler.generate_schema(datetime)
        )

    @classmethod
    def convert_to_kst(cls, value: str | datetime) -> datetime:
        """ISO 8601 문자열 또는 datetime을 받아 KST로 변환합니다.

        타임존이 없는 값은 UTC로 저장된 값으로 간주합니다.

        Args:
            value (str | datetime): 변환할 값.

        Returns:
            datetime: KST로 변환된 datetime 객체.

        Raises:
            ValueError: 유효하지 않은 ISO 8601 형식의 문자열인 경우.
            TypeError: str 또는 datetime이 아닌 타입인 경우.
        """
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value)
            except ValueError as err:
                logger.error("Invalid ISO 8601 format: %s", value)
                raise ValueError(f"Invalid ISO 8601 format: {value}") from err

        if isinstance(value, datetime):
            if value.tzinfo is None:
                # ✅ 타임존이 없는 경우, UTC로 간주한 후 KST로 변환
                return value.replace(tzinfo=timezone.utc).astimezone(Config.TZ)
            return value.astimezone(Config.TZ)

        logger.error("Expected str or datetime, got %s", type(value))
        raise TypeError(f"Expected str or datetime, got {type(value)}")
