"""모델 전반에서 공통으로 사용하는 컬럼 타입과 기본값 생성 함수를 정의합니다."""

import json
import uuid
from datetime import datetime, timezone

from sqlalchemy.types import Text, TypeDecorator


class NonEscapedJSON(TypeDecorator):
    """한글이 유니코드로 저장되지 않도록 하는 JSON 타입"""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """DB에 저장하기 전 변환 (한글이 유니코드 이스케이프 되지 않도록 설정)"""
        if value is not None:
            return json.dumps(value, ensure_ascii=False)
        return value

    def process_result_value(self, value, dialect):
        """DB에서 가져올 때 변환"""
        if value is not None:
            return json.loads(value)
        return value


def new_uuid() -> str:
    """문자열 형태의 UUID4를 생성합니다."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """현재 UTC 시각을 반환합니다."""
    return datetime.now(timezone.utc)
