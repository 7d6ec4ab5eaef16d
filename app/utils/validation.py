"""입력 값 검증 유틸리티 모듈.

매장 등록/제보, 관리자 회원가입에서 사용하는 검증 함수를 제공합니다.
모든 함수는 검증 실패 시 `ValidationError` 를 발생시키며, 저장소를 변경하기 전에 호출됩니다.
"""

import re
from typing import Any, Iterable, Mapping

from app.utils.errors import ValidationError

ALLOWED_SHOP_TYPES = ("gacha", "figure", "claw")

LATITUDE_RANGE = (33.0, 43.0)
LONGITUDE_RANGE = (124.0, 132.0)
GACHA_MACHINE_COUNT_RANGE = (0, 1000)
SHOP_NAME_MAX_LENGTH = 100
SHOP_NON_NULL_FIELDS = ("is_24_hours", "main_series", "verification_status")
MENU_NON_NULL_FIELDS = ("code", "name", "display_order", "is_active")

PHONE_PATTERN = re.compile(r"^[0-9\-+() ]+$")
SIGNUP_PHONE_PATTERN = re.compile(r"^[0-9\-+() ]{9,20}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_shop_type(shop_type: Any):
    """매장 유형 목록을 검증합니다.

    Args:
        shop_type (Any): 매장 유형 목록

    Raises:
        ValidationError: 비어 있거나 허용되지 않은 유형이 포함된 경우
    """
    if not shop_type or not isinstance(shop_type, (list, tuple)):
        raise ValidationError(
            "Shop type is required (at least one type must be selected)"
        )
    invalid = [str(t) for t in shop_type if t not in ALLOWED_SHOP_TYPES]
    if invalid:
        raise ValidationError(
            f"Invalid shop types: {', '.join(invalid)}. "
            f"Allowed: {', '.join(ALLOWED_SHOP_TYPES)}"
        )


def validate_coordinates(latitude: float | None, longitude: float | None):
    """좌표가 국내 범위(위도 33~43, 경도 124~132)에 있는지 검증합니다."""
    if latitude is not None and not (
        LATITUDE_RANGE[0] <= latitude <= LATITUDE_RANGE[1]
    ):
        raise ValidationError("Invalid latitude for Korea (33-43)")
    if longitude is not None and not (
        LONGITUDE_RANGE[0] <= longitude <= LONGITUDE_RANGE[1]
    ):
        raise ValidationError("Invalid longitude for Korea (124-132)")


def validate_gacha_machine_count(count: int | None):
    """가챠 기계 수가 0 ~ 1000 사이인지 검증합니다."""
    if count is not None and not (
        GACHA_MACHINE_COUNT_RANGE[0] <= count <= GACHA_MACHINE_COUNT_RANGE[1]
    ):
        raise ValidationError("Gacha machine count must be between 0 and 1000")


def validate_shop_phone(phone: str | None):
    """매장 전화번호 형식을 검증합니다. 빈 값은 허용됩니다."""
    if phone and not PHONE_PATTERN.match(phone):
        raise ValidationError("Invalid phone number format")


def validate_shop_name(name: Any):
    """매장 이름이 있고 100자 이하인지 검증합니다."""
    if _is_blank(name):
        raise ValidationError("Shop name is required")
    if len(name) > SHOP_NAME_MAX_LENGTH:
        raise ValidationError("Shop name must be less than 100 characters")


def validate_not_null(patch: Mapping[str, Any], fields: Iterable[str]):
    """수정 입력에서 NOT NULL 컬럼에 명시적으로 null 이 전달되었는지 검사합니다.

    Raises:
        ValidationError: 전달된 필드 중 null 값이 있는 경우
    """
    for field in fields:
        if field in patch and patch[field] is None:
            raise ValidationError(f"{field} cannot be null")


def validate_shop_input(data: Mapping[str, Any]):
    """매장 등록/제보 입력 전체를 검증합니다.

    Args:
        data (Mapping[str, Any]): 매장 입력 데이터

    Raises:
        ValidationError: 필수 값 누락 또는 범위/형식 오류가 있는 경우
    """
    validate_shop_name(data.get("name"))
    if _is_blank(data.get("road_address")):
        raise ValidationError("Road address is required")
    if _is_blank(data.get("sido")):
        raise ValidationError("Sido (city/province) is required")
    validate_shop_type(data.get("shop_type"))
    validate_coordinates(data.get("latitude"), data.get("longitude"))
    validate_gacha_machine_count(data.get("gacha_machine_count"))
    validate_shop_phone(data.get("phone"))


def validate_shop_patch(patch: Mapping[str, Any]):
    """매장 수정 입력 중 전달된 필드만 검증합니다.

    Args:
        patch (Mapping[str, Any]): 수정할 필드 딕셔너리

    Raises:
        ValidationError: 전달된 필드 중 하나라도 규칙을 위반하는 경우
    """
    validate_not_null(patch, SHOP_NON_NULL_FIELDS)
    if "name" in patch:
        validate_shop_name(patch["name"])
    if "road_address" in patch and _is_blank(patch["road_address"]):
        raise ValidationError("Road address is required")
    if "sido" in patch and _is_blank(patch["sido"]):
        raise ValidationError("Sido (city/province) is required")
    if "shop_type" in patch:
        validate_shop_type(patch["shop_type"])
    validate_coordinates(patch.get("latitude"), patch.get("longitude"))
    validate_gacha_machine_count(patch.get("gacha_machine_count"))
    validate_shop_phone(patch.get("phone"))


def validate_email(email: str):
    """이메일 형식을 검증합니다."""
    if _is_blank(email):
        raise ValidationError("Email is required")
    if len(email) > 255 or not EMAIL_PATTERN.match(email):  # noqa: PLR2004
        raise ValidationError("Invalid email format")


def validate_password(password: str):
    """비밀번호 길이(8 ~ 72자)를 검증합니다."""
    if not password or len(password) < 8:  # noqa: PLR2004
        raise ValidationError("Password must be at least 8 characters")
    if len(password) > 72:  # noqa: PLR2004
        raise ValidationError("Password must be less than 72 characters")


def validate_full_name(full_name: str):
    """이름 길이(2 ~ 100자)를 검증합니다."""
    if _is_blank(full_name) or len(full_name.strip()) < 2:  # noqa: PLR2004
        raise ValidationError("Full name must be at least 2 characters")
    if len(full_name) > 100:  # noqa: PLR2004
        raise ValidationError("Full name must be less than 100 characters")


def validate_phone_number(phone: str | None):
    """점주 회원가입 연락처 형식(9 ~ 20자)을 검증합니다."""
    if _is_blank(phone):
        raise ValidationError("Phone number is required for owner accounts")
    if not SIGNUP_PHONE_PATTERN.match(phone):
        raise ValidationError("Invalid phone number format")
