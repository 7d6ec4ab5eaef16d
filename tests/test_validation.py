import pytest

from app.utils.errors import ValidationError
from app.utils.validation import (
    validate_coordinates,
    validate_email,
    validate_full_name,
    validate_gacha_machine_count,
    validate_not_null,
    validate_password,
    validate_phone_number,
    validate_shop_input,
    validate_shop_patch,
    validate_shop_type,
)


def shop_input(**overrides):
    data = {
        "name": "가챠샵",
        "shop_type": ["gacha", "claw"],
        "road_address": "부산 해운대구 해운대로 1",
        "sido": "부산",
        "latitude": 35.16,
        "longitude": 129.16,
    }
    data.update(overrides)
    return data


def test_valid_shop_input_passes():
    validate_shop_input(shop_input())


@pytest.mark.parametrize("shop_type", [None, [], "gacha"])
def test_shop_type_is_required(shop_type):
    with pytest.raises(ValidationError, match="Shop type is required"):
        validate_shop_type(shop_type)


def test_unknown_shop_type_lists_allowed_values():
    with pytest.raises(ValidationError) as exc_info:
        validate_shop_type(["gacha", "arcade"])

    assert exc_info.value.detail == "Invalid shop types: arcade. Allowed: gacha, figure, claw"
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize(
    "latitude, longitude, message",
    [
        (32.99, 127.0, "latitude"),
        (43.01, 127.0, "latitude"),
        (37.5, 123.99, "longitude"),
        (37.5, 132.01, "longitude"),
    ],
)
def test_coordinates_outside_korea_are_rejected(latitude, longitude, message):
    with pytest.raises(ValidationError, match=message):
        validate_coordinates(latitude, longitude)


def test_coordinate_bounds_are_inclusive():
    validate_coordinates(33, 124)
    validate_coordinates(43, 132)
    validate_coordinates(None, None)


@pytest.mark.parametrize("count", [-1, 1001])
def test_gacha_machine_count_range(count):
    with pytest.raises(ValidationError, match="between 0 and 1000"):
        validate_gacha_machine_count(count)


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("name", "  ", "Shop name is required"),
        ("name", "가" * 101, "less than 100 characters"),
        ("road_address", None, "Road address is required"),
        ("sido", "", "Sido"),
        ("phone", "02-123-abcd", "Invalid phone number format"),
    ],
)
def test_shop_input_field_rules(field, value, message):
    with pytest.raises(ValidationError, match=message):
        validate_shop_input(shop_input(**{field: value}))


def test_shop_patch_checks_only_present_fields():
    validate_shop_patch({"phone": "02-333-4444"})
    validate_shop_patch({})
    with pytest.raises(ValidationError, match="latitude"):
        validate_shop_patch({"latitude": 50.0})
    with pytest.raises(ValidationError, match="Shop type is required"):
        validate_shop_patch({"shop_type": []})


def test_null_is_rejected_only_for_listed_fields():
    validate_not_null({"description": None}, ("name",))
    validate_not_null({}, ("name",))
    with pytest.raises(ValidationError, match="name cannot be null"):
        validate_not_null({"name": None}, ("name",))


@pytest.mark.parametrize("field", ["is_24_hours", "main_series", "verification_status"])
def test_shop_patch_rejects_null_for_required_columns(field):
    with pytest.raises(ValidationError, match=f"{field} cannot be null"):
        validate_shop_patch({field: None})


def test_sign_up_rules():
    validate_email("owner@gachastore.kr")
    validate_password("s3cret-pass")
    validate_full_name("김점주")
    validate_phone_number("010-1234-5678")

    with pytest.raises(ValidationError, match="Invalid email format"):
        validate_email("owner@localhost")
    with pytest.raises(ValidationError, match="at least 8 characters"):
        validate_password("short")
    with pytest.raises(ValidationError, match="less than 72 characters"):
        validate_password("x" * 73)
    with pytest.raises(ValidationError, match="at least 2 characters"):
        validate_full_name("김")
    with pytest.raises(ValidationError, match="required for owner accounts"):
        validate_phone_number(None)
