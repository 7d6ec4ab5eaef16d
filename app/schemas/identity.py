"""이 모듈은 요청마다 계산되는 사용자 신원(ResolvedIdentity) 스키마를 정의합니다.

관리자 계정과 일반 사용자 계정은 `account_class` 로 구분되는 태그드 유니온으로 표현되므로,
관리자 클래스에 general_user 역할이 붙는 식의 섞인 신원은 만들 수 없습니다.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class Role(str, Enum):
    """사용자 역할"""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    OWNER = "owner"
    GENERAL_USER = "general_user"


ADMIN_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})


class VerifiedIdentity(BaseModel):
    """인증 서비스가 토큰을 검증한 뒤 돌려주는 외부 신원.

    Attributes:
        id (str): 인증 서비스의 사용자 ID
        email (Optional[str]): 이메일
    """

    id: str
    email: Optional[str] = None


class AdministrativeIdentity(BaseModel):
    """관리자 계정(super_admin, admin, owner)으로 확인된 신원."""

    account_class: Literal["administrative"] = "administrative"
    id: str
    email: Optional[str] = None
    role: Role
    status: str
    approval_status: str
    full_name: Optional[str] = None

    @field_validator("role")
    @classmethod
    def check_administrative_role(cls, value: Role) -> Role:
        """관리자 계정에는 general_user 역할을 붙일 수 없습니다."""
        if value == Role.GENERAL_USER:
            raise ValueError("administrative identity cannot have general_user role")
        return value


class GeneralIdentity(BaseModel):
    """일반 사용자 계정으로 확인된 신원."""

    account_class: Literal["general"] = "general"
    id: str
    email: Optional[str] = None
    role: Role = Role.GENERAL_USER
    status: str
    nickname: Optional[str] = None
    full_name: Optional[str] = None

    @field_validator("role")
    @classmethod
    def check_general_role(cls, value: Role) -> Role:
        """일반 사용자 계정의 역할은 항상 general_user 입니다."""
        if value != Role.GENERAL_USER:
            raise ValueError("general identity must have general_user role")
        return value


Identity = Union[AdministrativeIdentity, GeneralIdentity]

ResolvedIdentity = Annotated[
    Union[AdministrativeIdentity, GeneralIdentity],
    Field(discriminator="account_class"),
]
