"""이 모듈은 관리자 메뉴와 메뉴 권한 스키마를 정의합니다."""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.schemas.base import Timestamp


class MenuCreate(BaseModel):
    """메뉴 생성 요청 본문."""

    code: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    path: Optional[str] = None
    icon: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    metadata: Optional[Dict[str, Any]] = None


class MenuUpdate(BaseModel):
    """메뉴 수정 요청 본문. 전달된 필드만 반영됩니다."""

    code: Optional[str] = Field(default=None, min_length=1, max_length=100)
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    path: Optional[str] = None
    icon: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None


class MenuResponse(BaseModel):
    """메뉴 단건 응답."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    code: str
    name: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    path: Optional[str] = None
    icon: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    metadata: Optional[Dict[str, Any]] = Field(
        default=None, validation_alias=AliasChoices("menu_metadata", "metadata")
    )
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None


class MenuNode(MenuResponse):
    """하위 메뉴를 포함하는 트리 노드."""

    children: List[MenuNode] = Field(default_factory=list)


class PermissionReplaceRequest(BaseModel):
    """관리자 메뉴 권한 교체 요청 본문.

    Attributes:
        menu_ids (List[str]): 부여할 메뉴 ID 목록. 존재하지 않는 ID는 무시됩니다.
    """

    menu_ids: List[str] = Field(default_factory=list)


class MenuPermissionResponse(BaseModel):
    """관리자 메뉴 권한 응답."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    admin_id: str
    menu_id: str
    granted_by: Optional[str] = None
    granted_at: Optional[Timestamp] = None
