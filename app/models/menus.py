"""이 모듈은 관리자 메뉴(Menu)와 관리자별 메뉴 권한(AdminMenuPermission) 모델을 정의합니다."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import NonEscapedJSON, new_uuid, utcnow


class Menu(Base):
    """관리자 화면의 메뉴 노드를 저장하는 클래스

    parent_id 로 트리를 구성하며, 형제 노드는 display_order 오름차순으로 정렬됩니다.

    Attributes:
        id (str): 메뉴 ID
        code (str): 메뉴 코드 (유일)
        name (str): 메뉴 이름
        parent_id (Optional[str]): 상위 메뉴 ID
        path (Optional[str]): 프론트엔드 라우트 경로
        icon (Optional[str]): 아이콘 이름
        display_order (int): 형제 노드 사이의 정렬 순서
        is_active (bool): 활성 여부 (소프트 삭제 시 False)
        menu_metadata (Optional[dict]): 부가 정보 (DB 컬럼명은 metadata)
    """

    __tablename__ = "menus"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    parent_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    menu_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata", NonEscapedJSON, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    __table_args__ = (
        Index("menus_parent_id_index", "parent_id"),
        Index("menus_display_order_index", "display_order"),
    )


class AdminMenuPermission(Base):
    """관리자별로 부여된 메뉴 접근 권한을 저장하는 클래스

    menu_id 에 외래 키를 두지 않으므로, 메뉴가 영구 삭제되면 남은 권한 행은 효력이 없어집니다.

    Attributes:
        id (str): 권한 ID
        admin_id (str): 권한을 받은 관리자 ID
        menu_id (str): 메뉴 ID
        granted_by (Optional[str]): 권한을 부여한 super_admin ID
        granted_at (datetime): 권한 부여 시각
    """

    __tablename__ = "admin_menu_permissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    admin_id: Mapped[str] = mapped_column(String(36), nullable=False)
    menu_id: Mapped[str] = mapped_column(String(36), nullable=False)
    granted_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        UniqueConstraint("admin_id", "menu_id", name="admin_menu_permissions_unique"),
        Index("admin_menu_permissions_admin_id_index", "admin_id"),
    )
