"""이 모듈은 SQLAlchemy를 사용하여 데이터베이스 테이블 간의 관계를 정의합니다.

특히, Shop과 Tag 사이의 Many-to-Many 관계를 정의하는 테이블을 포함합니다.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String, Table

from app.database import Base
from app.models.types import utcnow

# Shop과 Tag 사이의 Many-to-Many 관계를 정의하는 테이블
shop_tags = Table(
    "shop_tags",
    Base.metadata,
    Column(
        "shop_id",
        String(36),
        ForeignKey("shops.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        String(36),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("created_by", String(36), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
)
