"""이 모듈은 페이지네이션을 위한 스키마를 정의합니다.

Pydantic과 FastAPI Pagination을 사용하여 페이지네이션 메타데이터와 페이지 데이터를 포함하는 커스텀 페이지 클래스를 제공합니다.
"""

from typing import Generic, List, TypeVar

from fastapi import Query
from fastapi_pagination import Params
from fastapi_pagination.bases import AbstractPage
from pydantic import BaseModel

from app.config import Config

T = TypeVar("T")


class PageParams(Params):
    """기본 페이지 크기를 서비스 설정값으로 맞춘 페이지네이션 파라미터."""

    page: int = Query(1, ge=1, description="Page number")
    size: int = Query(
        Config.DEFAULT_PAGE_SIZE, ge=1, le=Config.MAX_PAGE_SIZE, description="Page size"
    )

    @property
    def offset(self) -> int:
        """현재 페이지의 시작 오프셋."""
        return (self.page - 1) * self.size


class MetaData(BaseModel):
    """페이지네이션 메타데이터를 나타내는 클래스.

    Attributes:
        page (int): 현재 페이지 번호.
        size (int): 페이지당 항목 수.
        total (int): 전체 항목 수.
        total_pages (int): 전체 페이지 수 (ceil(total / size)).
        has_next (bool): 다음 페이지 존재 여부.
        has_prev (bool): 이전 페이지 존재 여부.
    """

    page: int
    size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class CustomPage(AbstractPage[T], Generic[T]):
    """페이지네이션 데이터를 포함하는 커스텀 페이지 클래스.

    Attributes:
        success (bool): 성공 여부. 기본값은 True.
        meta (MetaData): 페이지네이션 메타데이터 객체.
        data (List[T]): 페이지 데이터 리스트.
    """

    success: bool = True
    meta: MetaData
    data: List[T]  # items → data로 변경

    # ✅ __params_type__을 명확하게 지정해야 AttributeError 방지됨
    __params_type__ = PageParams

    @classmethod
    def create(cls, data: List[T], total: int, params: Params) -> "CustomPage[T]":
        """주어진 데이터와 페이지네이션 파라미터를 사용하여 CustomPage 객체를 생성합니다.

        Args:
            data (List[T]): 페이지 데이터 리스트.
            total (int): 전체 항목 수.
            params (Params): 페이지네이션 파라미터 객체.

        Returns:
            CustomPage[T]: 생성된 CustomPage 객체.
        """
        total_pages = (total + params.size - 1) // params.size

        return cls(
            meta=MetaData(
                page=params.page,
                size=params.size,
                total=total,
                total_pages=total_pages,
                has_next=params.page < total_pages,
                has_prev=params.page > 1,
            ),
            data=data,  # 변경된 필드 적용
        )
