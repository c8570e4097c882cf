"""Pagination, search, page-result and bulk-request models shared by every repository."""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from productivity.models.enums import SortOrder

T = TypeVar("T")


class PaginationOptions(BaseModel):
    """Which slice of a listing to return and in what order."""
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, gt=0)
    sort_by: str = "created_at"
    sort_order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class SearchOptions(BaseModel):
    """Free-text query plus field filters; ``None`` filter values are ignored."""
    query: Optional[str] = None
    filters: dict[str, Any] = Field(default_factory=dict)


class Page(BaseModel, Generic[T]):
    """One page of a listing."""
    data: list[T] = Field(default_factory=list)
    total: int = 0
    has_more: bool = False


class BulkUpdateItem(BaseModel):
    """One entry of a bulk update; ``data`` is validated against the entity's update model."""
    id: str
    data: dict[str, Any] = Field(default_factory=dict)


class BulkDelete(BaseModel):
    ids: list[str] = Field(default_factory=list)
