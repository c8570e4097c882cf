"""Query-parameter dependencies shared by the listing routes."""

from typing import Annotated

from fastapi import Depends, Query

from productivity.config import settings
from productivity.models import PaginationOptions, SortOrder


def pagination_params(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(gt=0, le=100)] = settings.DEFAULT_PAGE_SIZE,
    sort_by: str = "created_at",
    sort_order: SortOrder = SortOrder.DESC,
) -> PaginationOptions:
    return PaginationOptions(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


PaginationDep = Annotated[PaginationOptions, Depends(pagination_params)]
