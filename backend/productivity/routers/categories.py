"""Category routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException

from productivity.dependencies import CategoryAPIDep
from productivity.models import (
    BulkDelete,
    BulkUpdateItem,
    Category,
    CategoryCreate,
    CategoryDeletability,
    CategoryStats,
    CategoryUpdate,
    CategoryUsage,
    Page,
    SearchOptions,
)
from productivity.routers.params import PaginationDep

router = APIRouter()


@router.get("", response_model=Page[Category])
async def list_categories(api: CategoryAPIDep, pagination: PaginationDep, q: Optional[str] = None):
    return await api.get_all(pagination, SearchOptions(query=q))


@router.post("", response_model=Category, status_code=201)
async def create_category(body: CategoryCreate, api: CategoryAPIDep):
    return await api.create(body)


@router.get("/stats", response_model=CategoryStats)
async def get_category_stats(api: CategoryAPIDep):
    return await api.get_stats()


@router.get("/usage", response_model=list[CategoryUsage])
async def get_category_usage(api: CategoryAPIDep):
    return await api.get_usage()


@router.post("/bulk", response_model=list[Category], status_code=201)
async def bulk_create_categories(body: list[CategoryCreate], api: CategoryAPIDep):
    return await api.bulk_create(body)


@router.put("/bulk", response_model=list[Category])
async def bulk_update_categories(body: list[BulkUpdateItem], api: CategoryAPIDep):
    return await api.bulk_update(body)


@router.post("/bulk-delete")
async def bulk_delete_categories(body: BulkDelete, api: CategoryAPIDep):
    deleted = await api.bulk_delete(body.ids)
    return {"status": "deleted", "count": deleted}


@router.get("/{category_id}", response_model=Category)
async def get_category(category_id: str, api: CategoryAPIDep):
    category = await api.get_by_id(category_id)
    if not category:
        raise HTTPException(404, "Category not found")
    return category


@router.put("/{category_id}", response_model=Category)
async def update_category(category_id: str, body: CategoryUpdate, api: CategoryAPIDep):
    return await api.update(category_id, body)


@router.get("/{category_id}/can-delete", response_model=CategoryDeletability)
async def can_delete_category(category_id: str, api: CategoryAPIDep):
    return await api.can_delete(category_id)


@router.delete("/{category_id}")
async def delete_category(
    category_id: str,
    api: CategoryAPIDep,
    reassign: bool = False,
    reassign_to: Optional[str] = None,
):
    """Plain delete refuses referenced categories; ``reassign`` moves or clears references first."""
    if reassign or reassign_to:
        await api.delete_with_reassignment(category_id, reassign_to)
    else:
        await api.delete(category_id)
    return {"status": "deleted", "id": category_id}
