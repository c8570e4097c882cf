"""Todo routes."""

from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException

from productivity.dependencies import TodoAPIDep
from productivity.models import (
    BulkDelete,
    BulkUpdateItem,
    Page,
    SubtaskCreate,
    SubtaskUpdate,
    Todo,
    TodoCreate,
    TodoFilters,
    TodoPriority,
    TodoStats,
    TodoStatus,
    TodoUpdate,
)
from productivity.routers.params import PaginationDep

router = APIRouter()


def todo_filters(
    status: Optional[TodoStatus] = None,
    priority: Optional[TodoPriority] = None,
    category_id: Optional[str] = None,
    is_archived: Optional[bool] = None,
    due_date_from: Optional[datetime] = None,
    due_date_to: Optional[datetime] = None,
    assigned_to: Optional[str] = None,
) -> TodoFilters:
    return TodoFilters(
        status=status,
        priority=priority,
        category_id=category_id,
        is_archived=is_archived,
        due_date_from=due_date_from,
        due_date_to=due_date_to,
        assigned_to=assigned_to,
    )


@router.get("", response_model=Page[Todo])
async def list_todos(
    api: TodoAPIDep,
    pagination: PaginationDep,
    filters: Annotated[TodoFilters, Depends(todo_filters)],
    q: Optional[str] = None,
):
    return await api.get_with_filters(filters, pagination, q)


@router.post("", response_model=Todo, status_code=201)
async def create_todo(body: TodoCreate, api: TodoAPIDep):
    return await api.create(body)


@router.get("/stats", response_model=TodoStats)
async def get_todo_stats(api: TodoAPIDep):
    return await api.get_stats()


@router.get("/overdue", response_model=list[Todo])
async def get_overdue_todos(api: TodoAPIDep):
    return await api.get_overdue()


@router.get("/due-today", response_model=list[Todo])
async def get_todos_due_today(api: TodoAPIDep):
    return await api.get_due_today()


@router.get("/assigned", response_model=list[Todo])
async def get_assigned_todos(api: TodoAPIDep):
    return await api.get_assigned()


@router.get("/status/{status}", response_model=list[Todo])
async def get_todos_by_status(status: TodoStatus, api: TodoAPIDep):
    return await api.get_by_status(status)


@router.get("/category/{category_id}", response_model=list[Todo])
async def get_todos_by_category(category_id: str, api: TodoAPIDep):
    return await api.get_by_category(category_id)


@router.post("/bulk", response_model=list[Todo], status_code=201)
async def bulk_create_todos(body: list[TodoCreate], api: TodoAPIDep):
    return await api.bulk_create(body)


@router.put("/bulk", response_model=list[Todo])
async def bulk_update_todos(body: list[BulkUpdateItem], api: TodoAPIDep):
    return await api.bulk_update(body)


@router.post("/bulk-delete")
async def bulk_delete_todos(body: BulkDelete, api: TodoAPIDep):
    deleted = await api.bulk_delete(body.ids)
    return {"status": "deleted", "count": deleted}


@router.get("/{todo_id}", response_model=Todo)
async def get_todo(todo_id: str, api: TodoAPIDep):
    todo = await api.get_by_id(todo_id)
    if not todo:
        raise HTTPException(404, "Todo not found")
    return todo


@router.put("/{todo_id}", response_model=Todo)
async def update_todo(todo_id: str, body: TodoUpdate, api: TodoAPIDep):
    return await api.update(todo_id, body)


@router.delete("/{todo_id}")
async def delete_todo(todo_id: str, api: TodoAPIDep):
    await api.delete(todo_id)
    return {"status": "deleted", "id": todo_id}


@router.post("/{todo_id}/complete", response_model=Todo)
async def complete_todo(todo_id: str, api: TodoAPIDep):
    return await api.complete(todo_id)


@router.put("/{todo_id}/status", response_model=Todo)
async def update_todo_status(todo_id: str, status: TodoStatus, api: TodoAPIDep):
    return await api.update_status(todo_id, status)


@router.post("/{todo_id}/archive", response_model=Todo)
async def toggle_todo_archive(todo_id: str, api: TodoAPIDep):
    return await api.toggle_archive(todo_id)


@router.post("/{todo_id}/duplicate", response_model=Todo, status_code=201)
async def duplicate_todo(todo_id: str, api: TodoAPIDep):
    return await api.duplicate(todo_id)


@router.post("/{todo_id}/subtasks", response_model=Todo, status_code=201)
async def add_subtask(todo_id: str, body: SubtaskCreate, api: TodoAPIDep):
    return await api.add_subtask(todo_id, body)


@router.put("/{todo_id}/subtasks/{subtask_id}", response_model=Todo)
async def update_subtask(todo_id: str, subtask_id: str, body: SubtaskUpdate, api: TodoAPIDep):
    return await api.update_subtask(todo_id, subtask_id, body)


@router.delete("/{todo_id}/subtasks/{subtask_id}", response_model=Todo)
async def remove_subtask(todo_id: str, subtask_id: str, api: TodoAPIDep):
    return await api.remove_subtask(todo_id, subtask_id)
