"""Todo repository: filtering, due-date views, completion and subtasks."""

import math
from typing import Any

from productivity.cache.client import CacheManager
from productivity.database.store import Query, Store, utc_now
from productivity.errors import NotFoundError
from productivity.identity import IdentityResolver
from productivity.models import (
    PaginationOptions,
    SearchOptions,
    Page,
    Subtask,
    SubtaskCreate,
    SubtaskUpdate,
    Todo,
    TodoFilters,
    TodoPriority,
    TodoStats,
    TodoStatus,
)
from productivity.repositories.base import Repository, apply_equality_filters
from productivity.repositories.dates import day_bounds

SEARCH_COLUMNS = ("title", "description")


def calculate_todo_stats(todos: list[Todo]) -> TodoStats:
    now = utc_now()
    total = len(todos)
    completed = sum(1 for t in todos if t.status == TodoStatus.COMPLETED)
    return TodoStats(
        total=total,
        completed=completed,
        in_progress=sum(1 for t in todos if t.status == TodoStatus.IN_PROGRESS),
        overdue=sum(
            1 for t in todos
            if t.due_date and t.due_date < now and t.status != TodoStatus.COMPLETED
        ),
        by_priority={p.value: sum(1 for t in todos if t.priority == p) for p in TodoPriority},
        completion_rate=math.floor(completed * 100 / total + 0.5) if total else 0,
    )


def apply_todo_filters(query: Query, filters: dict[str, Any]) -> Query:
    filters = dict(filters)
    due_from = filters.pop("due_date_from", None)
    due_to = filters.pop("due_date_to", None)
    apply_equality_filters(query, filters)
    if due_from is not None:
        query.gte("due_date", due_from)
    if due_to is not None:
        query.lte("due_date", due_to)
    return query


def prepare_todo_create(values: dict[str, Any]) -> dict[str, Any]:
    if values.get("status") == TodoStatus.COMPLETED:
        values["completed_at"] = values.get("completed_at") or utc_now()
    else:
        values["completed_at"] = None
    return values


def prepare_todo_update(current: Todo, changes: dict[str, Any]) -> dict[str, Any]:
    """Keep ``completed_at`` set exactly when the todo is completed."""
    status = changes.get("status", current.status)
    if status == TodoStatus.COMPLETED:
        kept = current.completed_at if current.status == TodoStatus.COMPLETED else None
        changes["completed_at"] = changes.get("completed_at") or kept or utc_now()
    else:
        changes["completed_at"] = None
    return changes


class TodoRepository:
    def __init__(
        self,
        store: Store,
        cache: CacheManager,
        identity: IdentityResolver,
        batch_size: int = 10,
    ):
        self.base: Repository[Todo, TodoStats] = Repository(
            store=store,
            cache=cache,
            identity=identity,
            table="todos",
            cache_prefix="todo",
            model=Todo,
            search_columns=SEARCH_COLUMNS,
            calculate_stats=calculate_todo_stats,
            stats_model=TodoStats,
            apply_filters=apply_todo_filters,
            prepare_create=prepare_todo_create,
            prepare_update=prepare_todo_update,
            batch_size=batch_size,
        )

    async def get_with_filters(
        self,
        filters: TodoFilters | None = None,
        pagination: PaginationOptions | None = None,
        query: str | None = None,
    ) -> Page[Todo]:
        """Filtered listing; archived todos are hidden unless asked for."""
        values = (filters or TodoFilters()).model_dump(exclude_none=True)
        values.setdefault("is_archived", False)
        return await self.base.get_all(pagination, SearchOptions(query=query, filters=values))

    async def get_by_status(self, status: TodoStatus) -> list[Todo]:
        page = await self.get_with_filters(TodoFilters(status=status))
        return page.data

    async def get_by_category(self, category_id: str) -> list[Todo]:
        page = await self.get_with_filters(TodoFilters(category_id=category_id))
        return page.data

    async def get_overdue(self) -> list[Todo]:
        return await self.base.find(
            Query()
            .lt("due_date", utc_now())
            .neq("status", TodoStatus.COMPLETED)
            .eq("is_archived", False)
            .order("due_date")
        )

    async def get_due_today(self) -> list[Todo]:
        start, end = day_bounds(utc_now())
        return await self.base.find(
            Query()
            .gte("due_date", start)
            .lte("due_date", end)
            .neq("status", TodoStatus.COMPLETED)
            .eq("is_archived", False)
            .order("due_date")
        )

    async def get_assigned(self) -> list[Todo]:
        """Non-archived todos assigned to the caller, whoever created them."""
        user_id = await self.base.current_owner()
        return await self.base.find(
            Query().eq("assigned_to", user_id).eq("is_archived", False).order("due_date"),
            owner_scoped=False,
        )

    async def complete(self, todo_id: str) -> Todo:
        """Mark a todo completed; an already completed todo keeps its original ``completed_at``."""
        return await self.base.update(todo_id, {"status": TodoStatus.COMPLETED})

    async def update_status(self, todo_id: str, status: TodoStatus) -> Todo:
        return await self.base.update(todo_id, {"status": status})

    async def toggle_archive(self, todo_id: str) -> Todo:
        return await self.base.toggle(todo_id, "is_archived")

    async def add_subtask(self, todo_id: str, data: SubtaskCreate) -> Todo:
        todo = await self.base.require(todo_id)
        subtasks = [*todo.subtasks, Subtask(**data.model_dump())]
        return await self._write_subtasks(todo_id, subtasks)

    async def update_subtask(self, todo_id: str, subtask_id: str, data: SubtaskUpdate) -> Todo:
        todo = await self.base.require(todo_id)
        self._find_subtask(todo, subtask_id)
        changes = data.model_dump(exclude_none=True)
        subtasks = [
            s.model_copy(update={**changes, "updated_at": utc_now()}) if s.id == subtask_id else s
            for s in todo.subtasks
        ]
        return await self._write_subtasks(todo_id, subtasks)

    async def remove_subtask(self, todo_id: str, subtask_id: str) -> Todo:
        todo = await self.base.require(todo_id)
        self._find_subtask(todo, subtask_id)
        subtasks = [s for s in todo.subtasks if s.id != subtask_id]
        return await self._write_subtasks(todo_id, subtasks)

    def _find_subtask(self, todo: Todo, subtask_id: str) -> Subtask:
        for subtask in todo.subtasks:
            if subtask.id == subtask_id:
                return subtask
        raise NotFoundError(f"Subtask {subtask_id} not found on todo {todo.id}")

    async def _write_subtasks(self, todo_id: str, subtasks: list[Subtask]) -> Todo:
        return await self.base.update(todo_id, {"subtasks": [s.model_dump() for s in subtasks]})

    async def duplicate(self, todo_id: str) -> Todo:
        """Copy a todo as a fresh open task with unchecked subtasks."""
        source = await self.base.require(todo_id)
        return await self.base.create({
            "title": f"{source.title} (Copy)",
            "description": source.description,
            "category_id": source.category_id,
            "due_date": source.due_date,
            "priority": source.priority,
            "estimated_duration": source.estimated_duration,
            "tags": list(source.tags),
            "attachments": list(source.attachments),
            "subtasks": [Subtask(title=s.title).model_dump() for s in source.subtasks],
            "assigned_to": source.assigned_to,
        })
