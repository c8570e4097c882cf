"""
Unified API facade over the domain repositories.

Each method calls one repository operation. Whatever the repository raises
is logged under a ``<Class>.<method>`` tag and replaced by an ``ApiError``
carrying one fixed message for that operation. The original exception stays
attached as ``__cause__`` and decides the HTTP status.
"""

import functools
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ValidationError

from productivity.errors import NotFoundError, UnauthenticatedError, ValidationFailure
from productivity.logging import get_logger
from productivity.models import (
    AttendeeCreate,
    AttendeeStatus,
    BulkUpdateItem,
    CategoryUpdate,
    EventFilters,
    EventUpdate,
    NoteFilters,
    NoteUpdate,
    PaginationOptions,
    ReminderCreate,
    SearchOptions,
    SubtaskCreate,
    SubtaskUpdate,
    TodoFilters,
    TodoStatus,
    TodoUpdate,
)
from productivity.repositories.categories import CategoryRepository
from productivity.repositories.events import EventRepository
from productivity.repositories.notes import NoteRepository
from productivity.repositories.todos import TodoRepository

logger = get_logger("services.facade")


class ApiError(Exception):
    """Facade-level failure with a caller-facing message and an HTTP status."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def status_code_for(error: BaseException) -> int:
    if isinstance(error, ApiError):
        return error.status_code
    if isinstance(error, UnauthenticatedError):
        return 401
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, (ValidationFailure, ValidationError)):
        return 400
    return 500


def api_operation(message: str):
    """Wrap a facade coroutine. ``message`` may use ``{noun}`` and ``{nouns}``."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except Exception as e:
                logger.error(f"{type(self).__name__}.{func.__name__} error: {e}")
                text = message.format(
                    noun=getattr(self, "noun", ""), nouns=getattr(self, "nouns", "")
                )
                raise ApiError(text, status_code_for(e)) from e

        return wrapper

    return decorator


def _changes(data: BaseModel) -> dict[str, Any]:
    return data.model_dump(exclude_unset=True)


class EntityAPI:
    """Operations every entity supports; subclasses add their domain operations."""

    noun = "record"
    nouns = "records"
    update_model: type[BaseModel]

    def __init__(self, repository):
        self.repository = repository
        self.base = repository.base

    @api_operation("Failed to create {noun}")
    async def create(self, data: BaseModel):
        return await self.base.create(data.model_dump())

    @api_operation("Failed to fetch {noun}")
    async def get_by_id(self, record_id: str):
        return await self.base.get_by_id(record_id)

    @api_operation("Failed to fetch {nouns}")
    async def get_all(
        self,
        pagination: PaginationOptions | None = None,
        search: SearchOptions | None = None,
    ):
        return await self.base.get_all(pagination, search)

    @api_operation("Failed to update {noun}")
    async def update(self, record_id: str, data: BaseModel):
        return await self.base.update(record_id, _changes(data))

    @api_operation("Failed to delete {noun}")
    async def delete(self, record_id: str) -> None:
        await self.base.delete(record_id)

    @api_operation("Failed to fetch {noun} statistics")
    async def get_stats(self):
        return await self.base.get_stats()

    @api_operation("Failed to create {nouns}")
    async def bulk_create(self, items: list[BaseModel]):
        return await self.base.bulk_create([item.model_dump() for item in items])

    @api_operation("Failed to update {nouns}")
    async def bulk_update(self, items: list[BulkUpdateItem]):
        updates = [
            (item.id, _changes(self.update_model.model_validate(item.data))) for item in items
        ]
        return await self.base.bulk_update(updates)

    @api_operation("Failed to delete {nouns}")
    async def bulk_delete(self, record_ids: list[str]) -> int:
        return await self.base.bulk_delete(record_ids)


class TodoAPI(EntityAPI):
    noun = "todo"
    nouns = "todos"
    update_model = TodoUpdate
    repository: TodoRepository

    @api_operation("Failed to fetch filtered todos")
    async def get_with_filters(
        self,
        filters: TodoFilters | None = None,
        pagination: PaginationOptions | None = None,
        query: str | None = None,
    ):
        return await self.repository.get_with_filters(filters, pagination, query)

    @api_operation("Failed to fetch todos by status")
    async def get_by_status(self, status: TodoStatus):
        return await self.repository.get_by_status(status)

    @api_operation("Failed to fetch todos by category")
    async def get_by_category(self, category_id: str):
        return await self.repository.get_by_category(category_id)

    @api_operation("Failed to fetch overdue todos")
    async def get_overdue(self):
        return await self.repository.get_overdue()

    @api_operation("Failed to fetch todos due today")
    async def get_due_today(self):
        return await self.repository.get_due_today()

    @api_operation("Failed to fetch assigned todos")
    async def get_assigned(self):
        return await self.repository.get_assigned()

    @api_operation("Failed to complete todo")
    async def complete(self, todo_id: str):
        return await self.repository.complete(todo_id)

    @api_operation("Failed to update todo status")
    async def update_status(self, todo_id: str, status: TodoStatus):
        return await self.repository.update_status(todo_id, status)

    @api_operation("Failed to toggle todo archive status")
    async def toggle_archive(self, todo_id: str):
        return await self.repository.toggle_archive(todo_id)

    @api_operation("Failed to add subtask")
    async def add_subtask(self, todo_id: str, data: SubtaskCreate):
        return await self.repository.add_subtask(todo_id, data)

    @api_operation("Failed to update subtask")
    async def update_subtask(self, todo_id: str, subtask_id: str, data: SubtaskUpdate):
        return await self.repository.update_subtask(todo_id, subtask_id, data)

    @api_operation("Failed to remove subtask")
    async def remove_subtask(self, todo_id: str, subtask_id: str):
        return await self.repository.remove_subtask(todo_id, subtask_id)

    @api_operation("Failed to duplicate todo")
    async def duplicate(self, todo_id: str):
        return await self.repository.duplicate(todo_id)


class NoteAPI(EntityAPI):
    noun = "note"
    nouns = "notes"
    update_model = NoteUpdate
    repository: NoteRepository

    @api_operation("Failed to fetch filtered notes")
    async def get_with_filters(
        self,
        filters: NoteFilters | None = None,
        pagination: PaginationOptions | None = None,
        query: str | None = None,
    ):
        return await self.repository.get_with_filters(filters, pagination, query)

    @api_operation("Failed to fetch pinned notes")
    async def get_pinned(self):
        return await self.repository.get_pinned()

    @api_operation("Failed to fetch recent notes")
    async def get_recent(self, limit: int = 10):
        return await self.repository.get_recent(limit)

    @api_operation("Failed to fetch shared notes")
    async def get_shared(self):
        return await self.repository.get_shared()

    @api_operation("Failed to search notes")
    async def search(self, text: str, pagination: PaginationOptions | None = None):
        return await self.repository.search(text, pagination)

    @api_operation("Failed to fetch notes by category")
    async def get_by_category(self, category_id: str):
        return await self.repository.get_by_category(category_id)

    @api_operation("Failed to fetch notes by tags")
    async def get_by_tags(self, tags: list[str]):
        return await self.repository.get_by_tags(tags)

    @api_operation("Failed to fetch note tags")
    async def get_all_tags(self):
        return await self.repository.get_all_tags()

    @api_operation("Failed to toggle note pin status")
    async def toggle_pin(self, note_id: str):
        return await self.repository.toggle_pin(note_id)

    @api_operation("Failed to toggle note archive status")
    async def toggle_archive(self, note_id: str):
        return await self.repository.toggle_archive(note_id)

    @api_operation("Failed to share note")
    async def share(self, note_id: str, user_ids: list[str]):
        return await self.repository.share(note_id, user_ids)

    @api_operation("Failed to unshare note")
    async def unshare(self, note_id: str, user_ids: list[str]):
        return await self.repository.unshare(note_id, user_ids)

    @api_operation("Failed to duplicate note")
    async def duplicate(self, note_id: str):
        return await self.repository.duplicate(note_id)


class EventAPI(EntityAPI):
    noun = "event"
    nouns = "events"
    update_model = EventUpdate
    repository: EventRepository

    @api_operation("Failed to fetch filtered events")
    async def get_with_filters(
        self,
        filters: EventFilters | None = None,
        pagination: PaginationOptions | None = None,
        query: str | None = None,
    ):
        return await self.repository.get_with_filters(filters, pagination, query)

    @api_operation("Failed to fetch events by date range")
    async def get_by_date_range(
        self, start: datetime, end: datetime, pagination: PaginationOptions | None = None
    ):
        return await self.repository.get_by_date_range(start, end, pagination)

    @api_operation("Failed to fetch upcoming events")
    async def get_upcoming(self, limit: int = 10):
        return await self.repository.get_upcoming(limit)

    @api_operation("Failed to fetch today's events")
    async def get_todays(self):
        return await self.repository.get_todays()

    @api_operation("Failed to fetch this week's events")
    async def get_this_weeks(self):
        return await self.repository.get_this_weeks()

    @api_operation("Failed to fetch events by category")
    async def get_by_category(self, category_id: str):
        return await self.repository.get_by_category(category_id)

    @api_operation("Failed to fetch conflicting events")
    async def get_conflicting(self, start: datetime, end: datetime, exclude_id: str | None = None):
        return await self.repository.get_conflicting(start, end, exclude_id)

    @api_operation("Failed to fetch event occurrences")
    async def get_occurrences(self, window_start: datetime, window_end: datetime):
        return await self.repository.get_occurrences(window_start, window_end)

    @api_operation("Failed to cancel event")
    async def cancel(self, event_id: str):
        return await self.repository.cancel(event_id)

    @api_operation("Failed to restore event")
    async def restore(self, event_id: str):
        return await self.repository.restore(event_id)

    @api_operation("Failed to add attendee")
    async def add_attendee(self, event_id: str, data: AttendeeCreate):
        return await self.repository.add_attendee(event_id, data)

    @api_operation("Failed to remove attendee")
    async def remove_attendee(self, event_id: str, attendee_id: str):
        return await self.repository.remove_attendee(event_id, attendee_id)

    @api_operation("Failed to update attendee status")
    async def update_attendee_status(self, event_id: str, attendee_id: str, status: AttendeeStatus):
        return await self.repository.update_attendee_status(event_id, attendee_id, status)

    @api_operation("Failed to add reminder")
    async def add_reminder(self, event_id: str, data: ReminderCreate):
        return await self.repository.add_reminder(event_id, data)

    @api_operation("Failed to remove reminder")
    async def remove_reminder(self, event_id: str, reminder_id: str):
        return await self.repository.remove_reminder(event_id, reminder_id)

    @api_operation("Failed to duplicate event")
    async def duplicate(self, event_id: str, new_start: datetime | None = None):
        return await self.repository.duplicate(event_id, new_start)


class CategoryAPI(EntityAPI):
    noun = "category"
    nouns = "categories"
    update_model = CategoryUpdate
    repository: CategoryRepository

    @api_operation("Failed to delete category")
    async def delete(self, category_id: str) -> None:
        await self.repository.delete(category_id)

    @api_operation("Failed to delete categories")
    async def bulk_delete(self, record_ids: list[str]) -> int:
        return await self.repository.bulk_delete(record_ids)

    @api_operation("Failed to fetch category usage")
    async def get_usage(self):
        return await self.repository.get_usage()

    @api_operation("Failed to check if category can be deleted")
    async def can_delete(self, category_id: str):
        return await self.repository.can_delete(category_id)

    @api_operation("Failed to delete category with reassignment")
    async def delete_with_reassignment(self, category_id: str, reassign_to: str | None = None) -> None:
        await self.repository.delete_with_reassignment(category_id, reassign_to)
