import asyncio
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from productivity.database.store import StoreError
from productivity.errors import NotFoundError, StoreFailure, UnauthenticatedError, ValidationFailure
from productivity.models import (
    BulkUpdateItem,
    CategoryCreate,
    EventCreate,
    NoteUpdate,
    PaginationOptions,
    TodoCreate,
    TodoStatus,
    TodoUpdate,
)
from productivity.services.facade import ApiError, api_operation, status_code_for


@pytest.mark.parametrize(
    "error, status",
    [
        (ApiError("teapot", 418), 418),
        (UnauthenticatedError(), 401),
        (NotFoundError("gone"), 404),
        (ValidationFailure("bad"), 400),
        (StoreFailure("fetch todos"), 500),
        (RuntimeError("boom"), 500),
    ],
)
def test_status_code_for(error, status):
    assert status_code_for(error) == status


def test_status_code_for_pydantic_errors():
    with pytest.raises(ValidationError) as exc_info:
        TodoCreate(title="")

    assert status_code_for(exc_info.value) == 400


def test_api_operation_formats_message_and_keeps_cause():
    class Widgets:
        noun = "widget"
        nouns = "widgets"

        @api_operation("Failed to frobnicate {nouns}")
        async def frobnicate(self):
            raise NotFoundError("widget 7 not found")

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(Widgets().frobnicate())

    assert exc_info.value.message == "Failed to frobnicate widgets"
    assert exc_info.value.status_code == 404
    assert isinstance(exc_info.value.__cause__, NotFoundError)


def test_create_and_complete_through_the_facade(run, services):
    todo = run(services.todos.create(TodoCreate(title="Buy milk")))

    completed = run(services.todos.complete(todo.id))

    assert completed.status == TodoStatus.COMPLETED
    assert completed.completed_at is not None


def test_update_only_sends_provided_fields(run, services):
    todo = run(services.todos.create(TodoCreate(title="Keep me", description="details")))

    updated = run(services.todos.update(todo.id, TodoUpdate(status=TodoStatus.IN_PROGRESS)))

    assert updated.title == "Keep me"
    assert updated.description == "details"
    assert updated.status == TodoStatus.IN_PROGRESS


def test_unauthenticated_calls_are_401(services):
    with pytest.raises(ApiError) as exc_info:
        asyncio.run(services.todos.create(TodoCreate(title="Nobody")))

    assert exc_info.value.message == "Failed to create todo"
    assert exc_info.value.status_code == 401


def test_missing_record_is_404(run, services):
    with pytest.raises(ApiError) as exc_info:
        run(services.notes.update("missing", NoteUpdate(title="x")))

    assert exc_info.value.message == "Failed to update note"
    assert exc_info.value.status_code == 404


def test_invariant_violation_is_400(run, services):
    start = datetime(2025, 1, 15, 10, tzinfo=timezone.utc)

    with pytest.raises(ApiError) as exc_info:
        run(services.events.create(EventCreate(title="Backwards", start_time=start, end_time=start)))

    assert exc_info.value.message == "Failed to create event"
    assert exc_info.value.status_code == 400


def test_store_failure_is_500(run, services, monkeypatch):
    async def failing_select(*args, **kwargs):
        raise StoreError("database is locked")

    monkeypatch.setattr(services.store, "select", failing_select)

    with pytest.raises(ApiError) as exc_info:
        run(services.todos.get_all())

    assert exc_info.value.message == "Failed to fetch todos"
    assert exc_info.value.status_code == 500


def test_unknown_sort_column_is_400(run, services):
    with pytest.raises(ApiError) as exc_info:
        run(services.todos.get_all(PaginationOptions(sort_by="nonsense")))

    assert exc_info.value.message == "Failed to fetch todos"
    assert exc_info.value.status_code == 400


def test_domain_operation_messages(run, services):
    with pytest.raises(ApiError) as pin:
        run(services.notes.toggle_pin("missing"))
    with pytest.raises(ApiError) as check:
        run(services.categories.can_delete("missing"))

    assert pin.value.message == "Failed to toggle note pin status"
    assert check.value.message == "Failed to check if category can be deleted"


def test_category_delete_refusal_is_400(run, services):
    category = run(services.categories.create(CategoryCreate(name="Used")))
    run(services.todos.create(TodoCreate(title="t", category_id=category.id)))

    with pytest.raises(ApiError) as exc_info:
        run(services.categories.delete(category.id))

    assert exc_info.value.message == "Failed to delete category"
    assert exc_info.value.status_code == 400


def test_bulk_update_validates_each_item(run, services):
    todos = run(services.todos.bulk_create([TodoCreate(title="a"), TodoCreate(title="b")]))

    updated = run(services.todos.bulk_update([
        BulkUpdateItem(id=t.id, data={"priority": "low"}) for t in todos
    ]))
    assert [t.priority.value for t in updated] == ["low", "low"]

    with pytest.raises(ApiError) as exc_info:
        run(services.todos.bulk_update([BulkUpdateItem(id=todos[0].id, data={"title": ""})]))

    assert exc_info.value.message == "Failed to update todos"
    assert exc_info.value.status_code == 400


def test_bulk_delete_returns_count(run, services):
    todos = run(services.todos.bulk_create([TodoCreate(title="a"), TodoCreate(title="b")]))

    assert run(services.todos.bulk_delete([t.id for t in todos])) == 2


def test_category_bulk_delete_refusal_is_400(run, services):
    category = run(services.categories.create(CategoryCreate(name="Used")))
    run(services.todos.create(TodoCreate(title="t", category_id=category.id)))

    with pytest.raises(ApiError) as exc_info:
        run(services.categories.bulk_delete([category.id]))

    assert exc_info.value.message == "Failed to delete categories"
    assert exc_info.value.status_code == 400
    assert run(services.categories.get_by_id(category.id)) is not None
