from datetime import timedelta

import pytest

from productivity.database.store import utc_now
from productivity.errors import NotFoundError
from productivity.models import (
    SubtaskCreate,
    SubtaskUpdate,
    Todo,
    TodoFilters,
    TodoPriority,
    TodoStatus,
)
from productivity.repositories.dates import day_bounds
from productivity.repositories.todos import calculate_todo_stats


@pytest.fixture
def todos(services):
    return services.todos.repository


def _todo(**values):
    return Todo(created_by="alice", **{"title": "t", **values})


def test_complete_sets_status_and_timestamp(run, todos):
    todo = run(todos.base.create({"title": "Buy milk", "priority": TodoPriority.MEDIUM}))
    assert todo.completed_at is None

    run(todos.complete(todo.id))

    fetched = run(todos.base.get_by_id(todo.id))
    assert fetched.status == TodoStatus.COMPLETED
    assert fetched.completed_at is not None


def test_completing_twice_keeps_the_first_completion_time(run, todos):
    todo = run(todos.base.create({"title": "Once"}))
    first = run(todos.complete(todo.id))

    again = run(todos.complete(todo.id))

    assert again.status == TodoStatus.COMPLETED
    assert again.completed_at == first.completed_at


def test_completed_at_tracks_status_on_every_write(run, todos):
    created_done = run(todos.base.create({"title": "Done", "status": TodoStatus.COMPLETED}))
    assert created_done.completed_at is not None

    todo = run(todos.base.create({"title": "Work"}))
    completed = run(todos.update_status(todo.id, TodoStatus.COMPLETED))
    assert completed.completed_at is not None

    renamed = run(todos.base.update(todo.id, {"title": "Work, renamed"}))
    assert renamed.completed_at == completed.completed_at

    reopened = run(todos.update_status(todo.id, TodoStatus.IN_PROGRESS))
    assert reopened.completed_at is None

    stray = run(todos.base.update(todo.id, {"completed_at": utc_now()}))
    assert stray.completed_at is None


def test_listing_hides_archived_unless_requested(run, todos):
    visible = run(todos.base.create({"title": "Visible"}))
    hidden = run(todos.base.create({"title": "Hidden"}))
    run(todos.toggle_archive(hidden.id))

    default = run(todos.get_with_filters())
    archived = run(todos.get_with_filters(TodoFilters(is_archived=True)))

    assert [t.id for t in default.data] == [visible.id]
    assert [t.id for t in archived.data] == [hidden.id]


def test_toggle_archive_twice_is_identity(run, todos):
    todo = run(todos.base.create({"title": "Flip"}))

    run(todos.toggle_archive(todo.id))
    restored = run(todos.toggle_archive(todo.id))

    assert restored.is_archived is False


def test_due_date_range_filter(run, todos):
    now = utc_now()
    run(todos.base.bulk_create([
        {"title": "soon", "due_date": now + timedelta(days=1)},
        {"title": "later", "due_date": now + timedelta(days=10)},
        {"title": "undated"},
    ]))

    page = run(todos.get_with_filters(TodoFilters(
        due_date_from=now, due_date_to=now + timedelta(days=2)
    )))

    assert [t.title for t in page.data] == ["soon"]


def test_overdue_excludes_completed_and_archived(run, todos):
    yesterday = utc_now() - timedelta(days=1)
    late = run(todos.base.create({"title": "late", "due_date": yesterday}))
    run(todos.base.create({"title": "done", "due_date": yesterday, "status": TodoStatus.COMPLETED}))
    archived = run(todos.base.create({"title": "archived", "due_date": yesterday}))
    run(todos.toggle_archive(archived.id))
    run(todos.base.create({"title": "future", "due_date": utc_now() + timedelta(days=1)}))

    assert [t.id for t in run(todos.get_overdue())] == [late.id]


def test_due_today(run, todos):
    _, end_of_today = day_bounds(utc_now())
    today = run(todos.base.create({"title": "today", "due_date": end_of_today - timedelta(seconds=1)}))
    run(todos.base.create({"title": "tomorrow", "due_date": end_of_today + timedelta(hours=1)}))

    assert [t.id for t in run(todos.get_due_today())] == [today.id]


def test_assigned_todos_are_visible_to_the_assignee(run, todos):
    todo = run(todos.base.create({"title": "For bob", "assigned_to": "bob"}), user="alice")

    assert [t.id for t in run(todos.get_assigned(), user="bob")] == [todo.id]
    assert run(todos.get_assigned(), user="alice") == []


def test_subtask_lifecycle(run, todos):
    todo = run(todos.base.create({"title": "Trip"}))

    with_subtask = run(todos.add_subtask(todo.id, SubtaskCreate(title="Pack")))
    subtask = with_subtask.subtasks[0]
    assert subtask.completed is False

    checked = run(todos.update_subtask(todo.id, subtask.id, SubtaskUpdate(completed=True)))
    assert checked.subtasks[0].completed is True
    assert checked.subtasks[0].title == "Pack"
    assert checked.subtasks[0].updated_at is not None

    emptied = run(todos.remove_subtask(todo.id, subtask.id))
    assert emptied.subtasks == []


def test_unknown_subtask_is_not_found(run, todos):
    todo = run(todos.base.create({"title": "Trip"}))

    with pytest.raises(NotFoundError):
        run(todos.update_subtask(todo.id, "missing", SubtaskUpdate(completed=True)))
    with pytest.raises(NotFoundError):
        run(todos.remove_subtask(todo.id, "missing"))


def test_duplicate_resets_progress(run, todos):
    source = run(todos.base.create({
        "title": "Report",
        "status": TodoStatus.COMPLETED,
        "priority": TodoPriority.HIGH,
        "tags": ["q3"],
    }))
    source = run(todos.add_subtask(source.id, SubtaskCreate(title="Draft", completed=True)))

    copy = run(todos.duplicate(source.id))

    assert copy.id != source.id
    assert copy.title == "Report (Copy)"
    assert copy.status == TodoStatus.OPEN
    assert copy.completed_at is None
    assert copy.priority == TodoPriority.HIGH
    assert copy.tags == ["q3"]
    assert [s.title for s in copy.subtasks] == ["Draft"]
    assert copy.subtasks[0].completed is False
    assert copy.subtasks[0].id != source.subtasks[0].id


def test_stats_completion_rate_rounds_half_up():
    two_of_three = [
        _todo(status=TodoStatus.COMPLETED),
        _todo(status=TodoStatus.COMPLETED),
        _todo(status=TodoStatus.OPEN),
    ]
    one_of_eight = [_todo(status=TodoStatus.COMPLETED)] + [_todo() for _ in range(7)]

    assert calculate_todo_stats(two_of_three).completion_rate == 67
    assert calculate_todo_stats(one_of_eight).completion_rate == 13
    assert calculate_todo_stats([]).completion_rate == 0


def test_stats_counts():
    past = utc_now() - timedelta(hours=1)
    stats = calculate_todo_stats([
        _todo(status=TodoStatus.IN_PROGRESS, priority=TodoPriority.HIGH, due_date=past),
        _todo(status=TodoStatus.COMPLETED, due_date=past),
        _todo(priority=TodoPriority.LOW),
    ])

    assert stats.total == 3
    assert stats.in_progress == 1
    assert stats.overdue == 1
    assert stats.by_priority == {"high": 1, "medium": 1, "low": 1}
