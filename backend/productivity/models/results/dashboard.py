"""Composite read-only views for the landing page."""

from pydantic import BaseModel, Field

from productivity.models.domain.category import CategoryUsage
from productivity.models.domain.event import Event
from productivity.models.domain.note import Note
from productivity.models.domain.todo import Todo
from productivity.models.results.stats import CategoryStats, EventStats, NoteStats, TodoStats


class TodoOverview(BaseModel):
    stats: TodoStats
    overdue: list[Todo] = Field(default_factory=list)
    due_today: list[Todo] = Field(default_factory=list)
    recent: list[Todo] = Field(default_factory=list)


class NoteOverview(BaseModel):
    stats: NoteStats
    pinned: list[Note] = Field(default_factory=list)
    recent: list[Note] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class EventOverview(BaseModel):
    stats: EventStats
    upcoming: list[Event] = Field(default_factory=list)
    today: list[Event] = Field(default_factory=list)
    this_week: list[Event] = Field(default_factory=list)


class CategoryOverview(BaseModel):
    stats: CategoryStats
    usage: list[CategoryUsage] = Field(default_factory=list)


class DashboardData(BaseModel):
    todos: TodoOverview
    notes: NoteOverview
    events: EventOverview
    categories: CategoryOverview


class QuickStats(BaseModel):
    total_todos: int
    completed_todos: int
    total_notes: int
    total_events: int
    upcoming_events: int
    overdue_todos: int
