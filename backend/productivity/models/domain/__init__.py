"""Domain models — the records each repository stores and returns."""

from productivity.models.domain.todo import (
    Todo, TodoCreate, TodoUpdate, TodoFilters,
    Subtask, SubtaskCreate, SubtaskUpdate,
)
from productivity.models.domain.note import Note, NoteCreate, NoteUpdate, NoteFilters, NoteShare
from productivity.models.domain.event import (
    Event, EventCreate, EventUpdate, EventFilters, EventOccurrence,
    Attendee, AttendeeCreate, Reminder, ReminderCreate,
)
from productivity.models.domain.category import (
    Category, CategoryCreate, CategoryUpdate,
    CategoryUsage, CategoryUsageCounts, CategoryDeletability,
    DEFAULT_CATEGORY_COLOR,
)

__all__ = [
    "Todo", "TodoCreate", "TodoUpdate", "TodoFilters",
    "Subtask", "SubtaskCreate", "SubtaskUpdate",
    "Note", "NoteCreate", "NoteUpdate", "NoteFilters", "NoteShare",
    "Event", "EventCreate", "EventUpdate", "EventFilters", "EventOccurrence",
    "Attendee", "AttendeeCreate", "Reminder", "ReminderCreate",
    "Category", "CategoryCreate", "CategoryUpdate",
    "CategoryUsage", "CategoryUsageCounts", "CategoryDeletability",
    "DEFAULT_CATEGORY_COLOR",
]
