"""
Productivity models.

Usage:
    from productivity.models import Todo, TodoCreate, Note, Event, Category
    from productivity.models import TodoStatus, Recurrence, ActivityAction
    from productivity.models import PaginationOptions, SearchOptions, Page
"""

# --- Enums ---
from productivity.models.enums import (
    TodoStatus,
    TodoPriority,
    Recurrence,
    AttendeeStatus,
    ActivityAction,
    SortOrder,
)

# --- Paging ---
from productivity.models.paging import PaginationOptions, SearchOptions, Page, BulkUpdateItem, BulkDelete

# --- Domain models ---
from productivity.models.domain import (
    Todo, TodoCreate, TodoUpdate, TodoFilters,
    Subtask, SubtaskCreate, SubtaskUpdate,
    Note, NoteCreate, NoteUpdate, NoteFilters, NoteShare,
    Event, EventCreate, EventUpdate, EventFilters, EventOccurrence,
    Attendee, AttendeeCreate, Reminder, ReminderCreate,
    Category, CategoryCreate, CategoryUpdate,
    CategoryUsage, CategoryUsageCounts, CategoryDeletability,
    DEFAULT_CATEGORY_COLOR,
)

# --- Result models ---
from productivity.models.results import (
    TodoStats, NoteStats, EventStats, CategoryStats,
    TodoOverview, NoteOverview, EventOverview, CategoryOverview,
    DashboardData, QuickStats,
)

__all__ = [
    # Enums
    "TodoStatus", "TodoPriority", "Recurrence", "AttendeeStatus", "ActivityAction", "SortOrder",
    # Paging
    "PaginationOptions", "SearchOptions", "Page", "BulkUpdateItem", "BulkDelete",
    # Domain
    "Todo", "TodoCreate", "TodoUpdate", "TodoFilters",
    "Subtask", "SubtaskCreate", "SubtaskUpdate",
    "Note", "NoteCreate", "NoteUpdate", "NoteFilters", "NoteShare",
    "Event", "EventCreate", "EventUpdate", "EventFilters", "EventOccurrence",
    "Attendee", "AttendeeCreate", "Reminder", "ReminderCreate",
    "Category", "CategoryCreate", "CategoryUpdate",
    "CategoryUsage", "CategoryUsageCounts", "CategoryDeletability",
    "DEFAULT_CATEGORY_COLOR",
    # Results
    "TodoStats", "NoteStats", "EventStats", "CategoryStats",
    "TodoOverview", "NoteOverview", "EventOverview", "CategoryOverview",
    "DashboardData", "QuickStats",
]
