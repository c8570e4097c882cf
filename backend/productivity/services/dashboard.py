"""Dashboard aggregator: composite read-only views built from the facade."""

import asyncio

from productivity.models import (
    CategoryOverview,
    DashboardData,
    EventOverview,
    NoteOverview,
    PaginationOptions,
    QuickStats,
    SortOrder,
    TodoOverview,
)
from productivity.services.facade import (
    CategoryAPI,
    EventAPI,
    NoteAPI,
    TodoAPI,
    api_operation,
)

DASHBOARD_LIST_SIZE = 5


class DashboardAPI:
    def __init__(self, todos: TodoAPI, notes: NoteAPI, events: EventAPI, categories: CategoryAPI):
        self.todos = todos
        self.notes = notes
        self.events = events
        self.categories = categories

    @api_operation("Failed to fetch dashboard data")
    async def get_dashboard_data(self) -> DashboardData:
        """All fourteen reads run concurrently; any failure fails the whole view."""
        recent = PaginationOptions(
            page=1, limit=DASHBOARD_LIST_SIZE, sort_by="updated_at", sort_order=SortOrder.DESC
        )
        (
            todo_stats,
            overdue_todos,
            todos_due_today,
            recent_todos,
            note_stats,
            pinned_notes,
            recent_notes,
            note_tags,
            event_stats,
            upcoming_events,
            todays_events,
            this_weeks_events,
            category_stats,
            category_usage,
        ) = await asyncio.gather(
            self.todos.get_stats(),
            self.todos.get_overdue(),
            self.todos.get_due_today(),
            self.todos.get_with_filters(None, recent),
            self.notes.get_stats(),
            self.notes.get_pinned(),
            self.notes.get_recent(DASHBOARD_LIST_SIZE),
            self.notes.get_all_tags(),
            self.events.get_stats(),
            self.events.get_upcoming(DASHBOARD_LIST_SIZE),
            self.events.get_todays(),
            self.events.get_this_weeks(),
            self.categories.get_stats(),
            self.categories.get_usage(),
        )

        return DashboardData(
            todos=TodoOverview(
                stats=todo_stats,
                overdue=overdue_todos,
                due_today=todos_due_today,
                recent=recent_todos.data,
            ),
            notes=NoteOverview(
                stats=note_stats,
                pinned=pinned_notes,
                recent=recent_notes,
                tags=note_tags,
            ),
            events=EventOverview(
                stats=event_stats,
                upcoming=upcoming_events,
                today=todays_events,
                this_week=this_weeks_events,
            ),
            categories=CategoryOverview(stats=category_stats, usage=category_usage),
        )

    @api_operation("Failed to fetch quick stats")
    async def get_quick_stats(self) -> QuickStats:
        todo_stats, note_stats, event_stats, overdue_todos = await asyncio.gather(
            self.todos.get_stats(),
            self.notes.get_stats(),
            self.events.get_stats(),
            self.todos.get_overdue(),
        )
        return QuickStats(
            total_todos=todo_stats.total,
            completed_todos=todo_stats.completed,
            total_notes=note_stats.total,
            total_events=event_stats.total,
            upcoming_events=event_stats.upcoming,
            overdue_todos=len(overdue_todos),
        )
