"""Result models for statistics and aggregate views."""

from productivity.models.results.stats import TodoStats, NoteStats, EventStats, CategoryStats
from productivity.models.results.dashboard import (
    TodoOverview, NoteOverview, EventOverview, CategoryOverview,
    DashboardData, QuickStats,
)

__all__ = [
    "TodoStats", "NoteStats", "EventStats", "CategoryStats",
    "TodoOverview", "NoteOverview", "EventOverview", "CategoryOverview",
    "DashboardData", "QuickStats",
]
