"""Per-entity statistics computed over all of an owner's rows."""

from pydantic import BaseModel, Field


class TodoStats(BaseModel):
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    overdue: int = 0
    by_priority: dict[str, int] = Field(default_factory=dict)
    completion_rate: int = 0


class NoteStats(BaseModel):
    total: int = 0
    archived: int = 0
    pinned: int = 0
    shared: int = 0
    total_words: int = 0
    total_reading_time: int = 0
    average_word_count: int = 0
    average_reading_time: int = 0


class EventStats(BaseModel):
    total: int = 0
    upcoming: int = 0
    past: int = 0
    cancelled: int = 0
    all_day: int = 0
    recurring: int = 0
    by_recurrence: dict[str, int] = Field(default_factory=dict)


class CategoryStats(BaseModel):
    total: int = 0
    with_icons: int = 0
    with_descriptions: int = 0
    color_distribution: dict[str, int] = Field(default_factory=dict)
