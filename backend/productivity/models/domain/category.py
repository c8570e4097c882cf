"""Category domain model."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4

DEFAULT_CATEGORY_COLOR = "#FFFFFF"


class CategoryCreate(BaseModel):
    """Payload for creating a category."""
    name: str = Field(min_length=1)
    color: str = DEFAULT_CATEGORY_COLOR
    icon: Optional[str] = None
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None


class Category(BaseModel):
    """A label todos, notes and events may reference."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    color: str = DEFAULT_CATEGORY_COLOR
    icon: Optional[str] = None
    description: Optional[str] = None
    created_by: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CategoryUsageCounts(BaseModel):
    todos: int = 0
    notes: int = 0
    events: int = 0

    @property
    def total(self) -> int:
        return self.todos + self.notes + self.events


class CategoryUsage(BaseModel):
    category: Category
    usage: CategoryUsageCounts


class CategoryDeletability(BaseModel):
    can_delete: bool
    usage: CategoryUsageCounts
