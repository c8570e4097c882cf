"""Todo domain model."""

from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime, timezone
from uuid import uuid4

from productivity.models.enums import TodoPriority, TodoStatus


class Subtask(BaseModel):
    """A checklist item stored inside its todo."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    completed: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None


class SubtaskCreate(BaseModel):
    title: str = Field(min_length=1)
    completed: bool = False


class SubtaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    completed: Optional[bool] = None


class TodoCreate(BaseModel):
    """Payload for creating a todo."""
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None
    due_date: Optional[datetime] = None
    status: TodoStatus = TodoStatus.OPEN
    priority: TodoPriority = TodoPriority.MEDIUM
    is_archived: bool = False
    estimated_duration: Optional[int] = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)
    attachments: list[Any] = Field(default_factory=list)
    subtasks: list[Subtask] = Field(default_factory=list)
    assigned_to: Optional[str] = None


class TodoUpdate(BaseModel):
    """Payload for updating a todo. Only fields that were provided are patched."""
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None
    due_date: Optional[datetime] = None
    status: Optional[TodoStatus] = None
    priority: Optional[TodoPriority] = None
    is_archived: Optional[bool] = None
    completed_at: Optional[datetime] = None
    estimated_duration: Optional[int] = Field(default=None, ge=0)
    actual_duration: Optional[int] = Field(default=None, ge=0)
    tags: Optional[list[str]] = None
    subtasks: Optional[list[Subtask]] = None
    assigned_to: Optional[str] = None


class TodoFilters(BaseModel):
    """Listing filters; ``is_archived`` defaults to hiding archived todos."""
    status: Optional[TodoStatus] = None
    priority: Optional[TodoPriority] = None
    category_id: Optional[str] = None
    is_archived: Optional[bool] = None
    due_date_from: Optional[datetime] = None
    due_date_to: Optional[datetime] = None
    assigned_to: Optional[str] = None


class Todo(BaseModel):
    """A task owned by one user."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    due_date: Optional[datetime] = None
    status: TodoStatus = TodoStatus.OPEN
    priority: TodoPriority = TodoPriority.MEDIUM
    is_archived: bool = False
    completed_at: Optional[datetime] = None
    estimated_duration: Optional[int] = None
    actual_duration: Optional[int] = None
    tags: list[str] = Field(default_factory=list)
    attachments: list[Any] = Field(default_factory=list)
    subtasks: list[Subtask] = Field(default_factory=list)
    created_by: str
    assigned_to: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
