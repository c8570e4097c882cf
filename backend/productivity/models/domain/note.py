"""Note domain model."""

from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime, timezone
from uuid import uuid4


class NoteCreate(BaseModel):
    """Payload for creating a note."""
    title: str = Field(min_length=1)
    content: str = ""
    category_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    attachments: list[Any] = Field(default_factory=list)
    formatting: dict[str, Any] = Field(default_factory=dict)


class NoteUpdate(BaseModel):
    """Payload for updating a note."""
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    category_id: Optional[str] = None
    is_archived: Optional[bool] = None
    is_pinned: Optional[bool] = None
    tags: Optional[list[str]] = None
    formatting: Optional[dict[str, Any]] = None


class NoteFilters(BaseModel):
    category_id: Optional[str] = None
    is_archived: Optional[bool] = None
    is_pinned: Optional[bool] = None
    shared: Optional[bool] = None


class Note(BaseModel):
    """A freeform text note."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    content: str = ""
    category_id: Optional[str] = None
    is_archived: bool = False
    is_pinned: bool = False
    tags: list[str] = Field(default_factory=list)
    attachments: list[Any] = Field(default_factory=list)
    formatting: dict[str, Any] = Field(default_factory=dict)
    word_count: int = 0
    reading_time: int = 0
    created_by: str
    shared_with: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NoteShare(BaseModel):
    """Owners to add to (or remove from) a note's ``shared_with`` list."""
    user_ids: list[str] = Field(min_length=1)
