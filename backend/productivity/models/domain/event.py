"""Calendar event domain model."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4

from productivity.models.enums import AttendeeStatus, Recurrence


class Attendee(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    email: str
    name: str
    status: AttendeeStatus = AttendeeStatus.PENDING
    added_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None


class AttendeeCreate(BaseModel):
    email: str = Field(min_length=3)
    name: str
    status: AttendeeStatus = AttendeeStatus.PENDING


class Reminder(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    type: str = "notification"
    minutes_before: int = Field(ge=0)
    message: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ReminderCreate(BaseModel):
    type: str = "notification"
    minutes_before: int = Field(ge=0)
    message: Optional[str] = None


class EventCreate(BaseModel):
    """Payload for creating an event. ``target_date`` defaults to ``start_time``."""
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    target_date: Optional[datetime] = None
    location: Optional[str] = None
    is_all_day: bool = False
    recurrence: Recurrence = Recurrence.NONE
    recurrence_end_date: Optional[datetime] = None
    recurrence_interval: int = Field(default=1, ge=1)
    attendees: list[Attendee] = Field(default_factory=list)
    reminders: list[Reminder] = Field(default_factory=list)
    meeting_url: Optional[str] = None
    is_cancelled: bool = False


class EventUpdate(BaseModel):
    """Payload for updating an event."""
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    target_date: Optional[datetime] = None
    location: Optional[str] = None
    is_all_day: Optional[bool] = None
    recurrence: Optional[Recurrence] = None
    recurrence_end_date: Optional[datetime] = None
    recurrence_interval: Optional[int] = Field(default=None, ge=1)
    attendees: Optional[list[Attendee]] = None
    reminders: Optional[list[Reminder]] = None
    meeting_url: Optional[str] = None
    is_cancelled: Optional[bool] = None


class EventFilters(BaseModel):
    """Listing filters; ``start_date``/``end_date`` bound ``start_time``."""
    category_id: Optional[str] = None
    is_all_day: Optional[bool] = None
    is_cancelled: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    recurrence: Optional[Recurrence] = None


class Event(BaseModel):
    """A calendar event. ``end_time`` is always after ``start_time``."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    target_date: datetime
    location: Optional[str] = None
    is_all_day: bool = False
    recurrence: Recurrence = Recurrence.NONE
    recurrence_end_date: Optional[datetime] = None
    recurrence_interval: int = 1
    attendees: list[Attendee] = Field(default_factory=list)
    reminders: list[Reminder] = Field(default_factory=list)
    meeting_url: Optional[str] = None
    is_cancelled: bool = False
    created_by: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EventOccurrence(BaseModel):
    """One concrete instance of a (possibly recurring) event."""
    event_id: str
    title: str
    start_time: datetime
    end_time: datetime
    is_all_day: bool = False
    location: Optional[str] = None
    is_recurring: bool = False
