"""Calendar event routes."""

from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from productivity.dependencies import EventAPIDep
from productivity.models import (
    AttendeeCreate,
    AttendeeStatus,
    BulkDelete,
    BulkUpdateItem,
    Event,
    EventCreate,
    EventFilters,
    EventOccurrence,
    EventStats,
    EventUpdate,
    Page,
    PaginationOptions,
    Recurrence,
    ReminderCreate,
    SortOrder,
)
from productivity.routers.params import PaginationDep

router = APIRouter()


def event_filters(
    category_id: Optional[str] = None,
    is_all_day: Optional[bool] = None,
    is_cancelled: Optional[bool] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    recurrence: Optional[Recurrence] = None,
) -> EventFilters:
    return EventFilters(
        category_id=category_id,
        is_all_day=is_all_day,
        is_cancelled=is_cancelled,
        start_date=start_date,
        end_date=end_date,
        recurrence=recurrence,
    )


@router.get("", response_model=Page[Event])
async def list_events(
    api: EventAPIDep,
    pagination: PaginationDep,
    filters: Annotated[EventFilters, Depends(event_filters)],
    q: Optional[str] = None,
):
    return await api.get_with_filters(filters, pagination, q)


@router.post("", response_model=Event, status_code=201)
async def create_event(body: EventCreate, api: EventAPIDep):
    return await api.create(body)


@router.get("/stats", response_model=EventStats)
async def get_event_stats(api: EventAPIDep):
    return await api.get_stats()


@router.get("/range", response_model=Page[Event])
async def get_events_by_date_range(
    api: EventAPIDep,
    start: datetime,
    end: datetime,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(gt=0, le=500)] = 100,
):
    pagination = PaginationOptions(page=page, limit=limit, sort_by="start_time", sort_order=SortOrder.ASC)
    return await api.get_by_date_range(start, end, pagination)


@router.get("/upcoming", response_model=list[Event])
async def get_upcoming_events(api: EventAPIDep, limit: Annotated[int, Query(gt=0, le=100)] = 10):
    return await api.get_upcoming(limit)


@router.get("/today", response_model=list[Event])
async def get_todays_events(api: EventAPIDep):
    return await api.get_todays()


@router.get("/this-week", response_model=list[Event])
async def get_this_weeks_events(api: EventAPIDep):
    return await api.get_this_weeks()


@router.get("/conflicts", response_model=list[Event])
async def get_conflicting_events(
    api: EventAPIDep,
    start: datetime,
    end: datetime,
    exclude_id: Optional[str] = None,
):
    return await api.get_conflicting(start, end, exclude_id)


@router.get("/occurrences", response_model=list[EventOccurrence])
async def get_event_occurrences(api: EventAPIDep, start: datetime, end: datetime):
    return await api.get_occurrences(start, end)


@router.get("/category/{category_id}", response_model=list[Event])
async def get_events_by_category(category_id: str, api: EventAPIDep):
    return await api.get_by_category(category_id)


@router.post("/bulk", response_model=list[Event], status_code=201)
async def bulk_create_events(body: list[EventCreate], api: EventAPIDep):
    return await api.bulk_create(body)


@router.put("/bulk", response_model=list[Event])
async def bulk_update_events(body: list[BulkUpdateItem], api: EventAPIDep):
    return await api.bulk_update(body)


@router.post("/bulk-delete")
async def bulk_delete_events(body: BulkDelete, api: EventAPIDep):
    deleted = await api.bulk_delete(body.ids)
    return {"status": "deleted", "count": deleted}


@router.get("/{event_id}", response_model=Event)
async def get_event(event_id: str, api: EventAPIDep):
    event = await api.get_by_id(event_id)
    if not event:
        raise HTTPException(404, "Event not found")
    return event


@router.put("/{event_id}", response_model=Event)
async def update_event(event_id: str, body: EventUpdate, api: EventAPIDep):
    return await api.update(event_id, body)


@router.delete("/{event_id}")
async def delete_event(event_id: str, api: EventAPIDep):
    await api.delete(event_id)
    return {"status": "deleted", "id": event_id}


@router.post("/{event_id}/cancel", response_model=Event)
async def cancel_event(event_id: str, api: EventAPIDep):
    return await api.cancel(event_id)


@router.post("/{event_id}/restore", response_model=Event)
async def restore_event(event_id: str, api: EventAPIDep):
    return await api.restore(event_id)


@router.post("/{event_id}/duplicate", response_model=Event, status_code=201)
async def duplicate_event(event_id: str, api: EventAPIDep, new_start: Optional[datetime] = None):
    return await api.duplicate(event_id, new_start)


@router.post("/{event_id}/attendees", response_model=Event, status_code=201)
async def add_attendee(event_id: str, body: AttendeeCreate, api: EventAPIDep):
    return await api.add_attendee(event_id, body)


@router.put("/{event_id}/attendees/{attendee_id}", response_model=Event)
async def update_attendee_status(
    event_id: str, attendee_id: str, status: AttendeeStatus, api: EventAPIDep
):
    return await api.update_attendee_status(event_id, attendee_id, status)


@router.delete("/{event_id}/attendees/{attendee_id}", response_model=Event)
async def remove_attendee(event_id: str, attendee_id: str, api: EventAPIDep):
    return await api.remove_attendee(event_id, attendee_id)


@router.post("/{event_id}/reminders", response_model=Event, status_code=201)
async def add_reminder(event_id: str, body: ReminderCreate, api: EventAPIDep):
    return await api.add_reminder(event_id, body)


@router.delete("/{event_id}/reminders/{reminder_id}", response_model=Event)
async def remove_reminder(event_id: str, reminder_id: str, api: EventAPIDep):
    return await api.remove_reminder(event_id, reminder_id)
