"""
Event repository.

Calendar views (date ranges, today, this week, upcoming), attendee and
reminder lists, conflict detection and expansion of recurring events into
concrete occurrences. Every write keeps ``end_time`` after ``start_time``.
"""

from datetime import datetime, timedelta
from typing import Any

from productivity.cache.client import CacheManager
from productivity.database.store import Query, Store, utc_now
from productivity.errors import NotFoundError, ValidationFailure
from productivity.identity import IdentityResolver
from productivity.models import (
    Attendee,
    AttendeeCreate,
    AttendeeStatus,
    Event,
    EventFilters,
    EventOccurrence,
    EventStats,
    Page,
    PaginationOptions,
    Recurrence,
    Reminder,
    ReminderCreate,
    SearchOptions,
    SortOrder,
)
from productivity.repositories.base import Repository, apply_equality_filters
from productivity.repositories.dates import add_months, as_utc, day_bounds, week_bounds

SEARCH_COLUMNS = ("title", "description", "location")
DATE_RANGE_PAGE_SIZE = 100
DUPLICATE_OFFSET = timedelta(days=7)

_FIXED_STEPS = {
    Recurrence.DAILY: timedelta(days=1),
    Recurrence.WEEKLY: timedelta(weeks=1),
}
_MONTH_STEPS = {
    Recurrence.MONTHLY: 1,
    Recurrence.YEARLY: 12,
}


def calculate_event_stats(events: list[Event]) -> EventStats:
    now = utc_now()
    return EventStats(
        total=len(events),
        upcoming=sum(1 for e in events if e.start_time > now and not e.is_cancelled),
        past=sum(1 for e in events if e.end_time < now and not e.is_cancelled),
        cancelled=sum(1 for e in events if e.is_cancelled),
        all_day=sum(1 for e in events if e.is_all_day),
        recurring=sum(1 for e in events if e.recurrence != Recurrence.NONE),
        by_recurrence={r.value: sum(1 for e in events if e.recurrence == r) for r in Recurrence},
    )


def apply_event_filters(query: Query, filters: dict[str, Any]) -> Query:
    filters = dict(filters)
    start_date = filters.pop("start_date", None)
    end_date = filters.pop("end_date", None)
    apply_equality_filters(query, filters)
    if start_date is not None:
        query.gte("start_time", start_date)
    if end_date is not None:
        query.lte("start_time", end_date)
    return query


def validate_event_times(
    start_time: datetime, end_time: datetime, recurrence_end_date: datetime | None
) -> None:
    if as_utc(end_time) <= as_utc(start_time):
        raise ValidationFailure("Event end time must be after its start time")
    if recurrence_end_date is not None and as_utc(recurrence_end_date) < as_utc(start_time):
        raise ValidationFailure("Recurrence end date cannot precede the event start")


def prepare_event_create(values: dict[str, Any]) -> dict[str, Any]:
    start_time = values.get("start_time")
    end_time = values.get("end_time")
    if start_time is None or end_time is None:
        raise ValidationFailure("Events need both a start time and an end time")
    validate_event_times(start_time, end_time, values.get("recurrence_end_date"))
    if values.get("target_date") is None:
        values["target_date"] = start_time
    return values


def prepare_event_update(current: Event, changes: dict[str, Any]) -> dict[str, Any]:
    """Validate the merged record so partial edits cannot invert the interval."""
    validate_event_times(
        changes.get("start_time", current.start_time),
        changes.get("end_time", current.end_time),
        changes.get("recurrence_end_date", current.recurrence_end_date),
    )
    return changes


def _nth_start(event: Event, index: int) -> datetime:
    step = event.recurrence_interval * index
    if event.recurrence in _FIXED_STEPS:
        return event.start_time + _FIXED_STEPS[event.recurrence] * step
    return add_months(event.start_time, _MONTH_STEPS[event.recurrence] * step)


def _occurrence(event: Event, start: datetime, duration: timedelta) -> EventOccurrence:
    return EventOccurrence(
        event_id=event.id,
        title=event.title,
        start_time=start,
        end_time=start + duration,
        is_all_day=event.is_all_day,
        location=event.location,
        is_recurring=event.recurrence != Recurrence.NONE,
    )


def expand_occurrences(
    event: Event, window_start: datetime, window_end: datetime
) -> list[EventOccurrence]:
    """Instances of ``event`` intersecting the half-open window ``[start, end)``."""
    window_start, window_end = as_utc(window_start), as_utc(window_end)
    duration = event.end_time - event.start_time

    if event.recurrence == Recurrence.NONE:
        if event.start_time < window_end and event.end_time > window_start:
            return [_occurrence(event, event.start_time, duration)]
        return []

    index = 0
    if event.recurrence in _FIXED_STEPS:
        # Jump straight to the first instance that could reach the window.
        step = _FIXED_STEPS[event.recurrence] * event.recurrence_interval
        index = max(0, (window_start - duration - event.start_time) // step)

    occurrences = []
    while True:
        start = _nth_start(event, index)
        if start >= window_end:
            break
        if event.recurrence_end_date is not None and start > event.recurrence_end_date:
            break
        if start + duration > window_start:
            occurrences.append(_occurrence(event, start, duration))
        index += 1
    return occurrences


class EventRepository:
    def __init__(
        self,
        store: Store,
        cache: CacheManager,
        identity: IdentityResolver,
        batch_size: int = 10,
    ):
        self.base: Repository[Event, EventStats] = Repository(
            store=store,
            cache=cache,
            identity=identity,
            table="events",
            cache_prefix="event",
            model=Event,
            search_columns=SEARCH_COLUMNS,
            calculate_stats=calculate_event_stats,
            stats_model=EventStats,
            apply_filters=apply_event_filters,
            prepare_create=prepare_event_create,
            prepare_update=prepare_event_update,
            batch_size=batch_size,
        )

    async def get_with_filters(
        self,
        filters: EventFilters | None = None,
        pagination: PaginationOptions | None = None,
        query: str | None = None,
    ) -> Page[Event]:
        """Filtered listing; cancelled events are hidden unless asked for."""
        values = (filters or EventFilters()).model_dump(exclude_none=True)
        values.setdefault("is_cancelled", False)
        return await self.base.get_all(pagination, SearchOptions(query=query, filters=values))

    async def get_by_category(self, category_id: str) -> list[Event]:
        page = await self.get_with_filters(EventFilters(category_id=category_id))
        return page.data

    async def get_by_date_range(
        self,
        start: datetime,
        end: datetime,
        pagination: PaginationOptions | None = None,
    ) -> Page[Event]:
        """Non-cancelled events starting inside ``[start, end]``, earliest first."""
        pagination = (pagination or PaginationOptions(limit=DATE_RANGE_PAGE_SIZE)).model_copy(
            update={"sort_by": "start_time", "sort_order": SortOrder.ASC}
        )
        query = (
            Query()
            .gte("start_time", start)
            .lte("start_time", end)
            .eq("is_cancelled", False)
        )
        return await self.base.find_page(query, pagination)

    async def get_upcoming(self, limit: int = 10) -> list[Event]:
        return await self.base.find(
            Query()
            .gte("start_time", utc_now())
            .eq("is_cancelled", False)
            .order("start_time")
            .limit(limit)
        )

    async def get_todays(self) -> list[Event]:
        start, end = day_bounds(utc_now())
        page = await self.get_by_date_range(start, end)
        return page.data

    async def get_this_weeks(self) -> list[Event]:
        start, end = week_bounds(utc_now())
        page = await self.get_by_date_range(start, end)
        return page.data

    async def cancel(self, event_id: str) -> Event:
        return await self.base.update(event_id, {"is_cancelled": True})

    async def restore(self, event_id: str) -> Event:
        return await self.base.update(event_id, {"is_cancelled": False})

    async def add_attendee(self, event_id: str, data: AttendeeCreate) -> Event:
        event = await self.base.require(event_id)
        attendees = [*event.attendees, Attendee(**data.model_dump())]
        return await self._write_list(event_id, "attendees", attendees)

    async def remove_attendee(self, event_id: str, attendee_id: str) -> Event:
        event = await self.base.require(event_id)
        _require_item(event.attendees, attendee_id, "Attendee")
        attendees = [a for a in event.attendees if a.id != attendee_id]
        return await self._write_list(event_id, "attendees", attendees)

    async def update_attendee_status(
        self, event_id: str, attendee_id: str, status: AttendeeStatus
    ) -> Event:
        event = await self.base.require(event_id)
        _require_item(event.attendees, attendee_id, "Attendee")
        attendees = [
            a.model_copy(update={"status": status, "updated_at": utc_now()}) if a.id == attendee_id else a
            for a in event.attendees
        ]
        return await self._write_list(event_id, "attendees", attendees)

    async def add_reminder(self, event_id: str, data: ReminderCreate) -> Event:
        event = await self.base.require(event_id)
        reminders = [*event.reminders, Reminder(**data.model_dump())]
        return await self._write_list(event_id, "reminders", reminders)

    async def remove_reminder(self, event_id: str, reminder_id: str) -> Event:
        event = await self.base.require(event_id)
        _require_item(event.reminders, reminder_id, "Reminder")
        reminders = [r for r in event.reminders if r.id != reminder_id]
        return await self._write_list(event_id, "reminders", reminders)

    async def _write_list(self, event_id: str, field: str, items: list) -> Event:
        return await self.base.update(event_id, {field: [item.model_dump() for item in items]})

    async def get_conflicting(
        self, start: datetime, end: datetime, exclude_id: str | None = None
    ) -> list[Event]:
        """
        Non-cancelled events overlapping ``[start, end)``.

        The overlap is expressed as three cases: the event contains ``start``,
        contains ``end``, or lies inside the interval. Events that merely
        touch an endpoint do not conflict.
        """
        if as_utc(end) <= as_utc(start):
            raise ValidationFailure("Conflict window must end after it starts")
        query =Query().eq("is_cancelled", False).or_(
            Query().lte("start_time", start).gt("end_time", start),
            Query().lt("start_time", end).gte("end_time", end),
            Query().gte("start_time", start).lte("end_time", end),
        )
        if exclude_id:
            query.neq("id", exclude_id)
        return await self.base.find(query.order("start_time"))

    async def duplicate(self, event_id: str, new_start: datetime | None = None) -> Event:
        """Copy an event to ``new_start`` (default: one week later), keeping its length."""
        source = await self.base.require(event_id)
        start = as_utc(new_start) if new_start else source.start_time + DUPLICATE_OFFSET
        return await self.base.create({
            "title": f"{source.title} (Copy)",
            "description": source.description,
            "category_id": source.category_id,
            "start_time": start,
            "end_time": start + (source.end_time - source.start_time),
            "target_date": source.target_date,
            "location": source.location,
            "is_all_day": source.is_all_day,
            "recurrence": source.recurrence,
            "recurrence_end_date": source.recurrence_end_date,
            "recurrence_interval": source.recurrence_interval,
            "attendees": [a.model_dump() for a in source.attendees],
            "reminders": [r.model_dump() for r in source.reminders],
            "meeting_url": source.meeting_url,
            "is_cancelled": False,
        })

    async def get_occurrences(
        self, window_start: datetime, window_end: datetime
    ) -> list[EventOccurrence]:
        """Concrete instances of the caller's events inside ``[window_start, window_end)``."""
        if as_utc(window_end) <= as_utc(window_start):
            raise ValidationFailure("Occurrence window must end after it starts")
        events = await self.base.find(
            Query().eq("is_cancelled", False).lt("start_time", window_end)
        )
        occurrences = [
            occurrence
            for event in events
            for occurrence in expand_occurrences(event, window_start, window_end)
        ]
        return sorted(occurrences, key=lambda o: (o.start_time, o.event_id))


def _require_item(items: list, item_id: str, label: str) -> None:
    if not any(item.id == item_id for item in items):
        raise NotFoundError(f"{label} {item_id} not found")
