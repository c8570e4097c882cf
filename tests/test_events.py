from datetime import datetime, timedelta, timezone

import pytest

from productivity.database.store import utc_now
from productivity.errors import NotFoundError, ValidationFailure
from productivity.models import (
    AttendeeCreate,
    AttendeeStatus,
    Event,
    Recurrence,
    ReminderCreate,
)
from productivity.repositories.dates import add_months, day_bounds, week_bounds
from productivity.repositories.events import calculate_event_stats, expand_occurrences


def at(day, hour, minute=0, month=1, year=2025):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def events(services):
    return services.events.repository


def _create(run, events, title, start, end, **values):
    return run(events.base.create({"title": title, "start_time": start, "end_time": end, **values}))


def _event(start, end, **values):
    return Event(
        title="e", created_by="alice", start_time=start, end_time=end, target_date=start, **values
    )


def test_overlapping_events_conflict(run, events):
    a = _create(run, events, "A", at(15, 10), at(15, 11))
    b = _create(run, events, "B", at(15, 10, 30), at(15, 11, 30))

    conflicts = run(events.get_conflicting(at(15, 10, 15), at(15, 10, 45)))
    assert [e.id for e in conflicts] == [a.id, b.id]

    excluding_a = run(events.get_conflicting(at(15, 10, 15), at(15, 10, 45), exclude_id=a.id))
    assert [e.id for e in excluding_a] == [b.id]


def test_touching_and_cancelled_events_do_not_conflict(run, events):
    _create(run, events, "Morning", at(15, 9), at(15, 10))
    cancelled = _create(run, events, "Dropped", at(15, 10), at(15, 11))
    run(events.cancel(cancelled.id))
    inside = _create(run, events, "Inside", at(15, 10, 15), at(15, 10, 30))

    conflicts = run(events.get_conflicting(at(15, 10), at(15, 11)))

    assert [e.id for e in conflicts] == [inside.id]


def test_conflict_window_must_be_ordered(run, events):
    _create(run, events, "A", at(15, 10), at(15, 11))

    with pytest.raises(ValidationFailure):
        run(events.get_conflicting(at(15, 11), at(15, 10)))
    with pytest.raises(ValidationFailure):
        run(events.get_conflicting(at(15, 10), at(15, 10)))


def test_end_must_follow_start(run, events):
    with pytest.raises(ValidationFailure):
        _create(run, events, "Backwards", at(15, 11), at(15, 10))
    with pytest.raises(ValidationFailure):
        _create(run, events, "Empty", at(15, 10), at(15, 10))
    with pytest.raises(ValidationFailure):
        run(events.base.create({"title": "Open ended", "start_time": at(15, 10)}))


def test_update_cannot_invert_the_interval(run, events):
    event = _create(run, events, "Meeting", at(15, 10), at(15, 11))

    with pytest.raises(ValidationFailure):
        run(events.base.update(event.id, {"start_time": at(15, 12)}))
    with pytest.raises(ValidationFailure):
        run(events.base.update(event.id, {"recurrence_end_date": at(14, 0)}))

    moved = run(events.base.update(event.id, {"start_time": at(15, 12), "end_time": at(15, 13)}))
    assert moved.start_time == at(15, 12)


def test_target_date_defaults_to_start(run, events):
    event = _create(run, events, "Review", at(15, 10), at(15, 11))
    planned = _create(run, events, "Planned", at(15, 10), at(15, 11), target_date=at(20, 0))

    assert event.target_date == at(15, 10)
    assert planned.target_date == at(20, 0)


def test_date_range_is_ascending_and_skips_cancelled(run, events):
    late = _create(run, events, "late", at(20, 9), at(20, 10))
    early = _create(run, events, "early", at(16, 9), at(16, 10))
    dropped = _create(run, events, "dropped", at(18, 9), at(18, 10))
    run(events.cancel(dropped.id))
    _create(run, events, "outside", at(25, 9), at(25, 10))

    page = run(events.get_by_date_range(at(15, 0), at(21, 0)))

    assert [e.id for e in page.data] == [early.id, late.id]
    assert page.total == 2


def test_upcoming_and_today(run, events):
    now = utc_now()
    soon = _create(run, events, "soon", now + timedelta(hours=1), now + timedelta(hours=2))
    _create(run, events, "past", now - timedelta(days=2), now - timedelta(days=2, hours=-1))

    assert [e.id for e in run(events.get_upcoming())] == [soon.id]

    start, end = day_bounds(now)
    todays = run(events.get_todays())
    assert all(start <= e.start_time <= end for e in todays)


def test_cancel_and_restore(run, events):
    event = _create(run, events, "Gig", at(15, 20), at(15, 23))

    assert run(events.cancel(event.id)).is_cancelled is True
    assert run(events.cancel(event.id)).is_cancelled is True
    assert run(events.restore(event.id)).is_cancelled is False


def test_attendees_and_reminders(run, events):
    event = _create(run, events, "Party", at(15, 20), at(15, 23))

    with_guest = run(events.add_attendee(event.id, AttendeeCreate(email="bob@example.com", name="Bob")))
    guest = with_guest.attendees[0]
    assert guest.status == AttendeeStatus.PENDING

    accepted = run(events.update_attendee_status(event.id, guest.id, AttendeeStatus.ACCEPTED))
    assert accepted.attendees[0].status == AttendeeStatus.ACCEPTED
    assert accepted.attendees[0].updated_at is not None

    assert run(events.remove_attendee(event.id, guest.id)).attendees == []

    reminded = run(events.add_reminder(event.id, ReminderCreate(minutes_before=15)))
    assert reminded.reminders[0].minutes_before == 15
    assert run(events.remove_reminder(event.id, reminded.reminders[0].id)).reminders == []

    with pytest.raises(NotFoundError):
        run(events.remove_attendee(event.id, "missing"))
    with pytest.raises(NotFoundError):
        run(events.remove_reminder(event.id, "missing"))


def test_duplicate_defaults_to_next_week(run, events):
    source = _create(run, events, "Standup", at(15, 9), at(15, 9, 15), location="Room 1")

    copy = run(events.duplicate(source.id))
    moved = run(events.duplicate(source.id, at(1, 14, month=2)))

    assert copy.title == "Standup (Copy)"
    assert copy.start_time == at(22, 9)
    assert copy.end_time == at(22, 9, 15)
    assert copy.target_date == source.target_date
    assert copy.location == "Room 1"
    assert moved.start_time == at(1, 14, month=2)
    assert moved.end_time == at(1, 14, 15, month=2)


def test_occurrence_window_must_be_ordered(run, events):
    with pytest.raises(ValidationFailure):
        run(events.get_occurrences(at(15, 0), at(15, 0)))


def test_occurrences_across_recurring_and_single_events(run, events):
    _create(run, events, "Gym", at(1, 7), at(1, 8), recurrence=Recurrence.DAILY, recurrence_interval=2)
    _create(run, events, "Dentist", at(4, 9), at(4, 10))
    _create(run, events, "Later", at(20, 9), at(20, 10))

    occurrences = run(events.get_occurrences(at(1, 0), at(8, 0)))

    assert [(o.title, o.start_time.day) for o in occurrences] == [
        ("Gym", 1), ("Gym", 3), ("Dentist", 4), ("Gym", 5), ("Gym", 7),
    ]
    assert occurrences[0].is_recurring is True
    assert occurrences[2].is_recurring is False


def test_monthly_occurrences_clamp_to_month_end():
    event = _event(
        at(31, 9, year=2024), at(31, 10, year=2024), recurrence=Recurrence.MONTHLY
    )

    starts = [o.start_time for o in expand_occurrences(event, at(1, 0, year=2024), at(1, 0, month=5, year=2024))]

    assert starts == [
        at(31, 9, year=2024),
        at(29, 9, month=2, year=2024),
        at(31, 9, month=3, year=2024),
        at(30, 9, month=4, year=2024),
    ]


def test_occurrences_stop_at_recurrence_end():
    event = _event(
        at(6, 18), at(6, 19), recurrence=Recurrence.WEEKLY, recurrence_end_date=at(20, 18)
    )

    starts = [o.start_time.day for o in expand_occurrences(event, at(1, 0), at(1, 0, month=3))]

    assert starts == [6, 13, 20]


def test_occurrence_window_is_half_open():
    event = _event(at(1, 9), at(1, 10), recurrence=Recurrence.DAILY)

    starts = [o.start_time.day for o in expand_occurrences(event, at(2, 10), at(4, 9))]

    # Day 2 ends exactly at the window start and day 4 starts exactly at its end.
    assert starts == [3]


def test_yearly_occurrence_from_leap_day():
    event = _event(at(29, 9, month=2, year=2024), at(29, 10, month=2, year=2024), recurrence=Recurrence.YEARLY)

    starts = [o.start_time for o in expand_occurrences(event, at(1, 0, year=2025), at(1, 0, year=2026))]

    assert starts == [at(28, 9, month=2, year=2025)]


def test_calendar_helpers():
    wednesday = at(15, 13)
    sunday = at(12, 8)

    assert week_bounds(wednesday)[0] == at(12, 0)
    assert week_bounds(sunday)[0] == at(12, 0)
    assert week_bounds(wednesday)[1] == at(18, 23, 59) + timedelta(seconds=59, microseconds=999999)
    assert day_bounds(wednesday) == (at(15, 0), at(16, 0) - timedelta(microseconds=1))
    assert add_months(at(31, 0), 1) == at(28, 0, month=2)
    assert add_months(at(31, 0, month=12, year=2024), 2) == at(28, 0, month=2, year=2025)


def test_stats():
    now = utc_now()
    stats = calculate_event_stats([
        _event(now + timedelta(days=1), now + timedelta(days=1, hours=1), recurrence=Recurrence.WEEKLY),
        _event(now - timedelta(days=1), now - timedelta(hours=23), is_all_day=True),
        _event(now + timedelta(days=2), now + timedelta(days=2, hours=1), is_cancelled=True),
    ])

    assert stats.total == 3
    assert stats.upcoming == 1
    assert stats.past == 1
    assert stats.cancelled == 1
    assert stats.all_day == 1
    assert stats.recurring == 1
    assert stats.by_recurrence["weekly"] == 1
    assert stats.by_recurrence["none"] == 2
