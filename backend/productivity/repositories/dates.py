"""UTC calendar helpers shared by the domain repositories."""

from calendar import monthrange
from datetime import datetime, timedelta, timezone


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC, matching how the store writes them."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """First and last microsecond of the UTC day containing ``moment``."""
    start = as_utc(moment).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def week_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Sunday-to-Saturday UTC week containing ``moment``."""
    day_start, _ = day_bounds(moment)
    start = day_start - timedelta(days=(day_start.weekday() + 1) % 7)
    return start, start + timedelta(days=7) - timedelta(microseconds=1)


def add_months(value: datetime, months: int) -> datetime:
    # Jan 31 + 1 month lands on the last day of February.
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
