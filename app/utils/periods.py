"""Date predicates used to aggregate hours over calendar periods."""
from datetime import datetime, timedelta, timezone
from typing import Callable

from app.models.time_entry import TimeEntry
from app.utils.clock import to_local

EntryPredicate = Callable[[TimeEntry], bool]


def week_start(now: datetime) -> datetime:
    """
    Return the most recent Sunday at 00:00:00 in now's timezone.

    Example:
        >>> week_start(datetime(2024, 1, 3, 15, 30))  # a Wednesday
        datetime.datetime(2023, 12, 31, 0, 0)
    """
    # Python weekdays: Monday == 0, Sunday == 6
    days_since_sunday = (now.weekday() + 1) % 7
    start = now - timedelta(days=days_since_sunday)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def started_on_day(now: datetime) -> EntryPredicate:
    """Match entries whose start_time falls on now's calendar date."""
    today = now.date()

    def predicate(entry: TimeEntry) -> bool:
        return _local(entry.start_time, now).date() == today

    return predicate


def started_this_week(now: datetime) -> EntryPredicate:
    """Match entries started on or after the most recent Sunday midnight."""
    start = week_start(now)

    def predicate(entry: TimeEntry) -> bool:
        return _local(entry.start_time, now) >= start

    return predicate


def _local(value: datetime, now: datetime) -> datetime:
    if now.tzinfo is None:
        # naive "now" is read as UTC, like stored values
        return to_local(value, timezone.utc).replace(tzinfo=None)
    return to_local(value, now.tzinfo)
