"""Reminder eligibility rules.

Two notions of "day" live here and are kept apart on purpose: the send
throttle is a rolling 24 hour window, while the daily check-in compares
calendar dates in the reference timezone.
"""
from datetime import datetime, timedelta
from typing import Optional

from app.models.reminder import ReminderMessage, ReminderType
from app.models.time_entry import TimeEntry
from app.utils.clock import to_local
from app.utils.email_templates import render_reminder

THROTTLE_WINDOW = timedelta(hours=24)
CHECKIN_HOUR = 9
END_DAY_HOUR = 18
MONDAY = 0


def is_throttled(last_sent: Optional[datetime], now: datetime) -> bool:
    """
    Whether a subscription sent less than 24 hours before now.

    A last_sent in the future also counts as throttled.

    Example:
        >>> is_throttled(None, datetime(2024, 1, 1))
        False
        >>> is_throttled(datetime(2024, 1, 1, 8), datetime(2024, 1, 2, 7))
        True
    """
    if last_sent is None:
        return False
    if now.tzinfo is not None:
        last_sent = to_local(last_sent, now.tzinfo)
    return now - last_sent < THROTTLE_WINDOW


def evaluate_reminder(
    reminder_type: ReminderType,
    last_entry: Optional[TimeEntry],
    now: datetime,
) -> Optional[ReminderMessage]:
    """
    Decide whether a reminder fires and build its message.

    Args:
        reminder_type: Subscription type
        last_entry: The subscriber's most recent time entry, if any
        now: Current time in the reference timezone

    Returns:
        The message to send, or None if the rule does not fire
    """
    if reminder_type == ReminderType.DAILY_CHECKIN:
        if now.hour >= CHECKIN_HOUR and not _started_today(last_entry, now):
            return ReminderMessage(
                reminder_type=reminder_type,
                subject="Start your day",
                html=render_reminder(
                    "Start your day",
                    "Don't forget to record the start of your work day today!",
                ),
            )

    elif reminder_type == ReminderType.END_DAY:
        if now.hour >= END_DAY_HOUR and last_entry is not None and last_entry.end_time is None:
            return ReminderMessage(
                reminder_type=reminder_type,
                subject="Close your work session",
                html=render_reminder(
                    "Close your work session",
                    "Don't forget to record the end of your work day!",
                ),
            )

    elif reminder_type == ReminderType.WEEKLY_SUMMARY:
        if now.weekday() == MONDAY:
            return ReminderMessage(
                reminder_type=reminder_type,
                subject="Review your week",
                html=render_reminder(
                    "Review your week",
                    "Take a moment to review your weekly summary of hours worked.",
                ),
            )

    return None


def _started_today(entry: Optional[TimeEntry], now: datetime) -> bool:
    if entry is None:
        return False
    start = entry.start_time
    if now.tzinfo is not None:
        start = to_local(start, now.tzinfo)
    return start.date() == now.date()
