"""Tests for calendar period predicates."""
from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def _entry(start_time):
    from app.models.time_entry import TimeEntry

    return TimeEntry(
        _id="entry1",
        user_id="user123",
        start_time=start_time,
        created_at=start_time,
        updated_at=start_time,
    )


class TestWeekStart:
    """Tests for week_start."""

    def test_midweek(self):
        """Test a Wednesday maps back to the previous Sunday midnight."""
        from app.utils.periods import week_start

        now = datetime(2024, 1, 3, 15, 30, tzinfo=timezone.utc)

        assert week_start(now) == datetime(2023, 12, 31, 0, 0, tzinfo=timezone.utc)

    def test_sunday_is_its_own_start(self):
        """Test Sunday afternoon maps to the same Sunday."""
        from app.utils.periods import week_start

        now = datetime(2023, 12, 31, 15, 0)

        assert week_start(now) == datetime(2023, 12, 31, 0, 0)

    def test_saturday(self):
        """Test Saturday maps back six days."""
        from app.utils.periods import week_start

        now = datetime(2024, 1, 6, 23, 59)

        assert week_start(now) == datetime(2023, 12, 31, 0, 0)


class TestStartedOnDay:
    """Tests for the calendar-day predicate."""

    def test_same_date(self):
        """Test entries started earlier today match."""
        from app.utils.periods import started_on_day

        now = datetime(2024, 1, 3, 10, 0, tzinfo=timezone.utc)
        predicate = started_on_day(now)

        assert predicate(_entry(datetime(2024, 1, 3, 0, 1, tzinfo=timezone.utc)))
        assert not predicate(_entry(datetime(2024, 1, 2, 23, 59, tzinfo=timezone.utc)))

    def test_uses_reference_timezone(self):
        """Test the date is compared in now's timezone, not UTC."""
        from app.utils.periods import started_on_day

        madrid = ZoneInfo("Europe/Madrid")
        now = datetime(2024, 1, 3, 0, 30, tzinfo=madrid)
        predicate = started_on_day(now)

        # 23:15 UTC on the 2nd is 00:15 on the 3rd in Madrid
        assert predicate(_entry(datetime(2024, 1, 2, 23, 15, tzinfo=timezone.utc)))
        assert not predicate(_entry(datetime(2024, 1, 2, 22, 45, tzinfo=timezone.utc)))

    def test_naive_stored_values_are_utc(self):
        """Test naive start times are read as UTC."""
        from app.utils.periods import started_on_day

        new_york = ZoneInfo("America/New_York")
        now = datetime(2024, 1, 3, 20, 0, tzinfo=new_york)
        predicate = started_on_day(now)

        # 02:00 UTC on the 4th is 21:00 on the 3rd in New York
        assert predicate(_entry(datetime(2024, 1, 4, 2, 0)))


class TestStartedThisWeek:
    """Tests for the week predicate."""

    def test_boundary(self):
        """Test Sunday midnight is included and Saturday night is not."""
        from app.utils.periods import started_this_week

        now = datetime(2024, 1, 3, 10, 0, tzinfo=timezone.utc)
        predicate = started_this_week(now)

        assert predicate(_entry(datetime(2023, 12, 31, 0, 0, tzinfo=timezone.utc)))
        assert not predicate(_entry(datetime(2023, 12, 30, 23, 59, 59, tzinfo=timezone.utc)))
        assert predicate(_entry(datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc)))
