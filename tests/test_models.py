"""Tests for Pydantic models."""
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError


class TestTimeEntryModel:
    """Tests for TimeEntry model."""

    def test_populate_by_id_alias(self):
        """Test entries load from Mongo's _id and serialize as id."""
        from app.models.time_entry import TimeEntry

        now = datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc)
        entry = TimeEntry(
            _id="abc",
            user_id="user123",
            start_time=now,
            created_at=now,
            updated_at=now,
        )

        assert entry.id == "abc"
        assert entry.model_dump(by_alias=True)["id"] == "abc"

    def test_is_active_follows_end_time(self):
        """Test a running entry has no end time and no total."""
        from app.models.time_entry import TimeEntry

        now = datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc)
        running = TimeEntry(_id="a", user_id="u", start_time=now, created_at=now, updated_at=now)
        closed = running.model_copy(update={"end_time": now, "total_hours": 0.0})

        assert running.is_active
        assert running.total_hours is None
        assert not closed.is_active

    def test_session_requests_default_empty(self):
        """Test notes are optional when starting and ending."""
        from app.models.time_entry import SessionEnd, SessionStart

        assert SessionStart().notes is None
        assert SessionEnd(notes="done").notes == "done"


class TestReminderModels:
    """Tests for reminder models."""

    def test_reminder_type_values(self):
        """Test ReminderType has the stored values."""
        from app.models.reminder import ReminderType

        assert ReminderType.DAILY_CHECKIN.value == "daily_checkin"
        assert ReminderType.END_DAY.value == "end_day"
        assert ReminderType.WEEKLY_SUMMARY.value == "weekly_summary"

    def test_invalid_reminder_type(self):
        """Test unknown reminder types are rejected."""
        from app.models.reminder import ReminderSubscription

        now = datetime(2024, 1, 3, tzinfo=timezone.utc)
        with pytest.raises(ValidationError):
            ReminderSubscription(
                _id="r1",
                user_id="u",
                reminder_type="hourly",
                created_at=now,
                updated_at=now,
            )

    def test_tick_report_defaults(self):
        """Test an empty tick reports zeros."""
        from app.models.reminder import ReminderTickReport

        assert ReminderTickReport().model_dump() == {
            "processed": 0,
            "sent": 0,
            "skipped": 0,
            "failed": 0,
        }


class TestTeamModels:
    """Tests for team models."""

    def test_invitation_create_requires_valid_email(self):
        """Test invitations need a valid email address."""
        from app.models.team import InvitationCreate

        with pytest.raises(ValidationError):
            InvitationCreate(email="nope")

        assert InvitationCreate(email="bo@example.com").name is None

    def test_invitation_status_values(self):
        """Test InvitationStatus values."""
        from app.models.team import InvitationStatus

        assert [s.value for s in InvitationStatus] == ["pending", "accepted", "expired"]
