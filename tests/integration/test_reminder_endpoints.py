"""Integration tests for reminder endpoints."""
import pytest
from datetime import datetime, timezone
from bson import ObjectId


def _subscription_doc(reminder_type, is_active=True):
    created = datetime(2024, 1, 2, tzinfo=timezone.utc)
    return {
        "_id": ObjectId(),
        "user_id": "user123",
        "reminder_type": reminder_type,
        "is_active": is_active,
        "last_sent": None,
        "created_at": created,
        "updated_at": created,
    }


@pytest.mark.asyncio
class TestReminderSubscriptions:
    """Tests for managing subscriptions."""

    async def test_list_subscriptions(self, app_client, stub_find):
        """Test listing subscriptions."""
        stub_find(app_client.db["email_reminders"], [_subscription_doc("end_day")])

        response = await app_client.get("/reminders")

        assert response.status_code == 200
        data = response.json()
        assert data[0]["reminder_type"] == "end_day"
        assert data[0]["last_sent"] is None

    async def test_opt_in(self, app_client):
        """Test opting in to a reminder type."""
        reminders = app_client.db["email_reminders"]
        reminders.find_one_and_update.return_value = _subscription_doc("weekly_summary")

        response = await app_client.put("/reminders/weekly_summary", json={"is_active": True})

        assert response.status_code == 200
        assert response.json()["reminder_type"] == "weekly_summary"

    async def test_unknown_type(self, app_client):
        """Test unknown reminder types are rejected."""
        response = await app_client.put("/reminders/hourly", json={"is_active": True})

        assert response.status_code == 422


@pytest.mark.asyncio
class TestReminderRun:
    """Tests for triggering a reminder pass."""

    async def test_run_reminders(self, app_client, stub_find, monkeypatch):
        """Test a run with the scheduler secret reports outcomes."""
        from app.config import settings

        monkeypatch.setattr(settings, "reminder_run_secret", "cron-secret")
        # Clock is frozen on a Wednesday at 10:00: check-in fires, weekly does not
        checkin = _subscription_doc("daily_checkin")
        weekly = _subscription_doc("weekly_summary")
        docs = {checkin["_id"]: checkin, weekly["_id"]: weekly}
        reminders = app_client.db["email_reminders"]
        stub_find(reminders, list(docs.values()))
        reminders.find_one.side_effect = lambda filter_: docs[filter_["_id"]]
        app_client.db["time_entries"].find_one.return_value = None
        app_client.db["users"].find_one.return_value = {
            "_id": "user123",
            "email": "ana@example.com",
            "name": "Ana",
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }

        response = await app_client.post(
            "/reminders/run", headers={"X-Scheduler-Secret": "cron-secret"}
        )

        assert response.status_code == 200
        assert response.json() == {"processed": 2, "sent": 1, "skipped": 1, "failed": 0}
        app_client.email_service.send.assert_awaited_once()

    async def test_signed_in_user_cannot_run(self, app_client, monkeypatch):
        """Test an ordinary signed-in caller cannot email every subscriber."""
        from app.config import settings

        monkeypatch.setattr(settings, "reminder_run_secret", "cron-secret")

        response = await app_client.post("/reminders/run")

        assert response.status_code == 403
        app_client.db["email_reminders"].find.assert_not_called()
        app_client.email_service.send.assert_not_called()

    async def test_wrong_secret(self, app_client, monkeypatch):
        """Test a wrong secret is refused."""
        from app.config import settings

        monkeypatch.setattr(settings, "reminder_run_secret", "cron-secret")

        response = await app_client.post(
            "/reminders/run", headers={"X-Scheduler-Secret": "guess"}
        )

        assert response.status_code == 403

    async def test_disabled_without_secret(self, app_client, monkeypatch):
        """Test the endpoint is closed when no secret is configured."""
        from app.config import settings

        monkeypatch.setattr(settings, "reminder_run_secret", "")

        response = await app_client.post(
            "/reminders/run", headers={"X-Scheduler-Secret": ""}
        )

        assert response.status_code == 403
