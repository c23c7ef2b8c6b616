"""Tests for UserService."""
import pytest
from datetime import datetime, timezone
from bson import ObjectId
from pymongo.errors import NetworkTimeout


@pytest.mark.asyncio
class TestUserService:
    """Tests for profile lookups."""

    async def test_get_user_string_id(self, mock_db):
        """Test profiles with string ids are looked up directly."""
        from app.services.user_service import UserService

        users = mock_db["users"]
        users.find_one.return_value = {
            "_id": "9b2d7c1e-0000-4000-8000-000000000001",
            "email": "ana@example.com",
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }

        user = await UserService(mock_db).get_user("9b2d7c1e-0000-4000-8000-000000000001")

        assert user.email == "ana@example.com"
        assert user.name == "ana"  # defaults to the email's local part
        assert users.find_one.call_args[0][0] == {"_id": "9b2d7c1e-0000-4000-8000-000000000001"}

    async def test_get_user_object_id(self, mock_db):
        """Test ObjectId-shaped ids match either representation."""
        from app.services.user_service import UserService

        users = mock_db["users"]
        users.find_one.return_value = None
        object_id = ObjectId()

        user = await UserService(mock_db).get_user(str(object_id))

        assert user is None
        assert users.find_one.call_args[0][0] == {"_id": {"$in": [str(object_id), object_id]}}

    async def test_get_email(self, mock_db):
        """Test the email shortcut."""
        from app.services.user_service import UserService

        mock_db["users"].find_one.return_value = {
            "_id": "user123",
            "email": "ana@example.com",
            "name": "Ana",
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }

        assert await UserService(mock_db).get_email("user123") == "ana@example.com"

    async def test_storage_error(self, mock_db):
        """Test database failures are wrapped."""
        from app.errors import StorageUnavailableError
        from app.services.user_service import UserService

        mock_db["users"].find_one.side_effect = NetworkTimeout("timed out")

        with pytest.raises(StorageUnavailableError):
            await UserService(mock_db).get_email("user123")
