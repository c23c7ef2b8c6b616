"""User profile lookups."""
from typing import Optional

from bson import ObjectId
from pymongo.errors import PyMongoError

from app.errors import StorageUnavailableError
from app.models.user import User


def _id_filter(user_id: str) -> dict:
    # Profiles synced from the identity provider use string ids;
    # older documents may still carry ObjectIds.
    if ObjectId.is_valid(user_id):
        return {"_id": {"$in": [user_id, ObjectId(user_id)]}}
    return {"_id": user_id}


class UserService:
    """Read-only access to user profiles."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]

    async def get_user(self, user_id: str) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User object, or None if no profile exists
        """
        try:
            user_doc = await self.users.find_one(_id_filter(user_id))
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if not user_doc:
            return None

        return User(
            _id=str(user_doc["_id"]),
            email=user_doc["email"],
            name=user_doc.get("name") or user_doc["email"].split("@")[0],
            created_at=user_doc["created_at"],
        )

    async def get_email(self, user_id: str) -> Optional[str]:
        """Get the email address for a user, if known."""
        user = await self.get_user(user_id)
        return user.email if user else None
