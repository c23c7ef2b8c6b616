"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from app.config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure the indexes exist."""
        self.client = AsyncIOMotorClient(settings.mongodb_url, tz_aware=True)
        self.db = self.client[settings.mongodb_db_name]
        await ensure_indexes(self.db)
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]


async def ensure_indexes(db) -> None:
    """
    Create the indexes the services rely on.

    The partial unique index on time_entries allows at most one open
    session per user; concurrent starts lose with DuplicateKeyError.
    """
    time_entries = db["time_entries"]
    await time_entries.create_index(
        [("user_id", ASCENDING)],
        name="one_active_session_per_user",
        unique=True,
        partialFilterExpression={"is_active": True},
    )
    await time_entries.create_index(
        [("user_id", ASCENDING), ("start_time", DESCENDING)],
        name="user_start_time",
    )

    reminders = db["email_reminders"]
    await reminders.create_index(
        [("user_id", ASCENDING), ("reminder_type", ASCENDING)],
        name="one_subscription_per_type",
        unique=True,
    )
    await reminders.create_index(
        [("is_active", ASCENDING), ("last_sent", ASCENDING)],
        name="active_last_sent",
    )

    invitations = db["team_invitations"]
    await invitations.create_index(
        "invitation_token", name="invitation_token", unique=True
    )
    await invitations.create_index(
        [("team_owner_id", ASCENDING), ("invitee_email", ASCENDING)],
        name="owner_invitee",
    )

    await db["team_members"].create_index(
        [("team_owner_id", ASCENDING), ("member_email", ASCENDING)],
        name="one_membership_per_email",
        unique=True,
    )

    tasks = db["tasks"]
    await tasks.create_index(
        [("user_id", ASCENDING), ("created_at", DESCENDING)],
        name="creator_created_at",
    )
    await tasks.create_index(
        [("assigned_to", ASCENDING), ("created_at", DESCENDING)],
        name="assignee_created_at",
    )


# Global database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db
