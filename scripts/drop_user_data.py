"""Drop all tracking data for a specific user."""
import asyncio
import sys

from motor.motor_asyncio import AsyncIOMotorClient

COLLECTIONS = {
    "time_entries": "user_id",
    "email_reminders": "user_id",
    "team_invitations": "team_owner_id",
    "team_members": "team_owner_id",
    "tasks": "user_id",
}


async def drop_user_data(mongodb_url: str, db_name: str, user_id: str):
    """Delete all documents owned by a user."""
    client = AsyncIOMotorClient(mongodb_url)
    db = client[db_name]

    for collection_name, owner_field in COLLECTIONS.items():
        result = await db[collection_name].delete_many({owner_field: user_id})
        print(f"Deleted {result.deleted_count} documents from {collection_name}")

    client.close()
    print("Done!")

if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("Usage: python drop_user_data.py <mongodb_url> <db_name> <user_id>")
        sys.exit(1)

    asyncio.run(drop_user_data(sys.argv[1], sys.argv[2], sys.argv[3]))
