"""Time tracking service - business logic for work sessions."""
import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.errors import AlreadyActiveError, NoActiveSessionError, StorageUnavailableError
from app.models.time_entry import HoursSummary, TimeEntry
from app.utils.clock import Clock
from app.utils.periods import started_on_day, started_this_week

logger = logging.getLogger(__name__)

MILLISECONDS_PER_HOUR = 3_600_000


def calculate_total_hours(start_time: datetime, end_time: datetime) -> float:
    """
    Calculate the hours between start and end, rounded half-up to 2 decimals.

    Args:
        start_time: Session start
        end_time: Session end

    Returns:
        Duration in hours

    Example:
        >>> calculate_total_hours(datetime(2024, 1, 1, 23, 50), datetime(2024, 1, 2, 0, 10))
        0.33
    """
    milliseconds = (end_time - start_time).total_seconds() * 1000
    hours = milliseconds / MILLISECONDS_PER_HOUR
    rounded = Decimal(repr(hours)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(rounded)


class TimeTrackingService:
    """Service for starting, ending and summarising work sessions."""

    def __init__(self, db, clock: Clock):
        """Initialize service with database connection and clock."""
        self.db = db
        self.clock = clock
        self.time_entries = db["time_entries"]

    def _doc_to_entry(self, doc: dict) -> TimeEntry:
        """
        Convert database document to TimeEntry model.
        """
        return TimeEntry(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            start_time=doc["start_time"],
            end_time=doc.get("end_time"),
            total_hours=doc.get("total_hours"),
            notes=doc.get("notes"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def _find_active(self, user_id: str) -> Optional[dict]:
        try:
            return await self.time_entries.find_one({
                "user_id": user_id,
                "is_active": True,
            })
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

    async def start_session(
        self,
        user_id: str,
        notes: Optional[str] = None,
    ) -> TimeEntry:
        """
        Start a new work session.

        Args:
            user_id: User ID
            notes: Optional notes for the session

        Returns:
            Created time entry

        Raises:
            AlreadyActiveError: If a session is already running
            StorageUnavailableError: If the database call fails
        """
        if await self._find_active(user_id):
            raise AlreadyActiveError()

        now = self.clock.now()
        entry_doc = {
            "user_id": user_id,
            "start_time": now,
            "end_time": None,
            "total_hours": None,
            "notes": notes,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.time_entries.insert_one(entry_doc)
        except DuplicateKeyError as e:
            # Lost a race against a concurrent start for the same user
            raise AlreadyActiveError() from e
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        entry_doc["_id"] = result.inserted_id
        logger.info("Started work session %s for user %s", result.inserted_id, user_id)

        return self._doc_to_entry(entry_doc)

    async def end_session(
        self,
        user_id: str,
        notes: Optional[str] = None,
    ) -> TimeEntry:
        """
        End the running work session.

        Notes replace the stored notes only when a non-empty value is given.

        Args:
            user_id: User ID
            notes: Optional closing notes

        Returns:
            Updated time entry with end_time and total_hours

        Raises:
            NoActiveSessionError: If no session is running
            StorageUnavailableError: If the database call fails
        """
        active = await self._find_active(user_id)
        if not active:
            raise NoActiveSessionError()

        end_time = self.clock.now()
        update_doc = {
            "end_time": end_time,
            "total_hours": calculate_total_hours(active["start_time"], end_time),
            "is_active": False,
            "updated_at": end_time,
        }
        if notes:
            update_doc["notes"] = notes

        try:
            updated_doc = await self.time_entries.find_one_and_update(
                {"_id": active["_id"], "is_active": True},
                {"$set": update_doc},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if not updated_doc:
            # Ended by a concurrent request between the read and the update
            raise NoActiveSessionError()

        logger.info(
            "Ended work session %s for user %s (%.2f h)",
            active["_id"],
            user_id,
            update_doc["total_hours"],
        )

        return self._doc_to_entry(updated_doc)

    async def get_active_session(self, user_id: str) -> Optional[TimeEntry]:
        """
        Get the running session, if any.

        Args:
            user_id: User ID

        Returns:
            Running time entry, or None
        """
        doc = await self._find_active(user_id)
        if not doc:
            return None

        return self._doc_to_entry(doc)

    async def current_duration(self, user_id: str) -> float:
        """
        Live duration of the running session in hours, unrounded.

        Returns 0.0 when no session is running.
        """
        active = await self.get_active_session(user_id)
        if not active:
            return 0.0

        return self._elapsed_hours(active)

    def _elapsed_hours(self, entry: TimeEntry) -> float:
        delta = self.clock.now() - entry.start_time
        return delta.total_seconds() * 1000 / MILLISECONDS_PER_HOUR

    async def get_last_entry(self, user_id: str) -> Optional[TimeEntry]:
        """Get the user's most recently started entry."""
        try:
            doc = await self.time_entries.find_one(
                {"user_id": user_id},
                sort=[("start_time", -1)],
            )
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if not doc:
            return None

        return self._doc_to_entry(doc)

    async def list_entries(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[TimeEntry]:
        """
        List time entries for a user with optional filtering.

        Args:
            user_id: User ID
            start_date: Optional lower bound on start_time
            end_date: Optional upper bound on start_time

        Returns:
            List of time entries, most recent first
        """
        query = {
            "user_id": user_id,
        }

        if start_date or end_date:
            query["start_time"] = {}
            if start_date:
                query["start_time"]["$gte"] = start_date
            if end_date:
                query["start_time"]["$lte"] = end_date

        try:
            cursor = self.time_entries.find(query).sort("start_time", -1)
            entry_docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        return [self._doc_to_entry(doc) for doc in entry_docs]

    async def aggregate_hours(
        self,
        user_id: str,
        predicate: Callable[[TimeEntry], bool],
    ) -> float:
        """
        Sum total_hours over the user's entries matching predicate.

        Entries without total_hours (running sessions) count as 0.

        Args:
            user_id: User ID
            predicate: Filter applied to each entry

        Returns:
            Total hours, 0.0 when nothing matches
        """
        entries = await self.list_entries(user_id)
        return sum_hours(entries, predicate)

    async def get_summary(self, user_id: str) -> HoursSummary:
        """
        Hours worked today and this week plus the running session.
        """
        entries = await self.list_entries(user_id)
        active = next((entry for entry in entries if entry.is_active), None)

        return HoursSummary(
            today_hours=sum_hours(entries, started_on_day(self.clock.now())),
            week_hours=sum_hours(entries, started_this_week(self.clock.now())),
            is_working=active is not None,
            current_hours=self._elapsed_hours(active) if active else 0.0,
            active_entry=active,
        )


def sum_hours(
    entries: list[TimeEntry],
    predicate: Callable[[TimeEntry], bool],
) -> float:
    """Sum total_hours of the entries matching predicate."""
    return sum(
        (entry.total_hours or 0.0 for entry in entries if predicate(entry)),
        0.0,
    )
