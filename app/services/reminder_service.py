"""Reminder service - evaluates subscriptions and sends reminder emails."""
import asyncio
import logging
from datetime import datetime
from weakref import WeakValueDictionary

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from app.errors import StorageUnavailableError
from app.models.reminder import (
    ReminderOutcome,
    ReminderSubscription,
    ReminderTickReport,
    ReminderType,
)
from app.services.email_service import EmailService
from app.services.reminder_rules import THROTTLE_WINDOW, evaluate_reminder, is_throttled
from app.services.time_tracking_service import TimeTrackingService
from app.services.user_service import UserService
from app.utils.clock import Clock

logger = logging.getLogger(__name__)

# One lock per subscription id, shared by every service instance in the
# process, so overlapping ticks cannot send the same reminder twice.
# Entries disappear once no coroutine holds or awaits the lock.
_subscription_locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()


def _lock_for(subscription_id: str) -> asyncio.Lock:
    lock = _subscription_locks.get(subscription_id)
    if lock is None:
        lock = asyncio.Lock()
        _subscription_locks[subscription_id] = lock
    return lock


class ReminderService:
    """Service for reminder subscriptions and reminder delivery."""

    def __init__(self, db, email_service: EmailService, clock: Clock):
        """Initialize service with database connection, email sender and clock."""
        self.db = db
        self.email_service = email_service
        self.clock = clock
        self.reminders = db["email_reminders"]
        self.time_tracking = TimeTrackingService(db, clock)
        self.users = UserService(db)

    def _doc_to_subscription(self, doc: dict) -> ReminderSubscription:
        return ReminderSubscription(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            reminder_type=doc["reminder_type"],
            is_active=doc.get("is_active", True),
            last_sent=doc.get("last_sent"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def list_subscriptions(self, user_id: str) -> list[ReminderSubscription]:
        """
        List a user's reminder subscriptions.

        Args:
            user_id: User ID

        Returns:
            Subscriptions ordered by reminder type
        """
        try:
            cursor = self.reminders.find({"user_id": user_id}).sort("reminder_type", 1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        return [self._doc_to_subscription(doc) for doc in docs]

    async def set_subscription(
        self,
        user_id: str,
        reminder_type: ReminderType,
        is_active: bool,
    ) -> ReminderSubscription:
        """
        Opt a user in or out of a reminder type.

        Creates the subscription on first opt-in; last_sent is preserved.

        Args:
            user_id: User ID
            reminder_type: Reminder type
            is_active: Whether reminders of this type should be sent

        Returns:
            The stored subscription
        """
        now = self.clock.now()
        try:
            doc = await self.reminders.find_one_and_update(
                {"user_id": user_id, "reminder_type": reminder_type.value},
                {
                    "$set": {"is_active": is_active, "updated_at": now},
                    "$setOnInsert": {"last_sent": None, "created_at": now},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        return self._doc_to_subscription(doc)

    async def get_due_subscriptions(self) -> list[ReminderSubscription]:
        """
        Active subscriptions that have never sent or sent 24h+ ago.
        """
        cutoff = self.clock.now() - THROTTLE_WINDOW
        try:
            cursor = self.reminders.find({
                "is_active": True,
                "$or": [
                    {"last_sent": None},
                    {"last_sent": {"$lt": cutoff}},
                ],
            })
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        return [self._doc_to_subscription(doc) for doc in docs]

    async def process_subscription(
        self,
        subscription: ReminderSubscription,
    ) -> ReminderOutcome:
        """
        Evaluate one subscription and send its reminder if it is due.

        last_sent only advances after the email service reports success,
        so a failed send is retried on the next tick.

        Args:
            subscription: Subscription snapshot

        Returns:
            sent, skipped or failed
        """
        async with _lock_for(subscription.id):
            return await self._process(subscription)

    async def _refresh(self, subscription: ReminderSubscription):
        try:
            doc = await self.reminders.find_one({"_id": self._object_id(subscription.id)})
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        return self._doc_to_subscription(doc) if doc else None

    async def _process(self, subscription: ReminderSubscription) -> ReminderOutcome:
        # The snapshot may predate a send finished by an overlapping tick
        subscription = await self._refresh(subscription)
        if subscription is None or not subscription.is_active:
            return ReminderOutcome.SKIPPED

        if is_throttled(subscription.last_sent, self.clock.now()):
            return ReminderOutcome.SKIPPED

        last_entry = await self.time_tracking.get_last_entry(subscription.user_id)
        message = evaluate_reminder(
            subscription.reminder_type, last_entry, self.clock.now()
        )
        if message is None:
            return ReminderOutcome.SKIPPED

        email = await self.users.get_email(subscription.user_id)
        if not email:
            logger.warning("No email for user %s, skipping reminder", subscription.user_id)
            return ReminderOutcome.SKIPPED

        logger.info("Sending %s reminder to %s", subscription.reminder_type.value, email)
        delivered = await self.email_service.send(email, message.subject, message.html)
        if not delivered:
            logger.warning(
                "Reminder %s for %s not delivered, will retry next tick",
                subscription.id,
                email,
            )
            return ReminderOutcome.FAILED

        await self._mark_sent(subscription, self.clock.now())
        return ReminderOutcome.SENT

    async def _mark_sent(self, subscription: ReminderSubscription, sent_at: datetime) -> None:
        try:
            result = await self.reminders.update_one(
                {
                    "_id": self._object_id(subscription.id),
                    "last_sent": subscription.last_sent,
                },
                {"$set": {"last_sent": sent_at, "updated_at": sent_at}},
            )
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if result.modified_count == 0:
            logger.warning(
                "Reminder %s last_sent changed concurrently, keeping the stored value",
                subscription.id,
            )

    def _object_id(self, subscription_id: str):
        if ObjectId.is_valid(subscription_id):
            return ObjectId(subscription_id)
        return subscription_id

    async def run_tick(self) -> ReminderTickReport:
        """
        Process every due subscription once.

        Subscriptions are independent and run concurrently. Storage
        errors propagate; email failures are counted and retried later.

        Returns:
            Counts of processed, sent, skipped and failed subscriptions
        """
        logger.info("Starting reminder check...")
        subscriptions = await self.get_due_subscriptions()
        logger.info("Found %d reminders to process", len(subscriptions))

        outcomes = await asyncio.gather(
            *(self.process_subscription(subscription) for subscription in subscriptions)
        )

        report = ReminderTickReport(processed=len(outcomes))
        for outcome in outcomes:
            if outcome == ReminderOutcome.SENT:
                report.sent += 1
            elif outcome == ReminderOutcome.FAILED:
                report.failed += 1
            else:
                report.skipped += 1

        logger.info(
            "Reminder check done: %d sent, %d skipped, %d failed",
            report.sent,
            report.skipped,
            report.failed,
        )
        return report
