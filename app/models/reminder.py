"""Reminder subscription model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReminderType(str, Enum):
    """Kinds of reminder a user can opt into."""

    DAILY_CHECKIN = "daily_checkin"
    END_DAY = "end_day"
    WEEKLY_SUMMARY = "weekly_summary"


class ReminderOutcome(str, Enum):
    """Result of evaluating one subscription in a tick."""

    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


class ReminderSubscriptionUpdate(BaseModel):
    """Subscription opt-in / opt-out model."""

    is_active: bool = True


class ReminderSubscription(BaseModel):
    """Full reminder subscription model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    reminder_type: ReminderType
    is_active: bool = True
    last_sent: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}


class ReminderMessage(BaseModel):
    """Email content produced when a reminder fires."""

    reminder_type: ReminderType
    subject: str
    html: str


class ReminderTickReport(BaseModel):
    """Summary of one pass over the due subscriptions."""

    processed: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0
