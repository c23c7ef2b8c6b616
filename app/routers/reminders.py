"""Reminder endpoints - subscriptions and manual reminder runs."""
from fastapi import APIRouter, Depends

from app.database import get_database
from app.models.reminder import (
    ReminderSubscription,
    ReminderSubscriptionUpdate,
    ReminderTickReport,
    ReminderType,
)
from app.routers.auth import get_current_user_id, verify_scheduler_secret
from app.services.email_service import EmailService, get_email_service
from app.services.reminder_service import ReminderService
from app.utils.clock import Clock, get_clock


router = APIRouter(prefix="/reminders", tags=["reminders"])


@router.get("", response_model=list[ReminderSubscription])
async def list_subscriptions(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    email_service: EmailService = Depends(get_email_service),
    clock: Clock = Depends(get_clock),
):
    """
    List the authenticated user's reminder subscriptions.

    - Requires authentication
    """
    service = ReminderService(db, email_service, clock)
    return await service.list_subscriptions(user_id=user_id)


@router.put("/{reminder_type}", response_model=ReminderSubscription)
async def set_subscription(
    reminder_type: ReminderType,
    update: ReminderSubscriptionUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    email_service: EmailService = Depends(get_email_service),
    clock: Clock = Depends(get_clock),
):
    """
    Opt in or out of a reminder type.

    - Requires authentication
    - Creates the subscription on first use
    """
    service = ReminderService(db, email_service, clock)
    return await service.set_subscription(
        user_id=user_id,
        reminder_type=reminder_type,
        is_active=update.is_active,
    )


@router.post(
    "/run",
    response_model=ReminderTickReport,
    dependencies=[Depends(verify_scheduler_secret)],
)
async def run_reminders(
    db=Depends(get_database),
    email_service: EmailService = Depends(get_email_service),
    clock: Clock = Depends(get_clock),
):
    """
    Evaluate every due subscription now.

    - Requires the X-Scheduler-Secret header, not a user token
    - Same work as one scheduler tick
    """
    service = ReminderService(db, email_service, clock)
    return await service.run_tick()
