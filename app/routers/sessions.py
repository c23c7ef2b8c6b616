"""Work session endpoints - time tracking operations."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.database import get_database
from app.errors import AlreadyActiveError, NoActiveSessionError
from app.models.time_entry import (
    CurrentSession,
    HoursSummary,
    SessionEnd,
    SessionStart,
    TimeEntry,
)
from app.routers.auth import get_current_user_id
from app.services.time_tracking_service import TimeTrackingService
from app.utils.clock import Clock, get_clock


router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("/start", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def start_session(
    session_start: SessionStart,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    Start a work session.

    - Requires authentication
    - Only one session can run at a time
    """
    service = TimeTrackingService(db, clock)
    try:
        return await service.start_session(user_id=user_id, notes=session_start.notes)
    except AlreadyActiveError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/end", response_model=TimeEntry)
async def end_session(
    session_end: SessionEnd,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    End the running work session.

    - Requires authentication
    - Must have a running session
    - Notes are kept unless new ones are given
    """
    service = TimeTrackingService(db, clock)
    try:
        return await service.end_session(user_id=user_id, notes=session_end.notes)
    except NoActiveSessionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/current", response_model=CurrentSession)
async def get_current_session(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    Get the running session and its live duration in hours.

    - Requires authentication
    - entry is null and current_hours 0 when not working
    """
    service = TimeTrackingService(db, clock)
    entry = await service.get_active_session(user_id=user_id)
    if not entry:
        return CurrentSession()

    return CurrentSession(entry=entry, current_hours=await service.current_duration(user_id))


@router.get("/summary", response_model=HoursSummary)
async def get_summary(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    Hours worked today and this week (weeks start Sunday).

    - Requires authentication
    """
    service = TimeTrackingService(db, clock)
    return await service.get_summary(user_id=user_id)


@router.get("", response_model=list[TimeEntry])
async def list_entries(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    List time entries for the authenticated user.

    - Requires authentication
    - Optional filters: start_date, end_date
    - Results sorted by start_time descending (most recent first)
    """
    service = TimeTrackingService(db, clock)
    return await service.list_entries(
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
    )
