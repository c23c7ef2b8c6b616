"""Time entry model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TimeEntryBase(BaseModel):
    """Base time entry fields."""

    start_time: datetime
    end_time: Optional[datetime] = None
    total_hours: Optional[float] = None
    notes: Optional[str] = None


class SessionStart(BaseModel):
    """Request model for starting a work session."""

    notes: Optional[str] = None


class SessionEnd(BaseModel):
    """Request model for ending a work session."""

    notes: Optional[str] = None


class TimeEntry(TimeEntryBase):
    """Full time entry model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}

    @property
    def is_active(self) -> bool:
        """An entry without an end time is a running session."""
        return self.end_time is None


class CurrentSession(BaseModel):
    """The running session, if any, with its live duration in hours."""

    entry: Optional[TimeEntry] = None
    current_hours: float = 0.0


class HoursSummary(BaseModel):
    """Aggregated hours for the dashboard."""

    today_hours: float
    week_hours: float
    is_working: bool
    current_hours: float
    active_entry: Optional[TimeEntry] = None
