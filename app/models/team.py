"""Team invitation and membership model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class InvitationStatus(str, Enum):
    """Invitation lifecycle states."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class InvitationCreate(BaseModel):
    """Invitation creation model."""

    email: EmailStr
    name: Optional[str] = None


class InvitationAccept(BaseModel):
    """Invitation acceptance model."""

    name: Optional[str] = None


class TeamInvitation(BaseModel):
    """Full invitation model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    team_owner_id: str
    invitee_email: EmailStr
    invitee_name: str
    role: str = "member"
    status: InvitationStatus = InvitationStatus.PENDING
    invitation_token: str
    expires_at: datetime
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}


class TeamMember(BaseModel):
    """An accepted member of a user's team."""

    id: str = Field(alias="_id", serialization_alias="id")
    team_owner_id: str
    member_id: str
    member_email: EmailStr
    member_name: str
    role: str = "member"
    status: str = "active"
    created_at: datetime

    model_config = {"populate_by_name": True}
