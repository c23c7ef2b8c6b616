"""User profile model definitions."""
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class User(BaseModel):
    """User profile as written by the identity provider."""

    id: str = Field(alias="_id", serialization_alias="id")
    email: EmailStr
    name: str
    created_at: datetime

    model_config = {"populate_by_name": True}
