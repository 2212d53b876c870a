"""User schemas."""

from datetime import datetime
from typing import Annotated

import pytz
from pydantic import AfterValidator, BaseModel, ConfigDict


def _check_timezone(value: str) -> str:
    if value not in pytz.all_timezones_set:
        raise ValueError(f"Unknown timezone: {value}")
    return value


TimezoneName = Annotated[str, AfterValidator(_check_timezone)]


class UserBase(BaseModel):
    """Base user schema."""

    name: str
    timezone: TimezoneName = "UTC"


class UserCreate(UserBase):
    """Schema for creating a user."""

    pass


class UserUpdate(BaseModel):
    """Schema for updating a user."""

    name: str | None = None
    timezone: TimezoneName | None = None


class User(UserBase):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime
