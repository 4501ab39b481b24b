"""Pydantic models for creating records in database."""

import re
from datetime import date

from pydantic import BaseModel, Field, field_validator

from chorecal.core.config import constants
from chorecal.domain.chore import RecurrenceSpec


def validate_email_shape(v: str | None) -> str | None:
    """Validate an optional email address."""
    if v is not None and not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", v):
        msg = "Email must be a valid address (e.g., alice@example.com)"
        raise ValueError(msg)
    return v


def validate_avatar_color(v: str | None) -> str | None:
    """Validate an optional #RRGGBB avatar colour."""
    if v is not None and not re.match(r"^#[0-9A-Fa-f]{6}$", v):
        msg = "Avatar must be a hex colour (e.g., #3B82F6)"
        raise ValueError(msg)
    return v


class ChoreCreate(BaseModel):
    """Pydantic model for creating a chore record."""

    title: str = Field(..., min_length=1, max_length=200, description="Chore title")
    description: str | None = Field(default=None, max_length=1000, description="Detailed description")
    assignee_id: str | None = Field(default=None, description="Team member ID to assign to")
    due_date: date = Field(..., description="Due date (YYYY-MM-DD); first occurrence for recurring chores")
    recurrence: RecurrenceSpec | None = Field(default=None, description="Optional recurrence configuration")


class TeamMemberCreate(BaseModel):
    """Pydantic model for creating a team member record."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: str | None = Field(default=None, description="Optional contact email")
    avatar: str = Field(default=constants.DEFAULT_AVATAR_COLOR, description="Avatar colour as #RRGGBB")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        """Validate the email looks like an address."""
        return validate_email_shape(v)

    @field_validator("avatar")
    @classmethod
    def validate_avatar(cls, v: str) -> str:
        """Validate avatar is a #RRGGBB colour."""
        validate_avatar_color(v)
        return v
