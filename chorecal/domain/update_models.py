"""Update models for database operations."""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from chorecal.domain.chore import ChoreStatus, RecurrenceSpec
from chorecal.domain.create_models import validate_avatar_color, validate_email_shape


class ChoreUpdate(BaseModel):
    """Partial update payload for a chore.

    Only fields present in the request are applied; an explicit ``recurrence: null``
    turns an anchor back into a one-off chore.
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    assignee_id: str | None = None
    due_date: date | None = None
    status: ChoreStatus | None = None
    recurrence: RecurrenceSpec | None = None


class ChoreStatusUpdate(BaseModel):
    """Payload for a status change (may target a virtual instance)."""

    status: ChoreStatus


class TeamMemberUpdate(BaseModel):
    """Partial update payload for a team member."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = None
    avatar: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        """Validate the email looks like an address."""
        return validate_email_shape(v)

    @field_validator("avatar")
    @classmethod
    def validate_avatar(cls, v: str | None) -> str | None:
        """Validate avatar is a #RRGGBB colour."""
        return validate_avatar_color(v)
