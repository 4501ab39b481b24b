"""Chore domain models and enums."""

import json
from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class ChoreStatus(StrEnum):
    """Chore completion state."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RecurrenceType(StrEnum):
    """Repeat unit of a recurrence rule."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class WeekDay(StrEnum):
    """Two-letter weekday codes, Monday first."""

    MO = "MO"
    TU = "TU"
    WE = "WE"
    TH = "TH"
    FR = "FR"
    SA = "SA"
    SU = "SU"


class EndType(StrEnum):
    """How a recurrence terminates."""

    NEVER = "never"
    DATE = "date"
    AFTER = "after"


class RecurrenceSpec(BaseModel):
    """User-facing recurrence configuration."""

    type: RecurrenceType = Field(..., description="Repeat unit")
    interval: int = Field(default=1, ge=1, description="Repeat every N units")
    by_week_day: list[WeekDay] | None = Field(
        default=None, description="Weekly: days to repeat on. Monthly with by_set_pos: weekday to pick"
    )
    by_month_day: list[int] | None = Field(default=None, description="Monthly: fixed days of month (1-31)")
    by_set_pos: int | None = Field(
        default=None, ge=-1, le=5, description="Monthly: nth occurrence of the weekday set (-1 = last)"
    )
    end_type: EndType = Field(default=EndType.NEVER, description="Termination mode")
    end_date: date | None = Field(default=None, description="Last possible occurrence when end_type is 'date'")
    end_after_occurrences: int | None = Field(
        default=None, ge=1, description="Total occurrence count when end_type is 'after'"
    )

    @field_validator("by_month_day")
    @classmethod
    def validate_month_days(cls, v: list[int] | None) -> list[int] | None:
        """Validate every day of month lies in 1-31."""
        if v is not None and any(day < 1 or day > 31 for day in v):  # noqa: PLR2004
            msg = "Days of month must be between 1 and 31"
            raise ValueError(msg)
        return v

    @field_validator("by_set_pos")
    @classmethod
    def validate_set_pos(cls, v: int | None) -> int | None:
        """Reject position 0, which selects nothing."""
        if v == 0:
            msg = "Set position must be -1 or between 1 and 5"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_end_condition(self) -> "RecurrenceSpec":
        """Require the end field that matches the chosen end type."""
        if self.end_type == EndType.DATE and self.end_date is None:
            msg = "end_date is required when end_type is 'date'"
            raise ValueError(msg)
        if self.end_type == EndType.AFTER and self.end_after_occurrences is None:
            msg = "end_after_occurrences is required when end_type is 'after'"
            raise ValueError(msg)
        return self


class RecurrenceRule(RecurrenceSpec):
    """Stored recurrence: the RecurrenceSpec fields plus their cached canonical encoding."""

    rrule_string: str = Field(default="", description="Canonical DTSTART/RRULE encoding derived from the due date")


class Chore(BaseModel):
    """Chore data transfer object.

    Anchors carry ``recurrence``; persisted and virtual instances carry
    ``parent_chore_id`` and ``is_recurrence_instance=True`` instead.
    """

    id: str = Field(..., description="Unique chore ID (or virtual instance ID)")
    title: str = Field(..., description="Chore title (e.g., 'Take out trash')")
    description: str | None = Field(default=None, description="Detailed chore description")
    assignee_id: str | None = Field(default=None, description="Team member ID of the assignee")
    status: ChoreStatus = Field(default=ChoreStatus.PENDING, description="Current chore status")
    due_date: date = Field(..., description="Whole-day due date")
    recurrence: RecurrenceRule | None = Field(default=None, description="Recurrence rule (anchors only)")
    parent_chore_id: str | None = Field(default=None, description="Anchor chore ID for instances")
    is_recurrence_instance: bool = Field(default=False, description="True for persisted or virtual instances")
    created_at: str = Field(..., description="Creation timestamp (ISO format)")
    updated_at: str = Field(..., description="Last update timestamp (ISO format)")

    @field_validator("recurrence", mode="before")
    @classmethod
    def decode_recurrence(cls, v: Any) -> Any:
        """Decode the JSON text form used by the SQLite store."""
        if isinstance(v, str):
            return json.loads(v) if v else None
        return v

    @property
    def is_anchor(self) -> bool:
        """True when this chore owns a recurrence series."""
        return self.recurrence is not None and not self.is_recurrence_instance

    def to_record(self) -> dict[str, Any]:
        """Serialize into the flat shape handed to a record store."""
        return self.model_dump(mode="json")
