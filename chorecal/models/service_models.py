"""Pydantic models for service layer return types.

These models give the service boundaries typed results that the HTTP layer
can serialize directly.
"""

from datetime import date

from pydantic import BaseModel

from chorecal.domain.chore import Chore


class RecurrenceInfo(BaseModel):
    """Human-readable summary and next due date of a recurring chore."""

    chore_id: str
    rrule_string: str
    description: str
    next_occurrence: date | None


class ReminderCheck(BaseModel):
    """Upcoming and overdue chores evaluated at one moment."""

    upcoming: list[Chore]
    overdue: list[Chore]


class CalendarMonth(BaseModel):
    """Chores projected onto one calendar month."""

    year: int
    month: int
    chores: list[Chore]
