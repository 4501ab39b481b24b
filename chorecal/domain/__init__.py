"""Domain models and DTOs."""

from chorecal.domain.chore import Chore, ChoreStatus, EndType, RecurrenceRule, RecurrenceSpec, RecurrenceType, WeekDay
from chorecal.domain.create_models import ChoreCreate, TeamMemberCreate
from chorecal.domain.team_member import TeamMember
from chorecal.domain.update_models import ChoreStatusUpdate, ChoreUpdate, TeamMemberUpdate


__all__ = [
    "Chore",
    "ChoreCreate",
    "ChoreStatus",
    "ChoreStatusUpdate",
    "ChoreUpdate",
    "EndType",
    "RecurrenceRule",
    "RecurrenceSpec",
    "RecurrenceType",
    "TeamMember",
    "TeamMemberCreate",
    "TeamMemberUpdate",
    "WeekDay",
]
