from chorecal.services import (
    calendar_service,
    chore_service,
    instance_service,
    reminder_service,
    team_member_service,
)


__all__ = [
    "calendar_service",
    "chore_service",
    "instance_service",
    "reminder_service",
    "team_member_service",
]
