"""Reminder endpoints: upcoming and overdue chores."""

from fastapi import APIRouter, Depends, Query

from chorecal.core.db_client import RecordStore
from chorecal.domain.chore import Chore
from chorecal.interface.deps import get_store
from chorecal.models.service_models import ReminderCheck
from chorecal.services import reminder_service


router = APIRouter(prefix="/api/reminders", tags=["reminders"])


@router.get("/check")
async def check_reminders(store: RecordStore = Depends(get_store)) -> ReminderCheck:
    """Evaluate upcoming and overdue chores at the current moment."""
    return await reminder_service.check_reminders(store)


@router.get("/upcoming")
async def get_upcoming_chores(
    hours: int | None = Query(default=None, ge=1),
    store: RecordStore = Depends(get_store),
) -> dict[str, list[Chore]]:
    """List open chores due within the next ``hours`` (defaults to the configured window)."""
    return {"chores": await reminder_service.get_upcoming_chores(store, hours_ahead=hours)}


@router.get("/overdue")
async def get_overdue_chores(store: RecordStore = Depends(get_store)) -> dict[str, list[Chore]]:
    return {"chores": await reminder_service.get_overdue_chores(store)}
