"""Chore endpoints: CRUD, calendar projection, status changes and recurrence info."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Path, Query, status

from chorecal.core.config import constants
from chorecal.core.db_client import RecordStore
from chorecal.domain.chore import Chore
from chorecal.domain.create_models import ChoreCreate
from chorecal.domain.update_models import ChoreStatusUpdate, ChoreUpdate
from chorecal.interface.deps import get_store, parse_status_list
from chorecal.models.service_models import CalendarMonth, RecurrenceInfo
from chorecal.services import calendar_service, chore_service


router = APIRouter(prefix="/api/chores", tags=["chores"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_chores(
    assignee_id: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    start_date: date | None = None,
    end_date: date | None = None,
    store: RecordStore = Depends(get_store),
) -> dict[str, list[Chore]]:
    """List stored chores, optionally filtered by assignee, status and due date range."""
    chores = await chore_service.list_chores(
        store,
        assignee_id=assignee_id,
        statuses=parse_status_list(status_filter),
        start_date=start_date,
        end_date=end_date,
    )
    return {"chores": chores}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_chore(payload: ChoreCreate, store: RecordStore = Depends(get_store)) -> dict[str, Chore]:
    """Create a one-off or recurring chore."""
    chore = await chore_service.create_chore(
        store,
        title=payload.title,
        description=payload.description,
        assignee_id=payload.assignee_id,
        due_date=payload.due_date,
        recurrence=payload.recurrence,
    )
    return {"chore": chore}


@router.get("/calendar/{year}/{month}")
async def get_calendar_chores(
    year: int = Path(ge=constants.CALENDAR_MIN_YEAR, le=constants.CALENDAR_MAX_YEAR),
    month: int = Path(ge=1, le=12),
    assignee_id: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    store: RecordStore = Depends(get_store),
) -> CalendarMonth:
    """Project regular chores, anchors and recurrence instances onto one month."""
    chores = await calendar_service.get_calendar_chores(
        store,
        year=year,
        month=month,
        assignee_id=assignee_id,
        statuses=parse_status_list(status_filter),
    )
    return CalendarMonth(year=year, month=month, chores=chores)


@router.get("/{chore_id}")
async def get_chore(chore_id: str, store: RecordStore = Depends(get_store)) -> dict[str, Chore]:
    """Get a stored chore by ID."""
    return {"chore": await chore_service.get_chore(store, chore_id)}


@router.put("/{chore_id}")
async def update_chore(
    chore_id: str,
    payload: ChoreUpdate,
    store: RecordStore = Depends(get_store),
) -> dict[str, Chore]:
    """Apply a partial update to a stored chore."""
    return {"chore": await chore_service.update_chore(store, chore_id, payload)}


@router.patch("/{chore_id}/status")
async def update_chore_status(
    chore_id: str,
    payload: ChoreStatusUpdate,
    store: RecordStore = Depends(get_store),
) -> dict[str, Chore]:
    """Change the status of a stored chore or of a virtual instance."""
    return {"chore": await chore_service.update_chore_status(store, chore_id, payload.status)}


@router.delete("/{chore_id}")
async def delete_chore(
    chore_id: str,
    delete_instances: bool = False,
    store: RecordStore = Depends(get_store),
) -> dict[str, bool]:
    """Delete a chore; with ``delete_instances`` an anchor takes its persisted instances along."""
    await chore_service.delete_chore(store, chore_id, delete_instances=delete_instances)
    return {"success": True}


@router.get("/{chore_id}/recurrence")
async def get_recurrence_info(chore_id: str, store: RecordStore = Depends(get_store)) -> RecurrenceInfo:
    """Describe the recurrence of an anchor chore and its next occurrence."""
    return await chore_service.get_recurrence_info(store, chore_id)
