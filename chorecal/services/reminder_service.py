"""Reminder windows: chores due soon and chores already overdue."""

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta

from chorecal.core.config import settings
from chorecal.core.db_client import RecordStore
from chorecal.core.logging import span
from chorecal.domain.chore import Chore, ChoreStatus
from chorecal.models.service_models import ReminderCheck
from chorecal.services import chore_service
from chorecal.services.instance_service import generate_chore_instances


logger = logging.getLogger(__name__)


def find_upcoming(chores: Iterable[Chore], now: datetime, hours_ahead: int = 24) -> list[Chore]:
    """Return open chores due between today and ``now + hours_ahead`` (whole days).

    Open anchors also contribute virtual instances inside the window, unless any
    stored chore with the same parent already covers that date, whatever its
    status or due date relative to the window.
    """
    chores = list(chores)
    today = now.date()
    window_end = (now + timedelta(hours=hours_ahead)).date()

    persisted_dates: dict[str, set[date]] = {}
    for chore in chores:
        if chore.parent_chore_id is not None:
            persisted_dates.setdefault(chore.parent_chore_id, set()).add(chore.due_date)

    upcoming: list[Chore] = []
    for chore in chores:
        if chore.status == ChoreStatus.COMPLETED:
            continue

        if today <= chore.due_date <= window_end:
            upcoming.append(chore)

        if chore.is_anchor:
            taken = persisted_dates.get(chore.id, set())
            upcoming.extend(
                virtual
                for virtual in generate_chore_instances(chore, today, window_end, now=now.isoformat())
                if virtual.due_date not in taken
            )

    return sorted(upcoming, key=lambda chore: chore.due_date)


def find_overdue(chores: Iterable[Chore], now: datetime) -> list[Chore]:
    """Return open stored chores due strictly before today, oldest first.

    Missed occurrences that were never persisted are not synthesized.
    """
    today = now.date()
    overdue = [chore for chore in chores if chore.status != ChoreStatus.COMPLETED and chore.due_date < today]
    return sorted(overdue, key=lambda chore: chore.due_date)


async def get_upcoming_chores(
    store: RecordStore,
    *,
    hours_ahead: int | None = None,
    now: datetime | None = None,
) -> list[Chore]:
    """Load all chores and return those due within the look-ahead window."""
    with span("reminder_service.get_upcoming_chores"):
        chores = await chore_service.list_chores(store)
        window = settings.reminder_hours_ahead if hours_ahead is None else hours_ahead
        upcoming = find_upcoming(chores, now or datetime.now(UTC), window)
        logger.debug("Found %d upcoming chores", len(upcoming))
        return upcoming


async def get_overdue_chores(store: RecordStore, *, now: datetime | None = None) -> list[Chore]:
    """Load all chores and return the overdue ones."""
    with span("reminder_service.get_overdue_chores"):
        chores = await chore_service.list_chores(store)
        overdue = find_overdue(chores, now or datetime.now(UTC))
        logger.debug("Found %d overdue chores", len(overdue))
        return overdue


async def check_reminders(
    store: RecordStore,
    *,
    hours_ahead: int | None = None,
    now: datetime | None = None,
) -> ReminderCheck:
    """Evaluate upcoming and overdue chores against one snapshot of the store."""
    with span("reminder_service.check_reminders"):
        chores = await chore_service.list_chores(store)
        moment = now or datetime.now(UTC)
        window = settings.reminder_hours_ahead if hours_ahead is None else hours_ahead
        result = ReminderCheck(
            upcoming=find_upcoming(chores, moment, window),
            overdue=find_overdue(chores, moment),
        )
        logger.info(
            "Reminder check complete",
            extra={"upcoming": len(result.upcoming), "overdue": len(result.overdue)},
        )
        return result
