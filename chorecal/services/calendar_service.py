"""Calendar projection: one month of regular chores, anchors, persisted and virtual instances."""

import calendar
import logging
from collections.abc import Iterable
from datetime import date

from chorecal.core.db_client import RecordStore
from chorecal.core.logging import span
from chorecal.domain.chore import Chore, ChoreStatus
from chorecal.services import chore_service
from chorecal.services.instance_service import generate_chore_instances


logger = logging.getLogger(__name__)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def filter_chores(
    chores: Iterable[Chore],
    *,
    assignee_id: str | None = None,
    statuses: Iterable[ChoreStatus] | None = None,
) -> list[Chore]:
    """Keep chores matching the assignee and any of the statuses (both optional)."""
    wanted = set(statuses) if statuses else None
    return [
        chore
        for chore in chores
        if (assignee_id is None or chore.assignee_id == assignee_id) and (wanted is None or chore.status in wanted)
    ]


def project_month(
    chores: Iterable[Chore],
    year: int,
    month: int,
    *,
    assignee_id: str | None = None,
    statuses: Iterable[ChoreStatus] | None = None,
    now: str | None = None,
) -> list[Chore]:
    """Merge every chore visible in a calendar month into one date-sorted list.

    Filters apply before expansion, so an anchor excluded by a filter contributes
    no virtuals. A persisted instance always wins over the virtual for the same
    (anchor, date). The window is the calendar month exactly, without grid padding.
    """
    start, end = month_bounds(year, month)
    filtered = filter_chores(chores, assignee_id=assignee_id, statuses=statuses)

    regular = [
        chore
        for chore in filtered
        if chore.recurrence is None and not chore.is_recurrence_instance and start <= chore.due_date <= end
    ]
    anchors = [chore for chore in filtered if chore.is_anchor]
    persisted = [chore for chore in filtered if chore.is_recurrence_instance and start <= chore.due_date <= end]

    persisted_dates: dict[str, set[date]] = {}
    for instance in persisted:
        if instance.parent_chore_id is not None:
            persisted_dates.setdefault(instance.parent_chore_id, set()).add(instance.due_date)

    virtuals: list[Chore] = []
    for anchor in anchors:
        taken = persisted_dates.get(anchor.id, set())
        virtuals.extend(
            virtual
            for virtual in generate_chore_instances(anchor, start, end, now=now)
            if virtual.due_date not in taken
        )
        if start <= anchor.due_date <= end:
            regular.append(anchor)

    return sorted([*regular, *persisted, *virtuals], key=lambda chore: chore.due_date)


async def get_calendar_chores(
    store: RecordStore,
    *,
    year: int,
    month: int,
    assignee_id: str | None = None,
    statuses: Iterable[ChoreStatus] | None = None,
) -> list[Chore]:
    """Load every chore from the store and project the requested month."""
    with span("calendar_service.get_calendar_chores"):
        chores = await chore_service.list_chores(store)
        projected = project_month(chores, year, month, assignee_id=assignee_id, statuses=statuses)

        logger.debug(
            "Projected calendar month",
            extra={"year": year, "month": month, "stored": len(chores), "projected": len(projected)},
        )
        return projected
