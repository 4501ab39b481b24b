"""Virtual recurrence instances: identity, generation and promotion to real records."""

import re
import uuid
from datetime import date

from chorecal.core.config import constants
from chorecal.core.db_client import utc_now_iso
from chorecal.core.errors import MalformedInstanceIdError
from chorecal.core.recurrence import as_date, occurrences_between
from chorecal.domain.chore import Chore, ChoreStatus


_INSTANCE_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def make_instance_id(anchor_id: str, due: date) -> str:
    """Build the virtual id ``{anchor_id}::instance::{YYYY-MM-DD}``."""
    return f"{anchor_id}{constants.INSTANCE_ID_SEPARATOR}{due.isoformat()}"


def is_instance_id(chore_id: str) -> bool:
    """Return True if the id carries the instance separator."""
    return constants.INSTANCE_ID_SEPARATOR in chore_id


def parse_instance_id(chore_id: str) -> tuple[str, date] | None:
    """Split a virtual instance id into its anchor id and occurrence date.

    Returns:
        ``(anchor_id, due_date)`` for a virtual id, ``None`` for a plain id

    Raises:
        MalformedInstanceIdError: If the separator is present but the rest is not
            exactly one non-empty anchor id followed by a real ``YYYY-MM-DD`` date
    """
    if not is_instance_id(chore_id):
        return None

    parts = chore_id.split(constants.INSTANCE_ID_SEPARATOR)
    if len(parts) != 2:  # noqa: PLR2004
        raise MalformedInstanceIdError(chore_id)

    anchor_id, date_part = parts
    if not anchor_id or not _INSTANCE_DATE_PATTERN.match(date_part):
        raise MalformedInstanceIdError(chore_id)

    try:
        due = date.fromisoformat(date_part)
    except ValueError as e:
        raise MalformedInstanceIdError(chore_id) from e

    return anchor_id, due


def new_chore_id() -> str:
    """Allocate a fresh id for a stored chore."""
    return f"{constants.CHORE_ID_PREFIX}{uuid.uuid4()}"


def generate_chore_instances(
    anchor: Chore,
    start: date | str,
    end: date | str,
    *,
    now: str | None = None,
) -> list[Chore]:
    """Expand an anchor into virtual instances for ``[start, end]``.

    The anchor's own due date is skipped since the anchor already stands for
    that occurrence. Virtuals always start out ``pending``.

    Args:
        anchor: Chore carrying the recurrence rule
        start: First day of the window (inclusive)
        end: Last day of the window (inclusive)
        now: Timestamp to stamp on the virtuals (defaults to the current time)

    Returns:
        Virtual chores in ascending date order; empty if the chore does not recur
    """
    if anchor.recurrence is None or not anchor.recurrence.rrule_string:
        return []

    dates = occurrences_between(anchor.recurrence.rrule_string, as_date(start), as_date(end))
    stamp = now or utc_now_iso()

    return [
        Chore(
            id=make_instance_id(anchor.id, occurrence),
            title=anchor.title,
            description=anchor.description,
            assignee_id=anchor.assignee_id,
            status=ChoreStatus.PENDING,
            due_date=occurrence,
            recurrence=None,
            parent_chore_id=anchor.id,
            is_recurrence_instance=True,
            created_at=stamp,
            updated_at=stamp,
        )
        for occurrence in dates
        if occurrence != anchor.due_date
    ]


def build_persisted_instance(
    anchor: Chore,
    due: date,
    status: ChoreStatus,
    *,
    now: str | None = None,
) -> Chore:
    """Build the real record that replaces a virtual instance, with a fresh id."""
    stamp = now or utc_now_iso()
    return Chore(
        id=new_chore_id(),
        title=anchor.title,
        description=anchor.description,
        assignee_id=anchor.assignee_id,
        status=status,
        due_date=due,
        recurrence=None,
        parent_chore_id=anchor.id,
        is_recurrence_instance=True,
        created_at=stamp,
        updated_at=stamp,
    )
