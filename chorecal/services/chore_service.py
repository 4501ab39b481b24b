"""Chore service for CRUD operations and status reconciliation of recurrence instances."""

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

from chorecal.core.db_client import (
    DuplicateRecordError,
    RecordNotFoundError,
    RecordStore,
    list_all_records,
    sanitize_param,
    utc_now_iso,
)
from chorecal.core.errors import (
    AssigneeNotFoundError,
    ChoreNotFoundError,
    ChoreNotRecurringError,
    InvalidRecurrenceError,
    ParentChoreNotFoundError,
)
from chorecal.core.logging import log_with_context, span
from chorecal.core.recurrence import create_recurrence_rule, describe_rrule, next_occurrence
from chorecal.domain.chore import Chore, ChoreStatus, RecurrenceSpec
from chorecal.domain.update_models import ChoreUpdate
from chorecal.models.service_models import RecurrenceInfo
from chorecal.services.instance_service import build_persisted_instance, new_chore_id, parse_instance_id


logger = logging.getLogger(__name__)

CHORES = "chores"
TEAM_MEMBERS = "team_members"

# Fields a partial update may not clear.
_REQUIRED_FIELDS = ("title", "due_date", "status")


async def _ensure_assignee_exists(store: RecordStore, assignee_id: str) -> None:
    try:
        await store.get_record(collection=TEAM_MEMBERS, record_id=assignee_id)
    except RecordNotFoundError as e:
        raise AssigneeNotFoundError(assignee_id) from e


async def list_chores(
    store: RecordStore,
    *,
    assignee_id: str | None = None,
    statuses: Iterable[ChoreStatus] | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[Chore]:
    """Get stored chores with optional filters.

    Args:
        store: Record store to read from
        assignee_id: Filter by assigned team member
        statuses: Keep chores in any of these statuses
        start_date: Filter by due date >= this day
        end_date: Filter by due date <= this day

    Returns:
        Stored chores (never virtual instances) sorted by due date
    """
    with span("chore_service.list_chores"):
        filters = []

        if assignee_id:
            filters.append(f'assignee_id = "{sanitize_param(assignee_id)}"')

        status_list = list(statuses or [])
        if status_list:
            options = " || ".join(f'status = "{sanitize_param(ChoreStatus(s).value)}"' for s in status_list)
            filters.append(f"({options})")

        if start_date:
            filters.append(f'due_date >= "{start_date.isoformat()}"')

        if end_date:
            filters.append(f'due_date <= "{end_date.isoformat()}"')

        filter_query = " && ".join(filters)
        records = await list_all_records(store, collection=CHORES, filter_query=filter_query, sort="+due_date")

        logger.debug("Retrieved %d chores with filters: %s", len(records), filter_query)
        return [Chore.model_validate(record) for record in records]


async def get_chore(store: RecordStore, chore_id: str) -> Chore:
    """Get a stored chore by ID.

    Raises:
        ChoreNotFoundError: If no chore has this ID
    """
    try:
        record = await store.get_record(collection=CHORES, record_id=chore_id)
    except RecordNotFoundError as e:
        raise ChoreNotFoundError(chore_id) from e
    return Chore.model_validate(record)


async def get_chores_by_parent(store: RecordStore, parent_id: str) -> list[Chore]:
    """Get every persisted instance of an anchor chore."""
    records = await list_all_records(
        store,
        collection=CHORES,
        filter_query=f'parent_chore_id = "{sanitize_param(parent_id)}"',
        sort="+due_date",
    )
    return [Chore.model_validate(record) for record in records]


async def create_chore(
    store: RecordStore,
    *,
    title: str,
    due_date: date,
    description: str | None = None,
    assignee_id: str | None = None,
    recurrence: RecurrenceSpec | None = None,
) -> Chore:
    """Create a one-off chore, or the anchor of a recurring series.

    Args:
        store: Record store to write to
        title: Chore title
        due_date: Due date; for recurring chores the first occurrence
        description: Optional description
        assignee_id: Team member to assign to (None for unassigned)
        recurrence: Optional recurrence configuration

    Returns:
        The stored chore

    Raises:
        AssigneeNotFoundError: If the assignee does not exist
    """
    with span("chore_service.create_chore"):
        if assignee_id:
            await _ensure_assignee_exists(store, assignee_id)

        now = utc_now_iso()
        chore = Chore(
            id=new_chore_id(),
            title=title,
            description=description,
            assignee_id=assignee_id,
            status=ChoreStatus.PENDING,
            due_date=due_date,
            recurrence=create_recurrence_rule(recurrence, due_date) if recurrence else None,
            parent_chore_id=None,
            is_recurrence_instance=False,
            created_at=now,
            updated_at=now,
        )

        record = await store.create_record(collection=CHORES, data=chore.to_record())
        logger.info("Created chore: %s (assigned to: %s)", title, assignee_id or "unassigned")
        return Chore.model_validate(record)


async def update_chore(store: RecordStore, chore_id: str, update: ChoreUpdate) -> Chore:
    """Apply a partial update to a stored chore.

    The cached ``rrule_string`` is re-derived whenever the recurrence or the due
    date of an anchor changes, since the due date is the rule's DTSTART.

    Raises:
        ChoreNotFoundError: If no chore has this ID
        AssigneeNotFoundError: If the new assignee does not exist
        InvalidRecurrenceError: If a recurrence is set on a recurrence instance
    """
    with span("chore_service.update_chore"):
        existing = await get_chore(store, chore_id)

        changes: dict[str, Any] = update.model_dump(mode="json", exclude_unset=True, exclude={"recurrence"})
        for key in _REQUIRED_FIELDS:
            if key in changes and changes[key] is None:
                del changes[key]

        if changes.get("assignee_id"):
            await _ensure_assignee_exists(store, changes["assignee_id"])

        due = update.due_date or existing.due_date

        if "recurrence" in update.model_fields_set:
            if update.recurrence is not None and existing.is_recurrence_instance:
                msg = f"Recurrence instance {chore_id} cannot carry its own recurrence rule"
                raise InvalidRecurrenceError(msg)
            rule = create_recurrence_rule(update.recurrence, due) if update.recurrence else None
            changes["recurrence"] = rule.model_dump(mode="json") if rule else None
        elif existing.recurrence is not None and due != existing.due_date:
            changes["recurrence"] = create_recurrence_rule(existing.recurrence, due).model_dump(mode="json")

        if not changes:
            return existing

        try:
            record = await store.update_record(collection=CHORES, record_id=chore_id, data=changes)
        except RecordNotFoundError as e:
            raise ChoreNotFoundError(chore_id) from e

        logger.info("Updated chore %s (fields: %s)", chore_id, ", ".join(sorted(changes)))
        return Chore.model_validate(record)


async def _find_persisted_instance(store: RecordStore, anchor_id: str, due: date) -> Chore | None:
    record = await store.get_first_record(
        collection=CHORES,
        filter_query=f'parent_chore_id = "{sanitize_param(anchor_id)}" && due_date = "{due.isoformat()}"',
    )
    return Chore.model_validate(record) if record else None


async def _set_status(store: RecordStore, chore_id: str, status: ChoreStatus) -> Chore:
    try:
        record = await store.update_record(collection=CHORES, record_id=chore_id, data={"status": status.value})
    except RecordNotFoundError as e:
        raise ChoreNotFoundError(chore_id) from e
    return Chore.model_validate(record)


async def update_chore_status(store: RecordStore, chore_id: str, status: ChoreStatus) -> Chore:
    """Change a chore's status, promoting a virtual instance to a stored one if needed.

    A plain ID updates the stored chore in place. A virtual ID
    (``{anchor_id}::instance::{YYYY-MM-DD}``) persists a new instance copied from
    the anchor with the requested status. If that occurrence was already
    persisted, its status is updated instead of creating a second record.

    Returns:
        The updated or newly persisted chore

    Raises:
        ChoreNotFoundError: If a plain ID does not exist
        MalformedInstanceIdError: If the ID has the instance separator but no valid date
        ParentChoreNotFoundError: If the anchor of a virtual ID does not exist
        ChoreNotRecurringError: If the anchor of a virtual ID has no recurrence
    """
    with span("chore_service.update_chore_status"):
        status = ChoreStatus(status)
        parsed = parse_instance_id(chore_id)

        if parsed is None:
            chore = await _set_status(store, chore_id, status)
            logger.info("Updated status of chore %s to %s", chore_id, status)
            return chore

        anchor_id, due = parsed
        try:
            anchor = await get_chore(store, anchor_id)
        except ChoreNotFoundError as e:
            raise ParentChoreNotFoundError(anchor_id) from e

        if anchor.recurrence is None:
            raise ChoreNotRecurringError(anchor_id)

        existing = await _find_persisted_instance(store, anchor_id, due)
        if existing is not None:
            logger.info("Occurrence %s of %s already persisted as %s", due, anchor_id, existing.id)
            return await _set_status(store, existing.id, status)

        instance = build_persisted_instance(anchor, due, status)
        try:
            record = await store.create_record(collection=CHORES, data=instance.to_record())
        except DuplicateRecordError:
            # Lost a race with a concurrent promotion of the same occurrence.
            existing = await _find_persisted_instance(store, anchor_id, due)
            if existing is None:
                raise
            return await _set_status(store, existing.id, status)

        log_with_context(
            logger,
            "info",
            "Persisted recurrence occurrence",
            chore_id=instance.id,
            parent_chore_id=anchor_id,
            due_date=due.isoformat(),
            status=status.value,
        )
        return Chore.model_validate(record)


async def delete_chore(store: RecordStore, chore_id: str, *, delete_instances: bool = False) -> None:
    """Delete a stored chore, optionally together with its persisted instances.

    The anchor is deleted before its instances.

    Raises:
        ChoreNotFoundError: If no chore has this ID
    """
    with span("chore_service.delete_chore"):
        chore = await get_chore(store, chore_id)
        instances: list[Chore] = []
        if delete_instances and not chore.is_recurrence_instance:
            instances = await get_chores_by_parent(store, chore_id)

        try:
            await store.delete_record(collection=CHORES, record_id=chore_id)
        except RecordNotFoundError as e:
            raise ChoreNotFoundError(chore_id) from e
        logger.info("Deleted chore %s", chore_id)

        for instance in instances:
            try:
                await store.delete_record(collection=CHORES, record_id=instance.id)
            except RecordNotFoundError:
                logger.debug("Instance %s of chore %s was already deleted", instance.id, chore_id)
        if instances:
            logger.info("Deleted %d persisted instances of chore %s", len(instances), chore_id)


async def get_recurrence_info(store: RecordStore, chore_id: str, *, today: date | None = None) -> RecurrenceInfo:
    """Describe an anchor's recurrence and find its next occurrence after today.

    Raises:
        ChoreNotFoundError: If no chore has this ID
        ChoreNotRecurringError: If the chore has no recurrence rule
    """
    chore = await get_chore(store, chore_id)
    if chore.recurrence is None or not chore.recurrence.rrule_string:
        raise ChoreNotRecurringError(chore_id)

    rrule_string = chore.recurrence.rrule_string
    reference = today or datetime.now(UTC).date()
    return RecurrenceInfo(
        chore_id=chore.id,
        rrule_string=rrule_string,
        description=describe_rrule(rrule_string),
        next_occurrence=next_occurrence(rrule_string, reference),
    )
