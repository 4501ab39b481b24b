"""Team member service for CRUD operations."""

import logging
import uuid

from chorecal.core.config import constants
from chorecal.core.db_client import RecordNotFoundError, RecordStore, list_all_records, sanitize_param, utc_now_iso
from chorecal.core.errors import TeamMemberInUseError, TeamMemberNotFoundError
from chorecal.core.logging import span
from chorecal.domain.team_member import TeamMember
from chorecal.domain.update_models import TeamMemberUpdate


logger = logging.getLogger(__name__)

TEAM_MEMBERS = "team_members"
CHORES = "chores"


async def list_team_members(store: RecordStore) -> list[TeamMember]:
    """Get all team members in creation order."""
    records = await list_all_records(store, collection=TEAM_MEMBERS, sort="+created_at")
    return [TeamMember.model_validate(record) for record in records]


async def get_team_member(store: RecordStore, member_id: str) -> TeamMember:
    """Get a team member by ID.

    Raises:
        TeamMemberNotFoundError: If no member has this ID
    """
    try:
        record = await store.get_record(collection=TEAM_MEMBERS, record_id=member_id)
    except RecordNotFoundError as e:
        raise TeamMemberNotFoundError(member_id) from e
    return TeamMember.model_validate(record)


async def create_team_member(
    store: RecordStore,
    *,
    name: str,
    email: str | None = None,
    avatar: str = constants.DEFAULT_AVATAR_COLOR,
) -> TeamMember:
    """Create a team member."""
    with span("team_member_service.create_team_member"):
        now = utc_now_iso()
        member = TeamMember(
            id=f"{constants.TEAM_MEMBER_ID_PREFIX}{uuid.uuid4()}",
            name=name,
            email=email,
            avatar=avatar,
            created_at=now,
            updated_at=now,
        )
        record = await store.create_record(collection=TEAM_MEMBERS, data=member.model_dump(mode="json"))
        logger.info("Created team member: %s", name)
        return TeamMember.model_validate(record)


async def update_team_member(store: RecordStore, member_id: str, update: TeamMemberUpdate) -> TeamMember:
    """Apply a partial update to a team member.

    Raises:
        TeamMemberNotFoundError: If no member has this ID
    """
    with span("team_member_service.update_team_member"):
        changes = update.model_dump(exclude_unset=True)
        for key in ("name", "avatar"):
            if key in changes and changes[key] is None:
                del changes[key]

        if not changes:
            return await get_team_member(store, member_id)

        try:
            record = await store.update_record(collection=TEAM_MEMBERS, record_id=member_id, data=changes)
        except RecordNotFoundError as e:
            raise TeamMemberNotFoundError(member_id) from e

        logger.info("Updated team member %s", member_id)
        return TeamMember.model_validate(record)


async def delete_team_member(store: RecordStore, member_id: str) -> None:
    """Delete a team member that has no chores assigned.

    Chores reference members by id only, so deleting an assignee would leave
    dangling references; the caller must reassign or delete those chores first.

    Raises:
        TeamMemberInUseError: If chores are still assigned to the member
        TeamMemberNotFoundError: If no member has this ID
    """
    with span("team_member_service.delete_team_member"):
        assigned = await list_all_records(
            store,
            collection=CHORES,
            filter_query=f'assignee_id = "{sanitize_param(member_id)}"',
        )
        if assigned:
            logger.warning("Refusing to delete team member %s with %d assigned chores", member_id, len(assigned))
            raise TeamMemberInUseError(member_id, len(assigned))

        try:
            await store.delete_record(collection=TEAM_MEMBERS, record_id=member_id)
        except RecordNotFoundError as e:
            raise TeamMemberNotFoundError(member_id) from e

        logger.info("Deleted team member %s", member_id)
