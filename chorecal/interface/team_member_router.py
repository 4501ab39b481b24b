"""Team member endpoints."""

from fastapi import APIRouter, Depends, status

from chorecal.core.db_client import RecordStore
from chorecal.domain.create_models import TeamMemberCreate
from chorecal.domain.team_member import TeamMember
from chorecal.domain.update_models import TeamMemberUpdate
from chorecal.interface.deps import get_store
from chorecal.services import team_member_service


router = APIRouter(prefix="/api/team-members", tags=["team-members"])


@router.get("")
async def list_team_members(store: RecordStore = Depends(get_store)) -> dict[str, list[TeamMember]]:
    """List all team members."""
    return {"team_members": await team_member_service.list_team_members(store)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_team_member(
    payload: TeamMemberCreate,
    store: RecordStore = Depends(get_store),
) -> dict[str, TeamMember]:
    """Create a team member."""
    member = await team_member_service.create_team_member(
        store,
        name=payload.name,
        email=payload.email,
        avatar=payload.avatar,
    )
    return {"team_member": member}


@router.get("/{member_id}")
async def get_team_member(member_id: str, store: RecordStore = Depends(get_store)) -> dict[str, TeamMember]:
    return {"team_member": await team_member_service.get_team_member(store, member_id)}


@router.put("/{member_id}")
async def update_team_member(
    member_id: str,
    payload: TeamMemberUpdate,
    store: RecordStore = Depends(get_store),
) -> dict[str, TeamMember]:
    return {"team_member": await team_member_service.update_team_member(store, member_id, payload)}


@router.delete("/{member_id}")
async def delete_team_member(member_id: str, store: RecordStore = Depends(get_store)) -> dict[str, bool]:
    """Delete a team member with no assigned chores."""
    await team_member_service.delete_team_member(store, member_id)
    return {"success": True}
