"""Team member domain model."""

from pydantic import BaseModel, Field


class TeamMember(BaseModel):
    """Team member data transfer object."""

    id: str = Field(..., description="Unique team member ID")
    name: str = Field(..., description="Display name")
    email: str | None = Field(default=None, description="Optional contact email")
    avatar: str = Field(..., description="Avatar colour as #RRGGBB")
    created_at: str = Field(..., description="Creation timestamp (ISO format)")
    updated_at: str = Field(..., description="Last update timestamp (ISO format)")
