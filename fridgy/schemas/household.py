from pydantic import BaseModel, Field
from typing import Optional

from fridgy.models.role import HouseholdRole


class HouseholdCreate(BaseModel):
    """Schema for creating a new household."""
    name: str = Field(..., min_length=1, max_length=100, description="Household name")


class HouseholdUpdate(BaseModel):
    """Schema for renaming a household."""
    name: str = Field(..., min_length=1, max_length=100)


class HouseholdJoinRequest(BaseModel):
    """Schema for joining a household via invite code."""
    invite_code: str = Field(..., min_length=1, max_length=20, description="Household invite code")


class HouseholdJoinResponse(BaseModel):
    household_id: str


class MemberRoleUpdate(BaseModel):
    """Schema for changing a member's role."""
    role: HouseholdRole = Field(..., description="OWNER, MANAGER or MEMBER")


class InviteCodeCreate(BaseModel):
    """Schema for creating an invite code."""
    expires_at: Optional[int] = Field(None, description="Expiry as epoch milliseconds; omit for no expiry")
