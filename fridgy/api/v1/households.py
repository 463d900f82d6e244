from fastapi import APIRouter, Depends, status
from typing import List

from fridgy.database import get_db
from fridgy.dependencies import get_current_user
from fridgy.models.household import DisplayHousehold, Household
from fridgy.models.invite_code import InviteCode
from fridgy.models.user import CurrentUser
from fridgy.schemas.household import (
    HouseholdCreate,
    HouseholdJoinRequest,
    HouseholdJoinResponse,
    HouseholdUpdate,
    InviteCodeCreate,
    MemberRoleUpdate,
)
from fridgy.schemas.result import Result
from fridgy.services.household_service import HouseholdService

router = APIRouter()


@router.post("", response_model=Result[Household], status_code=status.HTTP_201_CREATED)
async def create_household(
    household_data: HouseholdCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Create a new household with current user as owner."""
    service = HouseholdService(db)
    household = service.create_household(current_user.uid, household_data)
    return Result.successful(data=household)


@router.get("", response_model=Result[List[DisplayHousehold]])
async def get_my_households(
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Get all households the current user belongs to."""
    service = HouseholdService(db)
    return Result.successful(data=service.get_user_households(current_user.uid))


@router.post("/join", response_model=Result[HouseholdJoinResponse])
async def join_household(
    join_data: HouseholdJoinRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Join a household using an invite code."""
    service = HouseholdService(db)
    household_id = service.join_household(current_user.uid, join_data.invite_code)
    return Result.successful(data={"household_id": household_id})


@router.get("/invite-codes/{code}", response_model=Result[InviteCode])
async def validate_invite_code(
    code: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Preview an invite code before joining."""
    service = HouseholdService(db)
    return Result.successful(data=service.validate_invite_code(code))


@router.get("/{household_id}", response_model=Result[DisplayHousehold])
async def get_household(
    household_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Get household details."""
    service = HouseholdService(db)
    return Result.successful(data=service.get_household(household_id, current_user.uid))


@router.put("/{household_id}", response_model=Result[DisplayHousehold])
async def update_household(
    household_id: str,
    household_data: HouseholdUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Rename household (owner only)."""
    service = HouseholdService(db)
    household = service.update_household(household_id, current_user.uid, household_data)
    return Result.successful(data=household)


@router.delete("/{household_id}", response_model=Result[dict])
async def delete_household(
    household_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Delete household with its fridges, items and shopping list (owner only)."""
    service = HouseholdService(db)
    service.delete_household(household_id, current_user.uid)
    return Result.acknowledged("Household deleted successfully")


@router.post("/{household_id}/leave", response_model=Result[dict])
async def leave_household(
    household_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Leave a household. The owner has to delete it instead."""
    service = HouseholdService(db)
    service.leave_household(household_id, current_user.uid)
    return Result.acknowledged("Left household")


@router.put("/{household_id}/members/{user_id}/role", response_model=Result[DisplayHousehold])
async def update_member_role(
    household_id: str,
    user_id: str,
    role_data: MemberRoleUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Change a member's role (owner only)."""
    service = HouseholdService(db)
    household = service.update_member_role(household_id, current_user.uid, user_id, role_data.role)
    return Result.successful(data=household)


@router.delete("/{household_id}/members/{user_id}", response_model=Result[DisplayHousehold])
async def remove_member(
    household_id: str,
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Remove a member from the household (owner, or manager for plain members)."""
    service = HouseholdService(db)
    household = service.remove_member(household_id, current_user.uid, user_id)
    return Result.successful(data=household)


@router.get("/{household_id}/invite-codes", response_model=Result[List[InviteCode]])
async def get_invite_codes(
    household_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """List the household's active invite codes."""
    service = HouseholdService(db)
    return Result.successful(data=service.get_invite_codes(household_id, current_user.uid))


@router.post("/{household_id}/invite-codes", response_model=Result[InviteCode], status_code=status.HTTP_201_CREATED)
async def create_invite_code(
    household_id: str,
    invite_data: InviteCodeCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Generate a new invite code (owner or manager)."""
    service = HouseholdService(db)
    invite = service.create_invite_code(household_id, current_user.uid, invite_data)
    return Result.successful(data=invite)


@router.delete("/{household_id}/invite-codes/{code}", response_model=Result[dict])
async def revoke_invite_code(
    household_id: str,
    code: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Revoke an invite code (owner or manager)."""
    service = HouseholdService(db)
    service.revoke_invite_code(household_id, current_user.uid, code)
    return Result.acknowledged("Invite code revoked")
