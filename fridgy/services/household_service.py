import logging
from typing import List

from fridgy.core.exception import AuthorizationException, NotHouseholdMemberException, ResourceNotFoundException
from fridgy.models.household import DisplayHousehold, Household
from fridgy.models.invite_code import InviteCode
from fridgy.models.role import HouseholdRole, can_delete_household
from fridgy.repositories.household_repository import HouseholdRepository
from fridgy.repositories.membership_repository import MembershipRepository
from fridgy.repositories.user_repository import UserRepository
from fridgy.schemas.household import HouseholdCreate, HouseholdUpdate, InviteCodeCreate

logger = logging.getLogger(__name__)


class HouseholdService:
    """Service layer for households, their members and invite codes."""

    def __init__(self, db):
        self.db = db
        self.user_repo = UserRepository(db)
        self.household_repo = HouseholdRepository(db, self.user_repo)
        self.membership_repo = MembershipRepository(db, self.household_repo)

    def create_household(self, user_id: str, data: HouseholdCreate) -> Household:
        """
        Create a new household with the user as its OWNER.

        Args:
            user_id: UID of the user creating the household
            data: Household creation data

        Returns:
            Created household
        """
        return self.household_repo.create_household(data.name.strip(), user_id)

    def get_user_households(self, user_id: str) -> List[DisplayHousehold]:
        """Get all households a user belongs to, ready for display."""
        return self.household_repo.get_display_households(user_id)

    def get_member_household(self, household_id: str, user_id: str) -> Household:
        """
        Get a household the user belongs to.

        Raises:
            ResourceNotFoundException: If household not found
            NotHouseholdMemberException: If user is not a member
        """
        household = self.household_repo.get_by_id(household_id)
        if household is None:
            raise ResourceNotFoundException("Household", household_id)
        if not household.is_member(user_id):
            raise NotHouseholdMemberException(household_id)
        return household

    def get_household(self, household_id: str, user_id: str) -> DisplayHousehold:
        return self.household_repo.to_display(self.get_member_household(household_id, user_id))

    def get_user_role(self, household_id: str, user_id: str) -> HouseholdRole:
        return self.get_member_household(household_id, user_id).get_role_for_user(user_id)

    def update_household(self, household_id: str, user_id: str, data: HouseholdUpdate) -> DisplayHousehold:
        """
        Rename a household (owner only).

        Raises:
            AuthorizationException: If user is not the owner
            ResourceNotFoundException: If household not found
        """
        household = self.get_member_household(household_id, user_id)
        if not household.is_owner(user_id):
            raise AuthorizationException("Only the owner can rename the household")

        self.household_repo.update_name(household_id, data.name.strip())
        return self.get_household(household_id, user_id)

    def delete_household(self, household_id: str, user_id: str) -> None:
        """
        Delete a household and all its fridges, items and shopping list (owner only).

        Raises:
            AuthorizationException: If user is not the owner
            ResourceNotFoundException: If household not found
        """
        household = self.get_member_household(household_id, user_id)
        if not can_delete_household(household.get_role_for_user(user_id)):
            raise AuthorizationException("Only the owner can delete the household")

        self.household_repo.delete_household(household_id)

    def join_household(self, user_id: str, invite_code: str) -> str:
        """Redeem an invite code; returns the joined household's ID."""
        return self.membership_repo.redeem_invite_code(invite_code, user_id)

    def leave_household(self, household_id: str, user_id: str) -> None:
        self.membership_repo.leave_household(household_id, user_id)

    def update_member_role(self, household_id: str, user_id: str, member_id: str, role: HouseholdRole) -> DisplayHousehold:
        self.membership_repo.update_member_role(household_id, user_id, member_id, role)
        return self.get_household(household_id, user_id)

    def remove_member(self, household_id: str, user_id: str, member_id: str) -> DisplayHousehold:
        self.membership_repo.remove_member(household_id, user_id, member_id)
        return self.get_household(household_id, user_id)

    def get_invite_codes(self, household_id: str, user_id: str) -> List[InviteCode]:
        self.get_member_household(household_id, user_id)
        return self.membership_repo.get_invite_codes(household_id)

    def create_invite_code(self, household_id: str, user_id: str, data: InviteCodeCreate) -> InviteCode:
        return self.membership_repo.create_invite_code(household_id, user_id, data.expires_at)

    def revoke_invite_code(self, household_id: str, user_id: str, code: str) -> None:
        self.membership_repo.revoke_invite_code(household_id, user_id, code)

    def validate_invite_code(self, code: str) -> InviteCode:
        invite = self.membership_repo.validate_invite_code(code)
        if invite is None:
            raise ResourceNotFoundException("Invite code", code.strip().upper() or None)
        return invite
