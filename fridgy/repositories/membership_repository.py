import logging
import secrets
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from typing import List, Optional

from fridgy.config import settings
from fridgy.constants import Collections, Fields, field_path
from fridgy.core.exception import (
    AuthorizationException,
    BadRequestException,
    InternalServerException,
    InviteCodeException,
    ResourceNotFoundException,
)
from fridgy.models.household import Household
from fridgy.models.invite_code import INVITE_CODE_CHARS, InviteCode, normalize_code
from fridgy.models.item import now_ms
from fridgy.models.role import HouseholdRole, can_manage_invite_codes, can_modify_user
from fridgy.repositories.household_repository import HouseholdRepository
from fridgy.repositories.repository import BaseRepository

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 10


class MembershipRepository(BaseRepository[InviteCode]):
    """
    Household membership: member roles, removal, leaving and invite codes.

    Every mutation is checked against the acting user's role and raises on
    refusal or failure.
    """

    def __init__(self, db, household_repo: Optional[HouseholdRepository] = None):
        super().__init__(InviteCode, db, Collections.INVITE_CODES)
        self.household_repo = household_repo or HouseholdRepository(db)

    def _require_household(self, household_id: str) -> Household:
        household = self.household_repo.get_by_id(household_id)
        if household is None:
            raise ResourceNotFoundException("Household", household_id)
        return household

    def update_member_role(self, household_id: str, acting_user_id: str, user_id: str, new_role: HouseholdRole) -> None:
        """Change a member's role. Only the owner may, and never their own role."""
        household = self._require_household(household_id)

        if household.created_by != acting_user_id:
            raise AuthorizationException("Only the owner can change user roles")
        if user_id == household.created_by:
            raise BadRequestException("Cannot change the owner's role")
        if user_id not in household.members:
            raise ResourceNotFoundException("Member", user_id)

        roles = dict(household.member_roles)
        roles[user_id] = new_role.value
        self.household_repo.document(household_id).update({Fields.MEMBER_ROLES: roles})
        self.household_repo.invalidate(household_id)
        logger.info("Set role of %s in household %s to %s", user_id, household_id, new_role.value)

    def remove_member(self, household_id: str, acting_user_id: str, user_id: str) -> None:
        household = self._require_household(household_id)

        if user_id == household.created_by:
            raise BadRequestException("Cannot remove the owner from the household")

        acting_role = household.get_role_for_user(acting_user_id)
        target_role = household.get_role_for_user(user_id)
        if not can_modify_user(acting_role, target_role):
            raise AuthorizationException("You don't have permission to remove this user")

        ref = self.household_repo.document(household_id)
        batch = self.db.batch()
        batch.update(ref, {Fields.MEMBERS: firestore.ArrayRemove([user_id])})
        batch.update(ref, {field_path(Fields.MEMBER_ROLES, user_id): firestore.DELETE_FIELD})
        batch.commit()
        self.household_repo.invalidate(household_id)
        logger.info("Removed %s from household %s", user_id, household_id)

    def leave_household(self, household_id: str, user_id: str) -> None:
        """
        Remove the caller from a household. The owner must delete it instead.

        If the household can't be read the removal is still attempted.
        """
        household = self.household_repo.get_by_id(household_id)
        if household is None:
            logger.warning("Could not fetch household %s before leaving, proceeding", household_id)
        elif household.is_owner(user_id):
            raise BadRequestException("Owner cannot leave the household. Delete it instead.")

        self.household_repo.document(household_id).update({
            Fields.MEMBERS: firestore.ArrayRemove([user_id]),
            field_path(Fields.MEMBER_ROLES, user_id): firestore.DELETE_FIELD,
        })
        self.household_repo.invalidate(household_id)
        logger.info("User %s left household %s", user_id, household_id)

    def is_member(self, household_id: str, user_id: str) -> bool:
        household = self.household_repo.get_by_id(household_id)
        return household is not None and user_id in household.members

    # Invite codes

    @staticmethod
    def generate_code(length: Optional[int] = None) -> str:
        length = length or settings.INVITE_CODE_LENGTH
        return "".join(secrets.choice(INVITE_CODE_CHARS) for _ in range(length))

    def create_invite_code(self, household_id: str, user_id: str, expires_at: Optional[int] = None) -> InviteCode:
        household = self._require_household(household_id)
        if not can_manage_invite_codes(household.get_role_for_user(user_id)):
            raise AuthorizationException("You don't have permission to create invite codes")

        for _ in range(MAX_CODE_ATTEMPTS):
            code = self.generate_code()
            if not self.document(code).get().exists:
                break
        else:
            raise InternalServerException("Failed to generate unique code")

        invite = InviteCode(
            code=code,
            household_id=household_id,
            household_name=household.name,
            created_by=user_id,
            expires_at=expires_at,
            active=True,
        )
        self.document(code).set(invite.to_document())
        logger.info("Created invite code %s for household %s", code, household_id)
        return invite

    def get_invite_codes(self, household_id: str) -> List[InviteCode]:
        """Active codes for a household."""
        return self.query(
            self.collection
            .where(filter=FieldFilter(Fields.HOUSEHOLD_ID, "==", household_id))
            .where(filter=FieldFilter(Fields.ACTIVE, "==", True))
        )

    def revoke_invite_code(self, household_id: str, user_id: str, code: str) -> None:
        household = self._require_household(household_id)
        if not can_manage_invite_codes(household.get_role_for_user(user_id)):
            raise AuthorizationException("You don't have permission to revoke invite codes")

        self.document(normalize_code(code)).update({Fields.ACTIVE: False})
        logger.info("Revoked invite code %s", code)

    def redeem_invite_code(self, code: str, user_id: str) -> str:
        """
        Join the household behind ``code`` as a MEMBER and mark the code used.
        Existing members are refused and the code stays redeemable.

        Returns the household ID.
        """
        code = normalize_code(code)
        invite = InviteCode.from_snapshot(self.document(code).get()) if code else None
        if invite is None:
            raise InviteCodeException("invalid")
        if not invite.active:
            raise InviteCodeException("revoked")
        if invite.used_by is not None:
            raise InviteCodeException("used")
        if invite.is_expired():
            raise InviteCodeException("expired")
        if self.is_member(invite.household_id, user_id):
            raise BadRequestException("You are already a member of this household")

        household_ref = self.household_repo.document(invite.household_id)
        batch = self.db.batch()
        batch.update(household_ref, {Fields.MEMBERS: firestore.ArrayUnion([user_id])})
        batch.update(household_ref, {field_path(Fields.MEMBER_ROLES, user_id): HouseholdRole.MEMBER.value})
        batch.update(self.document(code), {
            Fields.USED_BY: user_id,
            Fields.USED_AT: now_ms(),
        })
        batch.commit()
        self.household_repo.invalidate(invite.household_id)
        logger.info("User %s joined household %s with code %s", user_id, invite.household_id, code)
        return invite.household_id

    def validate_invite_code(self, code: str) -> Optional[InviteCode]:
        """The invite if it can still be redeemed, otherwise None."""
        code = normalize_code(code)
        if not code:
            return None
        invite = self.get(code)
        if invite is None or not invite.is_valid():
            return None
        return invite
