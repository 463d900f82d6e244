import pytest

from fridgy.core.exception import (
    AuthorizationException,
    BadRequestException,
    InternalServerException,
    InviteCodeException,
    NotHouseholdMemberException,
    ResourceNotFoundException,
)
from fridgy.models.role import HouseholdRole
from fridgy.repositories.household_repository import HouseholdRepository
from fridgy.repositories.membership_repository import MembershipRepository
from fridgy.schemas.household import HouseholdCreate, HouseholdUpdate, InviteCodeCreate
from fridgy.services.household_service import HouseholdService


@pytest.mark.unit
class TestHouseholdService:
    """Unit tests for HouseholdService."""

    def test_create_household(self, db, users):
        """The creator is the only member and holds OWNER."""
        service = HouseholdService(db)

        household = service.create_household("owner-uid", HouseholdCreate(name="  Beach House "))

        assert household.name == "Beach House"
        stored = db.data(f"households/{household.id}")
        assert stored["members"] == ["owner-uid"]
        assert stored["memberRoles"] == {"owner-uid": "OWNER"}
        assert stored["createdBy"] == "owner-uid"
        assert stored["createdAt"] is not None

    def test_get_user_households_display(self, db, household):
        service = HouseholdService(db)

        households = service.get_user_households(household.member)

        assert len(households) == 1
        display = households[0]
        assert display.name == "Home"
        assert display.owner_display_name == "alice"
        assert sorted(p.username for p in display.member_users) == ["alice", "bob", "carol"]
        assert display.fridge_count == 2

    def test_get_household_not_member(self, db, household):
        with pytest.raises(NotHouseholdMemberException):
            HouseholdService(db).get_household(household.id, household.outsider)

    def test_get_household_missing(self, db, household):
        with pytest.raises(ResourceNotFoundException):
            HouseholdService(db).get_household("nope", household.owner)

    def test_get_user_role(self, db, household):
        service = HouseholdService(db)
        assert service.get_user_role(household.id, household.owner) == HouseholdRole.OWNER
        assert service.get_user_role(household.id, household.manager) == HouseholdRole.MANAGER
        assert service.get_user_role(household.id, household.member) == HouseholdRole.MEMBER

    def test_rename_owner_only(self, db, household):
        service = HouseholdService(db)

        with pytest.raises(AuthorizationException):
            service.update_household(household.id, household.manager, HouseholdUpdate(name="Mine"))

        display = service.update_household(household.id, household.owner, HouseholdUpdate(name="Our Place"))
        assert display.name == "Our Place"
        assert db.data("households/house-1")["name"] == "Our Place"

    def test_delete_household_cascades(self, db, household):
        """Fridges, their items, the shopping list and presence all go."""
        db.seed("fridges/fridge-1/items/i1", {"upc": "1"})
        db.seed("fridges/fridge-1/items/i2", {"upc": "2"})
        db.seed("fridges/fridge-2/items/i3", {"upc": "3"})
        db.seed("households/house-1/shoppingList/0001", {"quantity": 1})
        db.seed("households/house-1/shoppingListPresence/member-uid", {"userId": "member-uid", "lastSeen": 1})

        HouseholdService(db).delete_household(household.id, household.owner)

        assert db.data("households/house-1") is None
        assert db.data("fridges/fridge-1") is None
        assert db.data("fridges/fridge-2") is None
        assert db.paths_under("fridges/fridge-1/items") == []
        assert db.paths_under("fridges/fridge-2/items") == []
        assert db.paths_under("households/house-1/shoppingList") == []
        assert db.paths_under("households/house-1/shoppingListPresence") == []
        # Other households are untouched.
        assert db.data("fridges/fridge-other") is not None
        assert HouseholdRepository(db).get_by_id(household.id) is None

    def test_delete_household_manager_refused(self, db, household):
        with pytest.raises(AuthorizationException):
            HouseholdService(db).delete_household(household.id, household.manager)
        assert db.data("households/house-1") is not None

    def test_delete_household_paginates_items(self, db, household):
        for i in range(450):
            db.seed(f"fridges/fridge-1/items/item{i:04d}", {"upc": "1"})

        HouseholdService(db).delete_household(household.id, household.owner)

        assert db.paths_under("fridges/fridge-1/items") == []
        assert db.batch_commits >= 3


@pytest.mark.unit
class TestMembership:
    """Roles, removal, leaving and invite codes."""

    def test_owner_changes_role(self, db, household):
        service = HouseholdService(db)

        display = service.update_member_role(household.id, household.owner, household.member, HouseholdRole.MANAGER)

        assert display.member_roles[household.member] == "MANAGER"
        assert db.data("households/house-1")["memberRoles"][household.member] == "MANAGER"

    def test_manager_cannot_change_roles(self, db, household):
        with pytest.raises(AuthorizationException):
            HouseholdService(db).update_member_role(
                household.id, household.manager, household.member, HouseholdRole.MANAGER
            )

    def test_owner_role_is_fixed(self, db, household):
        with pytest.raises(BadRequestException, match="owner's role"):
            HouseholdService(db).update_member_role(
                household.id, household.owner, household.owner, HouseholdRole.MEMBER
            )

    def test_role_change_for_non_member(self, db, household):
        with pytest.raises(ResourceNotFoundException):
            HouseholdService(db).update_member_role(
                household.id, household.owner, household.outsider, HouseholdRole.MANAGER
            )

    def test_manager_removes_member(self, db, household):
        HouseholdService(db).remove_member(household.id, household.manager, household.member)

        stored = db.data("households/house-1")
        assert household.member not in stored["members"]
        assert household.member not in stored["memberRoles"]

    def test_manager_cannot_remove_manager(self, db, household):
        db.seed("households/house-1", {
            **db.data("households/house-1"),
            "members": [household.owner, household.manager, household.member],
            "memberRoles": {household.owner: "OWNER", household.manager: "MANAGER", household.member: "MANAGER"},
        })
        with pytest.raises(AuthorizationException):
            HouseholdService(db).remove_member(household.id, household.manager, household.member)

    def test_member_cannot_remove(self, db, household):
        with pytest.raises(AuthorizationException):
            HouseholdService(db).remove_member(household.id, household.member, household.manager)

    def test_owner_cannot_be_removed(self, db, household):
        with pytest.raises(BadRequestException):
            HouseholdService(db).remove_member(household.id, household.owner, household.owner)

    def test_leave(self, db, household):
        HouseholdService(db).leave_household(household.id, household.member)

        stored = db.data("households/house-1")
        assert stored["members"] == [household.owner, household.manager]
        assert household.member not in stored["memberRoles"]

    def test_owner_cannot_leave(self, db, household):
        with pytest.raises(BadRequestException, match="Delete it instead"):
            HouseholdService(db).leave_household(household.id, household.owner)

    def test_invite_code_round_trip(self, db, household):
        service = HouseholdService(db)

        invite = service.create_invite_code(household.id, household.manager, InviteCodeCreate())
        assert len(invite.code) == 6
        assert not set(invite.code) & set("IO01")
        assert invite.household_name == "Home"

        joined = service.join_household(household.outsider, f" {invite.code.lower()} ")

        assert joined == household.id
        stored = db.data("households/house-1")
        assert household.outsider in stored["members"]
        assert stored["memberRoles"][household.outsider] == "MEMBER"
        code_doc = db.data(f"inviteCodes/{invite.code}")
        assert code_doc["usedBy"] == household.outsider
        assert code_doc["usedAt"] > 0

    def test_used_code_is_refused(self, db, household):
        service = HouseholdService(db)
        invite = service.create_invite_code(household.id, household.owner, InviteCodeCreate())
        service.join_household(household.outsider, invite.code)

        with pytest.raises(InviteCodeException, match="already been used") as exc_info:
            service.join_household("someone-else", invite.code)
        assert exc_info.value.reason == "used"

    def test_existing_member_cannot_redeem(self, db, household):
        """Redeeming as a member keeps the current role and leaves the code unused."""
        service = HouseholdService(db)
        invite = service.create_invite_code(household.id, household.owner, InviteCodeCreate())

        with pytest.raises(BadRequestException, match="already a member"):
            service.join_household(household.manager, invite.code)

        assert HouseholdService(db).get_user_role(household.id, household.manager) == HouseholdRole.MANAGER
        assert db.data(f"inviteCodes/{invite.code}").get("usedBy") is None
        assert service.join_household(household.outsider, invite.code) == household.id

    def test_expired_code_is_refused(self, db, household):
        service = HouseholdService(db)
        invite = service.create_invite_code(household.id, household.owner, InviteCodeCreate(expires_at=1))

        with pytest.raises(BadRequestException, match="expired"):
            service.join_household(household.outsider, invite.code)

    def test_revoked_code(self, db, household):
        service = HouseholdService(db)
        invite = service.create_invite_code(household.id, household.owner, InviteCodeCreate())
        service.revoke_invite_code(household.id, household.manager, invite.code)

        assert service.get_invite_codes(household.id, household.owner) == []
        with pytest.raises(BadRequestException, match="revoked"):
            service.join_household(household.outsider, invite.code)
        with pytest.raises(ResourceNotFoundException):
            service.validate_invite_code(invite.code)

    def test_unknown_code(self, db, household):
        with pytest.raises(BadRequestException, match="Invalid invite code"):
            HouseholdService(db).join_household(household.outsider, "ZZZZZZ")

    def test_member_cannot_create_codes(self, db, household):
        with pytest.raises(AuthorizationException):
            HouseholdService(db).create_invite_code(household.id, household.member, InviteCodeCreate())

    def test_code_collisions_give_up(self, db, household, monkeypatch):
        db.seed("inviteCodes/AAAAAA", {"householdId": "house-2", "active": True})
        monkeypatch.setattr(MembershipRepository, "generate_code", staticmethod(lambda length=None: "AAAAAA"))

        with pytest.raises(InternalServerException, match="unique code"):
            HouseholdService(db).create_invite_code(household.id, household.owner, InviteCodeCreate())

    def test_collision_retries(self, db, household, monkeypatch):
        db.seed("inviteCodes/AAAAAA", {"householdId": "house-2", "active": True})
        codes = iter(["AAAAAA", "BBBBBB"])
        monkeypatch.setattr(MembershipRepository, "generate_code", staticmethod(lambda length=None: next(codes)))

        invite = HouseholdService(db).create_invite_code(household.id, household.owner, InviteCodeCreate())
        assert invite.code == "BBBBBB"

    def test_is_member(self, db, household):
        repo = MembershipRepository(db)
        assert repo.is_member(household.id, household.member)
        assert not repo.is_member(household.id, household.outsider)
        assert not repo.is_member("missing", household.member)
