"""
Household roles and the permissions attached to them.

- OWNER: edits roles, manages managers and members, manages fridges and
  invite codes, deletes the household.
- MANAGER: manages fridges and invite codes, removes members (not owners or
  other managers).
- MEMBER: views fridges, adds and removes items, uses the shopping list.

Privilege order: OWNER > MANAGER > MEMBER.
"""
from enum import Enum
from typing import Optional, Union


class HouseholdRole(str, Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    MEMBER = "MEMBER"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "HouseholdRole":
        """Case-insensitive lookup; anything unrecognized is a MEMBER."""
        if not value:
            return cls.MEMBER
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.MEMBER

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def outranks(self, other: "HouseholdRole") -> bool:
        return self.rank > other.rank


_RANKS = {
    HouseholdRole.MEMBER: 0,
    HouseholdRole.MANAGER: 1,
    HouseholdRole.OWNER: 2,
}

RoleLike = Union[HouseholdRole, str, None]


def as_role(role: RoleLike) -> HouseholdRole:
    if isinstance(role, HouseholdRole):
        return role
    return HouseholdRole.from_string(role)


def can_edit_roles(role: RoleLike) -> bool:
    return as_role(role) == HouseholdRole.OWNER


def can_manage_fridges(role: RoleLike) -> bool:
    return as_role(role) in (HouseholdRole.OWNER, HouseholdRole.MANAGER)


def can_manage_invite_codes(role: RoleLike) -> bool:
    return as_role(role) in (HouseholdRole.OWNER, HouseholdRole.MANAGER)


def can_remove_members(role: RoleLike) -> bool:
    return as_role(role) in (HouseholdRole.OWNER, HouseholdRole.MANAGER)


def can_delete_household(role: RoleLike) -> bool:
    return as_role(role) == HouseholdRole.OWNER


def can_view_and_edit_items(role: RoleLike) -> bool:
    return True


def can_modify_user(acting_role: RoleLike, target_role: RoleLike) -> bool:
    """
    Whether ``acting_role`` may change the role of, or remove, a user holding
    ``target_role``. Owners may modify anyone, managers only members.
    """
    acting = as_role(acting_role)
    target = as_role(target_role)
    if acting == HouseholdRole.OWNER:
        return True
    if acting == HouseholdRole.MANAGER:
        return target == HouseholdRole.MEMBER
    return False
