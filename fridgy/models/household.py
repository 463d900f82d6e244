from datetime import datetime
from pydantic import Field
from typing import Dict, List, Optional

from fridgy.models.base import DocumentModel
from fridgy.models.role import HouseholdRole
from fridgy.models.user import UserProfile


class Household(DocumentModel):
    """
    Top-level group owning fridges, members and a shared shopping list.

    ``members`` is kept alongside ``member_roles`` so households can be queried
    with ``array_contains``. Ownership comes from ``created_by``; the role map
    entry for the creator is informational.
    """

    id: str = ""
    name: str = ""
    created_by: str = ""
    members: List[str] = Field(default_factory=list)
    member_roles: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    def get_role_for_user(self, user_id: str) -> HouseholdRole:
        if self.is_owner(user_id):
            return HouseholdRole.OWNER
        return HouseholdRole.from_string(self.member_roles.get(user_id))

    def is_owner(self, user_id: str) -> bool:
        return bool(user_id) and user_id == self.created_by

    def is_member(self, user_id: str) -> bool:
        return user_id in self.members or user_id in self.member_roles


class DisplayHousehold(DocumentModel):
    """Household with member profiles resolved for display."""

    id: str = ""
    name: str = ""
    created_by_uid: str = ""
    owner_display_name: str = "Unknown"
    member_users: List[UserProfile] = Field(default_factory=list)
    member_roles: Dict[str, str] = Field(default_factory=dict)
    fridge_count: int = 0
    created_at: Optional[datetime] = None
