import logging
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from typing import List, Optional

from fridgy.constants import Collections, Fields
from fridgy.core.exception import AuthorizationException, ResourceNotFoundException
from fridgy.models.fridge import DisplayFridge, Fridge
from fridgy.models.role import can_manage_fridges
from fridgy.repositories.household_repository import HouseholdRepository
from fridgy.repositories.repository import BaseRepository
from fridgy.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class FridgeRepository(BaseRepository[Fridge]):
    """Repository for fridges; items live in each fridge's ``items`` subcollection."""

    def __init__(self, db, household_repo: Optional[HouseholdRepository] = None,
                 user_repo: Optional[UserRepository] = None):
        super().__init__(Fridge, db, Collections.FRIDGES)
        self.user_repo = user_repo or UserRepository(db)
        self.household_repo = household_repo or HouseholdRepository(db, self.user_repo)

    def items_collection(self, fridge_id: str):
        return self.document(fridge_id).collection(Collections.ITEMS)

    def fridges_query(self, household_id: str):
        return self.collection.where(filter=FieldFilter(Fields.HOUSEHOLD_ID, "==", household_id))

    def get_fridges_for_household(self, household_id: str) -> List[Fridge]:
        return self.query(self.fridges_query(household_id))

    def get_by_id(self, fridge_id: str) -> Optional[Fridge]:
        return self.get(fridge_id)

    def get_item_count(self, fridge_id: str) -> int:
        try:
            return sum(1 for _ in self.items_collection(fridge_id).stream())
        except Exception as ex:
            logger.error("Error counting items in fridge %s: %s", fridge_id, ex)
            return 0

    def to_display(self, fridge: Fridge, with_item_count: bool = True) -> DisplayFridge:
        creator = self.user_repo.get_user_profile(fridge.created_by) if fridge.created_by else None
        return DisplayFridge(
            id=fridge.id,
            name=fridge.name,
            household_id=fridge.household_id,
            location=fridge.location,
            created_by_uid=fridge.created_by,
            creator_display_name=creator.username if creator else "Unknown",
            item_count=self.get_item_count(fridge.id) if with_item_count else 0,
            created_at=fridge.created_at,
        )

    def get_display_fridges(self, household_id: str) -> List[DisplayFridge]:
        return [self.to_display(fridge) for fridge in self.get_fridges_for_household(household_id)]

    def create_fridge(self, household_id: str, user_id: str, name: str, location: Optional[str] = None) -> Fridge:
        """
        Create a fridge in a household.

        Raises:
            ResourceNotFoundException: If the household does not exist
            AuthorizationException: If the user's role cannot manage fridges
        """
        household = self.household_repo.get_by_id(household_id)
        if household is None:
            raise ResourceNotFoundException("Household", household_id)
        if not can_manage_fridges(household.get_role_for_user(user_id)):
            raise AuthorizationException("You don't have permission to create fridges")

        ref = self.document()
        fridge = Fridge(
            id=ref.id,
            name=name,
            household_id=household_id,
            created_by=user_id,
            location=location,
        )
        data = fridge.to_document()
        data[Fields.CREATED_AT] = firestore.SERVER_TIMESTAMP
        ref.set(data)
        logger.info("Created fridge %s in household %s", ref.id, household_id)
        return fridge

    def update_fridge(self, fridge_id: str, name: Optional[str] = None, location: Optional[str] = None) -> None:
        updates = {}
        if name is not None:
            updates[Fields.NAME] = name
        if location is not None:
            updates[Fields.LOCATION] = location
        if updates:
            self.document(fridge_id).update(updates)

    def delete_fridge(self, fridge_id: str) -> None:
        """Delete a fridge's items in batches, then the fridge. Raises on failure."""
        self.delete_collection_in_batches(self.items_collection(fridge_id))
        self.document(fridge_id).delete()
        logger.info("Deleted fridge %s", fridge_id)
