import logging
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from typing import Dict, List, Optional

from fridgy.constants import Collections, Fields
from fridgy.models.household import DisplayHousehold, Household
from fridgy.models.role import HouseholdRole
from fridgy.repositories.repository import BaseRepository, DELETE_PAGE_SIZE
from fridgy.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

FRIDGE_PAGE_SIZE = 100


class HouseholdRepository(BaseRepository[Household]):
    """Repository for household operations."""

    def __init__(self, db, user_repo: Optional[UserRepository] = None):
        super().__init__(Household, db, Collections.HOUSEHOLDS)
        self.user_repo = user_repo or UserRepository(db)
        self._cache: Dict[str, Household] = {}

    def households_query(self, user_id: str):
        return self.collection.where(filter=FieldFilter(Fields.MEMBERS, "array_contains", user_id))

    def get_user_households(self, user_id: str) -> List[Household]:
        """Get all households a user belongs to."""
        if not user_id:
            return []
        return self.query(self.households_query(user_id))

    def get_by_id(self, household_id: str) -> Optional[Household]:
        """
        Get a household, serving repeat lookups within this repository from memory.

        Repositories are built per request, so membership and role checks never
        outlive the request that read them.
        """
        if household_id in self._cache:
            return self._cache[household_id]
        try:
            household = Household.from_snapshot(self.document(household_id).get())
        except Exception as ex:
            logger.error("Error fetching household %s: %s", household_id, ex)
            return None

        if household is None:
            logger.debug("Household %s does not exist", household_id)
            return None
        self._cache[household_id] = household
        return household

    def create_household(self, name: str, user_id: str) -> Household:
        """Create a household with the creator as its only member and OWNER."""
        ref = self.document()
        household = Household(
            id=ref.id,
            name=name,
            created_by=user_id,
            members=[user_id],
            member_roles={user_id: HouseholdRole.OWNER.value},
        )
        data = household.to_document()
        data[Fields.CREATED_AT] = firestore.SERVER_TIMESTAMP
        ref.set(data)
        logger.info("Created household %s for user %s", ref.id, user_id)
        return household

    def update_name(self, household_id: str, new_name: str) -> None:
        self.document(household_id).update({Fields.NAME: new_name})
        cached = self._cache.get(household_id)
        if cached:
            self._cache[household_id] = cached.model_copy(update={"name": new_name})

    def delete_household(self, household_id: str) -> None:
        """
        Delete a household and everything under it: fridges with their items,
        then the shopping list, then presence, then the household itself.

        Permission checks belong to the caller. Raises on failure.
        """
        self._delete_fridges(household_id)

        household_ref = self.document(household_id)
        self.delete_collection_in_batches(household_ref.collection(Collections.SHOPPING_LIST))
        self.delete_collection_in_batches(household_ref.collection(Collections.SHOPPING_LIST_PRESENCE))

        household_ref.delete()
        self._cache.pop(household_id, None)
        logger.info("Deleted household %s", household_id)

    def _delete_fridges(self, household_id: str) -> None:
        fridges = self.db.collection(Collections.FRIDGES)
        while True:
            page = list(
                fridges.where(filter=FieldFilter(Fields.HOUSEHOLD_ID, "==", household_id))
                .limit(FRIDGE_PAGE_SIZE)
                .stream()
            )
            if not page:
                break

            for fridge_doc in page:
                self.delete_collection_in_batches(
                    fridge_doc.reference.collection(Collections.ITEMS), DELETE_PAGE_SIZE
                )
                fridge_doc.reference.delete()

            if len(page) < FRIDGE_PAGE_SIZE:
                break

    def get_fridge_count(self, household_id: str) -> int:
        try:
            fridges = (
                self.db.collection(Collections.FRIDGES)
                .where(filter=FieldFilter(Fields.HOUSEHOLD_ID, "==", household_id))
                .stream()
            )
            return sum(1 for _ in fridges)
        except Exception as ex:
            logger.error("Error counting fridges for household %s: %s", household_id, ex)
            return 0

    def to_display(self, household: Household, profiles=None, fridge_count: Optional[int] = None) -> DisplayHousehold:
        if profiles is None:
            profiles = self.user_repo.get_users_by_ids(household.members + [household.created_by])
        if fridge_count is None:
            fridge_count = self.get_fridge_count(household.id)

        owner = profiles.get(household.created_by)
        return DisplayHousehold(
            id=household.id,
            name=household.name,
            created_by_uid=household.created_by,
            owner_display_name=owner.username if owner else "Unknown",
            member_users=[profiles[uid] for uid in household.members if uid in profiles],
            member_roles=household.member_roles,
            fridge_count=fridge_count,
            created_at=household.created_at,
        )

    def get_display_households(self, user_id: str) -> List[DisplayHousehold]:
        """All of a user's households, with member profiles fetched in one pass."""
        households = self.get_user_households(user_id)
        if not households:
            return []

        user_ids = []
        for household in households:
            user_ids.extend(household.members)
            user_ids.append(household.created_by)
        profiles = self.user_repo.get_users_by_ids(user_ids)

        return [self.to_display(household, profiles) for household in households]

    def invalidate(self, household_id: str) -> None:
        self._cache.pop(household_id, None)

