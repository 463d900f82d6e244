import logging
from typing import List

from fridgy.core.exception import BadRequestException, NotHouseholdMemberException, ResourceNotFoundException
from fridgy.models.shopping_list import ActiveViewer, ShoppingListItem
from fridgy.repositories.fridge_repository import FridgeRepository
from fridgy.repositories.household_repository import HouseholdRepository
from fridgy.repositories.notification_repository import NotificationRepository
from fridgy.repositories.product_repository import ProductRepository
from fridgy.repositories.shopping_list_repository import ShoppingListRepository
from fridgy.repositories.user_repository import UserRepository
from fridgy.schemas.shopping_list import PickupUpdate, ShoppingListItemCreate

logger = logging.getLogger(__name__)


class ShoppingListService:
    """Service layer for a household's shared shopping list."""

    def __init__(self, db):
        self.db = db
        self.user_repo = UserRepository(db)
        self.household_repo = HouseholdRepository(db, self.user_repo)
        self.fridge_repo = FridgeRepository(db, self.household_repo, self.user_repo)
        self.shopping_repo = ShoppingListRepository(
            db,
            notification_repo=NotificationRepository(db),
            user_repo=self.user_repo,
            product_repo=ProductRepository(db),
        )

    def _check_member(self, household_id: str, user_id: str) -> None:
        household = self.household_repo.get_by_id(household_id)
        if household is None:
            raise ResourceNotFoundException("Household", household_id)
        if not household.is_member(user_id):
            raise NotHouseholdMemberException(household_id)

    def get_items(self, household_id: str, user_id: str) -> List[ShoppingListItem]:
        self._check_member(household_id, user_id)
        return self.shopping_repo.get_items(household_id)

    def add_item(self, household_id: str, user_id: str, data: ShoppingListItemCreate) -> ShoppingListItem:
        self._check_member(household_id, user_id)
        return self.shopping_repo.add_item(
            household_id, user_id, data.upc, data.quantity, data.store.strip(), data.custom_name.strip()
        )

    def remove_item(self, household_id: str, user_id: str, upc: str) -> None:
        self._check_member(household_id, user_id)
        if self.shopping_repo.get_item(household_id, upc) is None:
            raise ResourceNotFoundException("Shopping list item", upc)
        self.shopping_repo.remove_item(household_id, upc)

    def update_pickup(self, household_id: str, user_id: str, upc: str, data: PickupUpdate) -> ShoppingListItem:
        """
        Record the caller's pickup for one entry.

        Raises:
            BadRequestException: If the target fridge belongs to another household
            ResourceNotFoundException: If the entry is not on the list
        """
        self._check_member(household_id, user_id)
        if self.shopping_repo.get_item(household_id, upc) is None:
            raise ResourceNotFoundException("Shopping list item", upc)

        if data.obtained_quantity > 0 and data.target_fridge_id:
            fridge = self.fridge_repo.get_by_id(data.target_fridge_id)
            if fridge is None or fridge.household_id != household_id:
                raise BadRequestException("Target fridge must belong to this household")

        self.shopping_repo.update_pickup(
            household_id, user_id, upc, data.obtained_quantity, data.total_quantity, data.target_fridge_id
        )
        return self.shopping_repo.get_item(household_id, upc)

    def complete_shopping_session(self, household_id: str, user_id: str) -> int:
        self._check_member(household_id, user_id)
        return self.shopping_repo.complete_shopping_session(household_id, user_id)

    def set_presence(self, household_id: str, user_id: str) -> None:
        self._check_member(household_id, user_id)
        self.shopping_repo.set_presence(household_id, user_id)

    def remove_presence(self, household_id: str, user_id: str) -> None:
        self.shopping_repo.remove_presence(household_id, user_id)

    def get_active_viewers(self, household_id: str, user_id: str) -> List[ActiveViewer]:
        self._check_member(household_id, user_id)
        return self.shopping_repo.get_active_viewers(household_id)
