import logging
from typing import List, Tuple

from fridgy.core.exception import AuthorizationException, NotHouseholdMemberException, ResourceNotFoundException
from fridgy.models.fridge import DisplayFridge, Fridge
from fridgy.models.household import Household
from fridgy.models.item import DisplayItem, Item
from fridgy.models.role import can_manage_fridges
from fridgy.repositories.fridge_repository import FridgeRepository
from fridgy.repositories.household_repository import HouseholdRepository
from fridgy.repositories.item_repository import ItemRepository
from fridgy.repositories.product_repository import ProductRepository
from fridgy.repositories.user_repository import UserRepository
from fridgy.schemas.fridge import FridgeCreate, FridgeUpdate, ItemCreate

logger = logging.getLogger(__name__)


class FridgeService:
    """Service layer for fridges and the items inside them."""

    def __init__(self, db):
        self.db = db
        self.user_repo = UserRepository(db)
        self.household_repo = HouseholdRepository(db, self.user_repo)
        self.fridge_repo = FridgeRepository(db, self.household_repo, self.user_repo)
        self.item_repo = ItemRepository(db, self.fridge_repo)
        self.product_repo = ProductRepository(db)

    def _household_for_member(self, household_id: str, user_id: str) -> Household:
        household = self.household_repo.get_by_id(household_id)
        if household is None:
            raise ResourceNotFoundException("Household", household_id)
        if not household.is_member(user_id):
            raise NotHouseholdMemberException(household_id)
        return household

    def get_accessible_fridge(self, fridge_id: str, user_id: str) -> Tuple[Fridge, Household]:
        """
        Get a fridge whose household the user belongs to.

        Raises:
            ResourceNotFoundException: If the fridge or its household is missing
            NotHouseholdMemberException: If the user is not a household member
        """
        fridge = self.fridge_repo.get_by_id(fridge_id)
        if fridge is None:
            raise ResourceNotFoundException("Fridge", fridge_id)
        return fridge, self._household_for_member(fridge.household_id, user_id)

    def _managed_fridge(self, fridge_id: str, user_id: str) -> Fridge:
        fridge, household = self.get_accessible_fridge(fridge_id, user_id)
        if not can_manage_fridges(household.get_role_for_user(user_id)):
            raise AuthorizationException(permission="manage fridges")
        return fridge

    def get_household_fridges(self, household_id: str, user_id: str) -> List[DisplayFridge]:
        self._household_for_member(household_id, user_id)
        return self.fridge_repo.get_display_fridges(household_id)

    def get_fridge(self, fridge_id: str, user_id: str) -> DisplayFridge:
        fridge, _ = self.get_accessible_fridge(fridge_id, user_id)
        return self.fridge_repo.to_display(fridge)

    def create_fridge(self, user_id: str, data: FridgeCreate) -> DisplayFridge:
        fridge = self.fridge_repo.create_fridge(data.household_id, user_id, data.name.strip(), data.location)
        return self.fridge_repo.to_display(fridge, with_item_count=False)

    def update_fridge(self, fridge_id: str, user_id: str, data: FridgeUpdate) -> DisplayFridge:
        self._managed_fridge(fridge_id, user_id)
        self.fridge_repo.update_fridge(fridge_id, name=data.name, location=data.location)
        return self.get_fridge(fridge_id, user_id)

    def delete_fridge(self, fridge_id: str, user_id: str) -> None:
        self._managed_fridge(fridge_id, user_id)
        self.fridge_repo.delete_fridge(fridge_id)

    # Inventory

    def get_items(self, fridge_id: str, user_id: str) -> List[DisplayItem]:
        """Items with product details, expired and expiring-soon first."""
        self.get_accessible_fridge(fridge_id, user_id)
        items = self.item_repo.get_items(fridge_id)
        products = self.product_repo.get_products(item.upc for item in items)
        return self.item_repo.build_display_items(items, products)

    def get_items_by_upc(self, fridge_id: str, user_id: str, upc: str) -> List[Item]:
        self.get_accessible_fridge(fridge_id, user_id)
        return self.item_repo.get_items_by_upc(fridge_id, upc)

    def add_items(self, fridge_id: str, user_id: str, data: ItemCreate) -> List[Item]:
        """Add ``data.quantity`` units, each as its own item."""
        self.get_accessible_fridge(fridge_id, user_id)
        return [
            self.item_repo.add_item(fridge_id, data.upc, user_id, data.expiration_date)
            for _ in range(data.quantity)
        ]

    def update_expiration_date(self, fridge_id: str, item_id: str, user_id: str, expiration_date) -> Item:
        self.get_accessible_fridge(fridge_id, user_id)
        if self.item_repo.get_item(fridge_id, item_id) is None:
            raise ResourceNotFoundException("Item", item_id)
        self.item_repo.update_expiration_date(fridge_id, item_id, user_id, expiration_date)
        return self.item_repo.get_item(fridge_id, item_id)

    def delete_item(self, fridge_id: str, item_id: str, user_id: str) -> None:
        self.get_accessible_fridge(fridge_id, user_id)
        if self.item_repo.get_item(fridge_id, item_id) is None:
            raise ResourceNotFoundException("Item", item_id)
        self.item_repo.delete_item(fridge_id, item_id)

    def move_item(self, fridge_id: str, item_id: str, user_id: str, target_fridge_id: str) -> str:
        return self.item_repo.move_item(fridge_id, target_fridge_id, item_id, user_id)
