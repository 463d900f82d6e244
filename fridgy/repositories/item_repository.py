import logging
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from typing import Callable, Dict, List, Optional

from fridgy.constants import Fields
from fridgy.core.exception import (
    AuthorizationException,
    BadRequestException,
    ResourceNotFoundException,
)
from fridgy.models.item import DisplayItem, Item, now_ms
from fridgy.models.product import Product
from fridgy.repositories.fridge_repository import FridgeRepository
from fridgy.repositories.repository import BaseRepository

logger = logging.getLogger(__name__)


def new_item_data(upc: str, user_id: str, expiration_date: Optional[int] = None) -> Dict:
    """Document body for a freshly added item, timestamped by the server."""
    return {
        Fields.UPC: upc,
        Fields.EXPIRATION_DATE: expiration_date,
        Fields.ADDED_BY: user_id,
        Fields.LAST_UPDATED_BY: user_id,
        Fields.ADDED_AT: firestore.SERVER_TIMESTAMP,
        Fields.LAST_UPDATED_AT: firestore.SERVER_TIMESTAMP,
    }


def sort_display_items(items: List[DisplayItem]) -> List[DisplayItem]:
    return sorted(items, key=DisplayItem.sort_key)


class ItemRepository(BaseRepository[Item]):
    """
    Items in a fridge's ``items`` subcollection, one document per unit.

    Writes raise on failure so the caller can report them.
    """

    def __init__(self, db, fridge_repo: Optional[FridgeRepository] = None):
        # Items have no top-level collection; every access goes through a fridge.
        super().__init__(Item, db, "")
        self.fridge_repo = fridge_repo or FridgeRepository(db)

    def items(self, fridge_id: str):
        return self.fridge_repo.items_collection(fridge_id)

    def get_items(self, fridge_id: str) -> List[Item]:
        return self.query(self.items(fridge_id))

    @staticmethod
    def build_display_items(items: List[Item], products: Optional[Dict[str, Product]] = None,
                            now: Optional[int] = None) -> List[DisplayItem]:
        products = products or {}
        now = now_ms() if now is None else now
        return sort_display_items([DisplayItem.build(item, products.get(item.upc), now) for item in items])

    def get_items_by_upc(self, fridge_id: str, upc: str) -> List[Item]:
        return self.query(self.items(fridge_id).where(filter=FieldFilter(Fields.UPC, "==", upc)))

    def get_item_count(self, fridge_id: str) -> int:
        return self.fridge_repo.get_item_count(fridge_id)

    def get_item(self, fridge_id: str, item_id: str) -> Optional[Item]:
        try:
            return Item.from_snapshot(self.items(fridge_id).document(item_id).get())
        except Exception as ex:
            logger.error("Error fetching item %s in fridge %s: %s", item_id, fridge_id, ex)
            return None

    def listen_items(self, fridge_id: str, on_change: Callable[[List[Item]], None],
                     on_error: Callable[[Exception], None]):
        return self.listen(self.items(fridge_id), on_change, on_error)

    def add_item(self, fridge_id: str, upc: str, user_id: str, expiration_date: Optional[int] = None) -> Item:
        _, ref = self.items(fridge_id).add(new_item_data(upc, user_id, expiration_date))
        logger.info("Added item %s (upc %s) to fridge %s", ref.id, upc, fridge_id)
        return Item(id=ref.id, upc=upc, expiration_date=expiration_date, added_by=user_id, last_updated_by=user_id)

    def update_expiration_date(self, fridge_id: str, item_id: str, user_id: str,
                               expiration_date: Optional[int]) -> None:
        self.items(fridge_id).document(item_id).update({
            Fields.EXPIRATION_DATE: expiration_date,
            Fields.LAST_UPDATED_BY: user_id,
            Fields.LAST_UPDATED_AT: firestore.SERVER_TIMESTAMP,
        })

    def delete_item(self, fridge_id: str, item_id: str) -> None:
        self.items(fridge_id).document(item_id).delete()
        logger.info("Deleted item %s from fridge %s", item_id, fridge_id)

    def move_item(self, source_fridge_id: str, target_fridge_id: str, item_id: str, user_id: str) -> str:
        """
        Move an item between two fridges of the same household.

        The item is recreated under the target fridge with fresh metadata and
        removed from the source in one batch. Returns the new item ID.
        """
        source = self.fridge_repo.get_by_id(source_fridge_id)
        if source is None:
            raise ResourceNotFoundException("Source fridge", source_fridge_id)
        target = self.fridge_repo.get_by_id(target_fridge_id)
        if target is None:
            raise ResourceNotFoundException("Target fridge", target_fridge_id)
        if source.household_id != target.household_id:
            raise BadRequestException("Cannot move items between fridges in different households")

        household = self.fridge_repo.household_repo.get_by_id(source.household_id)
        if household is None:
            raise ResourceNotFoundException("Household", source.household_id)
        if user_id not in household.member_roles:
            raise AuthorizationException("You don't have permission to move items in this household")

        source_ref = self.items(source_fridge_id).document(item_id)
        item = Item.from_snapshot(source_ref.get())
        if item is None:
            raise ResourceNotFoundException("Item", item_id)

        target_ref = self.items(target_fridge_id).document()
        batch = self.db.batch()
        batch.set(target_ref, new_item_data(item.upc, user_id, item.expiration_date))
        batch.delete(source_ref)
        batch.commit()
        logger.info("Moved item %s from fridge %s to %s", item_id, source_fridge_id, target_fridge_id)
        return target_ref.id
