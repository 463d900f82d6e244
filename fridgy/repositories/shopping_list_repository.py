import logging
import random
from datetime import datetime
from firebase_admin import firestore
from typing import Any, Dict, List, Optional

from fridgy.config import settings
from fridgy.constants import Collections, Fields
from fridgy.models.item import now_ms
from fridgy.models.notification import NotificationType
from fridgy.models.shopping_list import ActiveViewer, ShoppingListItem
from fridgy.repositories.item_repository import new_item_data
from fridgy.repositories.notification_repository import NotificationRepository
from fridgy.repositories.product_repository import ProductRepository
from fridgy.repositories.repository import BaseRepository
from fridgy.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# Roughly one presence write in this many also sweeps stale presence docs.
CLEANUP_ONE_IN = 10


def timestamp_ms(value: Any) -> int:
    """Epoch ms for a stored timestamp; 0 when unset (e.g. a pending server timestamp)."""
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    if isinstance(value, (int, float)):
        return int(value)
    return 0


def apply_pickup(obtained_by: Dict[str, int], target_fridge_id: Dict[str, str], user_id: str,
                 obtained_quantity: int, fridge_id: str, total_quantity: int) -> Dict[str, Any]:
    """
    Fold one shopper's pickup into the shared maps.

    Returns the fields to write: both maps, the summed ``obtainedQuantity`` and
    ``checked`` once the total reaches ``total_quantity``.
    """
    obtained_by = {uid: int(qty) for uid, qty in (obtained_by or {}).items()}
    target_fridge_id = dict(target_fridge_id or {})

    if obtained_quantity > 0:
        obtained_by[user_id] = obtained_quantity
    else:
        obtained_by.pop(user_id, None)

    if obtained_quantity > 0 and fridge_id:
        target_fridge_id[user_id] = fridge_id
    else:
        target_fridge_id.pop(user_id, None)

    total = sum(obtained_by.values())
    return {
        Fields.OBTAINED_BY: obtained_by,
        Fields.TARGET_FRIDGE_ID: target_fridge_id,
        Fields.OBTAINED_QUANTITY: total,
        Fields.CHECKED: total >= total_quantity,
    }


class ShoppingListRepository(BaseRepository[ShoppingListItem]):
    """
    A household's shared shopping list (``households/{id}/shoppingList``)
    and who is currently looking at it (``shoppingListPresence``).
    """

    def __init__(self, db, notification_repo: Optional[NotificationRepository] = None,
                 user_repo: Optional[UserRepository] = None,
                 product_repo: Optional[ProductRepository] = None):
        super().__init__(ShoppingListItem, db, Collections.HOUSEHOLDS)
        self.notification_repo = notification_repo or NotificationRepository(db)
        self.user_repo = user_repo or UserRepository(db)
        self.product_repo = product_repo or ProductRepository(db)

    def list_ref(self, household_id: str):
        return self.collection.document(household_id).collection(Collections.SHOPPING_LIST)

    def presence_ref(self, household_id: str):
        return self.collection.document(household_id).collection(Collections.SHOPPING_LIST_PRESENCE)

    def get_items(self, household_id: str) -> List[ShoppingListItem]:
        return self.query(self.list_ref(household_id))

    def get_item(self, household_id: str, upc: str) -> Optional[ShoppingListItem]:
        try:
            return ShoppingListItem.from_snapshot(self.list_ref(household_id).document(upc).get())
        except Exception as ex:
            logger.error("Error fetching shopping list item %s: %s", upc, ex)
            return None

    def add_item(self, household_id: str, user_id: str, upc: str, quantity: int = 1,
                 store: str = "", custom_name: str = "") -> ShoppingListItem:
        """Add (or replace) the entry for ``upc`` and tell recent shoppers."""
        item = ShoppingListItem(
            upc=upc,
            added_by=user_id,
            quantity=quantity,
            store=store,
            custom_name=custom_name,
            last_updated_by=user_id,
        )
        data = item.to_document()
        data[Fields.ADDED_AT] = firestore.SERVER_TIMESTAMP
        data[Fields.LAST_UPDATED_AT] = firestore.SERVER_TIMESTAMP
        self.list_ref(household_id).document(upc).set(data)
        logger.info("Added %s x%d to shopping list of household %s", upc, quantity, household_id)

        self.notify_recent_shoppers(household_id, user_id, self._display_name(upc, custom_name))
        return item

    def _display_name(self, upc: str, custom_name: str) -> str:
        if custom_name:
            return custom_name
        product = self.product_repo.get_product_info(upc)
        return product.name if product and product.name else upc

    def remove_item(self, household_id: str, upc: str) -> None:
        self.list_ref(household_id).document(upc).delete()

    def update_pickup(self, household_id: str, user_id: str, upc: str, obtained_quantity: int,
                      total_quantity: int, fridge_id: str) -> None:
        """
        Record how many of ``upc`` this shopper has picked up and where they go.

        Runs in a transaction since several shoppers may update the same entry.
        """
        item_ref = self.list_ref(household_id).document(upc)

        @firestore.transactional
        def _update(transaction, ref):
            snapshot = ref.get(transaction=transaction)
            current = snapshot.to_dict() or {}
            updates = apply_pickup(
                current.get(Fields.OBTAINED_BY),
                current.get(Fields.TARGET_FRIDGE_ID),
                user_id,
                obtained_quantity,
                fridge_id,
                total_quantity,
            )
            updates[Fields.LAST_UPDATED_BY] = user_id
            updates[Fields.LAST_UPDATED_AT] = firestore.SERVER_TIMESTAMP
            transaction.update(ref, updates)

        _update(self.db.transaction(), item_ref)

    def complete_shopping_session(self, household_id: str, user_id: str) -> int:
        """
        Move everything this shopper picked up into their chosen fridges.

        One item document is created per unit. The list entry is deleted once
        its quantity is covered, otherwise reduced by what this shopper took.
        Returns the number of items created. Raises on failure.
        """
        list_ref = self.list_ref(household_id)
        entries = self.to_models(list_ref.stream())

        batch = self.db.batch()
        created = 0
        for entry in entries:
            user_quantity = int(entry.obtained_by.get(user_id, 0))
            fridge_id = entry.target_fridge_id.get(user_id)
            if user_quantity <= 0 or not fridge_id:
                continue

            items = self.db.collection(Collections.FRIDGES).document(fridge_id).collection(Collections.ITEMS)
            for _ in range(user_quantity):
                batch.set(items.document(), new_item_data(entry.upc, user_id))
                created += 1

            entry_ref = list_ref.document(entry.upc)
            remaining_obtained = {uid: int(qty) for uid, qty in entry.obtained_by.items() if uid != user_id}
            remaining_targets = {uid: fid for uid, fid in entry.target_fridge_id.items() if uid != user_id}
            remaining_needed = entry.quantity - user_quantity

            if remaining_needed <= 0:
                batch.delete(entry_ref)
            else:
                batch.update(entry_ref, {
                    Fields.QUANTITY: remaining_needed,
                    Fields.OBTAINED_BY: remaining_obtained,
                    Fields.TARGET_FRIDGE_ID: remaining_targets,
                    Fields.OBTAINED_QUANTITY: sum(remaining_obtained.values()),
                    Fields.CHECKED: False,
                    Fields.LAST_UPDATED_BY: user_id,
                    Fields.LAST_UPDATED_AT: firestore.SERVER_TIMESTAMP,
                })

        batch.commit()
        logger.info("User %s completed shopping in household %s: %d items", user_id, household_id, created)
        return created

    # Presence

    def set_presence(self, household_id: str, user_id: str, cleanup: Optional[bool] = None) -> None:
        self.presence_ref(household_id).document(user_id).set({
            Fields.USER_ID: user_id,
            Fields.LAST_SEEN: firestore.SERVER_TIMESTAMP,
        })
        if cleanup is None:
            cleanup = random.randrange(CLEANUP_ONE_IN) == 0
        if cleanup:
            self.cleanup_stale_presence(household_id, exclude_user_id=user_id)

    def remove_presence(self, household_id: str, user_id: str) -> None:
        self.presence_ref(household_id).document(user_id).delete()

    def cleanup_stale_presence(self, household_id: str, exclude_user_id: Optional[str] = None,
                               now: Optional[int] = None) -> int:
        """Delete presence docs older than a day. Failures are logged, never raised."""
        now = now_ms() if now is None else now
        cutoff = now - settings.STALE_PRESENCE_HOURS * 3600 * 1000
        try:
            batch = self.db.batch()
            deleted = 0
            for doc in self.presence_ref(household_id).stream():
                data = doc.to_dict() or {}
                if data.get(Fields.USER_ID) == exclude_user_id:
                    continue
                last_seen = timestamp_ms(data.get(Fields.LAST_SEEN))
                if last_seen and last_seen < cutoff:
                    batch.delete(doc.reference)
                    deleted += 1
            if deleted:
                batch.commit()
            return deleted
        except Exception as ex:
            logger.warning("Presence cleanup failed for household %s: %s", household_id, ex)
            return 0

    def _viewers_since(self, household_id: str, since: int, strict: bool) -> List[ActiveViewer]:
        seen = []
        for doc in self.presence_ref(household_id).stream():
            data = doc.to_dict() or {}
            user_id = data.get(Fields.USER_ID)
            last_seen = timestamp_ms(data.get(Fields.LAST_SEEN))
            if not user_id:
                continue
            if (last_seen > since) if strict else (last_seen >= since):
                seen.append((user_id, last_seen))
        if not seen:
            return []

        profiles = self.user_repo.get_users_by_ids(uid for uid, _ in seen)
        return [
            ActiveViewer(user_id=uid, username=profiles[uid].username, last_seen_timestamp=last_seen)
            for uid, last_seen in seen
            if uid in profiles
        ]

    def get_active_viewers(self, household_id: str, now: Optional[int] = None) -> List[ActiveViewer]:
        """Users seen within the presence timeout (30 s by default)."""
        now = now_ms() if now is None else now
        since = now - settings.PRESENCE_TIMEOUT_SECONDS * 1000
        try:
            return self._viewers_since(household_id, since, strict=True)
        except Exception as ex:
            logger.error("Error reading presence for household %s: %s", household_id, ex)
            return []

    def get_recent_viewers(self, household_id: str, now: Optional[int] = None) -> List[ActiveViewer]:
        """Users seen within the last 30 minutes; these get add notifications."""
        now = now_ms() if now is None else now
        since = now - settings.RECENT_VIEWER_TIMEOUT_MINUTES * 60 * 1000
        try:
            return self._viewers_since(household_id, since, strict=False)
        except Exception as ex:
            logger.error("Error reading recent viewers for household %s: %s", household_id, ex)
            return []

    def notify_recent_shoppers(self, household_id: str, user_id: str, item_name: str) -> int:
        """Notify recent viewers other than ``user_id``. Never raises."""
        try:
            viewers = [v for v in self.get_recent_viewers(household_id) if v.user_id != user_id]
            for viewer in viewers:
                self.notification_repo.send_in_app_notification(
                    user_id=viewer.user_id,
                    title="New item added to shopping list",
                    body=f"{item_name} was just added",
                    type=NotificationType.ITEM_ADDED,
                    related_item_id=item_name,
                )
            return len(viewers)
        except Exception as ex:
            logger.warning("Could not notify shoppers in household %s: %s", household_id, ex)
            return 0
