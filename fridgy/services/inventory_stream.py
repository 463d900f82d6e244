import logging
from typing import Any, Dict, List

from fridgy.core.state import ListenerScope, Registration, StateHolder, UiState
from fridgy.models.item import Item
from fridgy.repositories.repository import is_permission_denied
from fridgy.services.fridge_service import FridgeService

logger = logging.getLogger(__name__)

LOAD_ITEMS_ERROR = "Failed to load items"


class FridgeItemsStream:
    """
    Feeds a fridge's live inventory into a ``StateHolder`` of ``UiState``.

    The holder starts at Loading, moves to Success with the sorted display
    items on every snapshot, and to Error when the listener fails.
    """

    def __init__(self, service: FridgeService, fridge_id: str):
        self.service = service
        self.fridge_id = fridge_id
        self.state: StateHolder[UiState] = StateHolder(UiState.Loading())

    def start(self) -> Registration:
        return self.service.item_repo.listen_items(self.fridge_id, self._on_items, self._on_error)

    def launch_in(self, scope: ListenerScope) -> Registration:
        return scope.launch(f"items:{self.fridge_id}", self.start)

    def _on_items(self, items: List[Item]) -> None:
        products = self.service.product_repo.get_products(item.upc for item in items)
        display = self.service.item_repo.build_display_items(items, products)
        self.state.set(UiState.Success([serialize(entry) for entry in display]))

    def _on_error(self, ex: Exception) -> None:
        if is_permission_denied(ex):
            logger.info("Lost access to fridge %s; stopping stream", self.fridge_id)
        self.state.set(UiState.from_exception(ex, LOAD_ITEMS_ERROR))


def serialize(entry) -> Dict[str, Any]:
    return entry.model_dump(mode="json", by_alias=True)
