from datetime import datetime
from pydantic import Field
from typing import Dict, Optional, Union

from fridgy.models.base import DocumentModel
from fridgy.models.item import now_ms

Timestamp = Union[datetime, int]


class ShoppingListItem(DocumentModel):
    """
    Entry in ``households/{id}/shoppingList``, keyed by UPC.

    Several shoppers can pick up the same entry; ``obtained_by`` and
    ``target_fridge_id`` are keyed by user ID.
    """

    id_field = "upc"

    upc: str = ""
    added_at: Optional[Timestamp] = Field(default_factory=now_ms)
    added_by: str = ""
    quantity: int = 1
    store: str = ""
    checked: bool = False
    obtained_quantity: Optional[int] = None
    obtained_by: Dict[str, int] = Field(default_factory=dict)
    target_fridge_id: Dict[str, str] = Field(default_factory=dict)
    last_updated_by: str = ""
    last_updated_at: Optional[Timestamp] = Field(default_factory=now_ms)
    custom_name: str = ""


class ActiveViewer(DocumentModel):
    id_field = "user_id"

    user_id: str
    username: str
    last_seen_timestamp: int
