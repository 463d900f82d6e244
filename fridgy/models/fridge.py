from datetime import datetime
from typing import Any, Optional, Union

from fridgy.models.base import DocumentModel


class Fridge(DocumentModel):
    """A physical fridge (or freezer, pantry...) belonging to one household."""

    id: str = ""
    name: str = ""
    household_id: str = ""
    created_by: str = ""
    location: Optional[str] = None
    created_at: Optional[Union[datetime, int]] = None


class DisplayFridge(DocumentModel):
    id: str = ""
    name: str = ""
    household_id: str = ""
    location: Optional[str] = None
    created_by_uid: str = ""
    creator_display_name: str = "Unknown"
    item_count: int = 0
    created_at: Optional[Any] = None
