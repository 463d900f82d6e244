from pydantic import Field

from fridgy.models.base import DocumentModel
from fridgy.models.item import now_ms

DEFAULT_CATEGORY_ORDER = 999


class Category(DocumentModel):
    """Food category managed from the admin panel; lower ``order`` sorts first."""

    id: str = ""
    name: str = ""
    order: int = DEFAULT_CATEGORY_ORDER
    created_at: int = Field(default_factory=now_ms)
