import logging
from typing import List

from fridgy.constants import Collections, Fields
from fridgy.models.category import DEFAULT_CATEGORY_ORDER, Category
from fridgy.repositories.repository import BaseRepository

logger = logging.getLogger(__name__)


class CategoryRepository(BaseRepository[Category]):
    """Repository for product categories."""

    def __init__(self, db):
        super().__init__(Category, db, Collections.CATEGORIES)

    def ordered_query(self):
        return self.collection.order_by(Fields.ORDER)

    def get_categories(self) -> List[Category]:
        return self.query(self.ordered_query())

    def create_category(self, name: str, order: int = DEFAULT_CATEGORY_ORDER) -> Category:
        category = self.create(Category(name=name, order=order))
        logger.info("Created category %s (%s)", category.name, category.id)
        return category

    def update_category(self, category_id: str, name: str, order: int) -> bool:
        return self.update(category_id, {Fields.NAME: name, Fields.ORDER: order})

    def delete_category(self, category_id: str) -> bool:
        return self.delete(category_id)

    def category_exists(self, name: str) -> bool:
        """Case-insensitive name check across all categories."""
        wanted = (name or "").strip().lower()
        return any(category.name.strip().lower() == wanted for category in self.get_categories())
