import logging
from typing import List

from fridgy.core.exception import (
    AuthorizationException,
    DuplicateResourceException,
    InternalServerException,
    ResourceNotFoundException,
)
from fridgy.models.category import Category
from fridgy.models.user import CurrentUser
from fridgy.repositories.category_repository import CategoryRepository
from fridgy.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


class CategoryService:
    """Food categories; anyone may read them, only admins change them."""

    def __init__(self, db):
        self.db = db
        self.category_repo = CategoryRepository(db)

    @staticmethod
    def _require_admin(current_user: CurrentUser) -> None:
        if not current_user.is_admin:
            raise AuthorizationException("Only admins can manage categories")

    def get_categories(self) -> List[Category]:
        return self.category_repo.get_categories()

    def create_category(self, current_user: CurrentUser, data: CategoryCreate) -> Category:
        self._require_admin(current_user)
        name = data.name.strip()
        if self.category_repo.category_exists(name):
            raise DuplicateResourceException("Category", name)
        return self.category_repo.create_category(name, data.order)

    def update_category(self, current_user: CurrentUser, category_id: str, data: CategoryUpdate) -> Category:
        self._require_admin(current_user)
        existing = self.category_repo.get(category_id)
        if existing is None:
            raise ResourceNotFoundException("Category", category_id)

        name = data.name.strip()
        if name.lower() != existing.name.lower() and self.category_repo.category_exists(name):
            raise DuplicateResourceException("Category", name)
        if not self.category_repo.update_category(category_id, name, data.order):
            raise InternalServerException("Could not update category")
        return existing.model_copy(update={"name": name, "order": data.order})

    def delete_category(self, current_user: CurrentUser, category_id: str) -> None:
        self._require_admin(current_user)
        if not self.category_repo.exists(category_id):
            raise ResourceNotFoundException("Category", category_id)
        if not self.category_repo.delete_category(category_id):
            raise InternalServerException("Could not delete category")
