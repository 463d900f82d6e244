import logging
from typing import List, Optional

from fridgy.core.exception import AuthorizationException, BadRequestException, ResourceNotFoundException
from fridgy.models.product import Product
from fridgy.models.user import CurrentUser
from fridgy.repositories.product_repository import ProductRepository
from fridgy.schemas.product import ProductSave

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


class ProductService:
    """Service layer for the shared product catalogue."""

    def __init__(self, db, bucket=None):
        self.db = db
        self.product_repo = ProductRepository(db, bucket)

    def get_product(self, upc: str) -> Product:
        product = self.product_repo.get_product_info(upc)
        if product is None:
            raise ResourceNotFoundException("Product", upc)
        return product

    def search_products(self, query: str, limit: int = 20) -> List[Product]:
        if len((query or "").strip()) < MIN_SEARCH_LENGTH:
            raise BadRequestException(f"Search query must be at least {MIN_SEARCH_LENGTH} characters")
        return self.product_repo.search_products(query, limit)

    def save_product(self, upc: str, data: ProductSave, image: Optional[bytes] = None) -> Product:
        """
        Create or overwrite the product for ``upc``.

        Any signed-in user may contribute products; an existing image URL is
        kept unless a new image is uploaded.
        """
        existing = self.product_repo.get_product_info(upc)
        product = Product(
            upc=upc,
            name=data.name.strip(),
            brand=data.brand.strip(),
            category=data.category,
            size=data.size,
            unit=data.unit,
            image_url=existing.image_url if existing else None,
        )
        return self.product_repo.save_product_with_image(product, image)

    def upload_image(self, upc: str, image: bytes) -> Product:
        if not image:
            raise BadRequestException("Image file is empty")
        product = self.get_product(upc)
        return self.product_repo.save_product_with_image(product, image)

    def delete_product(self, upc: str, current_user: CurrentUser) -> None:
        if not current_user.is_admin:
            raise AuthorizationException("Only admins can delete products")
        self.get_product(upc)
        self.product_repo.delete_product(upc)
