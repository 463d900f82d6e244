import io
import logging
import threading
from collections import OrderedDict
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from PIL import Image, ImageOps
from typing import List, Optional

from fridgy.config import settings
from fridgy.constants import Collections, Fields, StoragePaths
from fridgy.models.product import Product
from fridgy.repositories.repository import BaseRepository

logger = logging.getLogger(__name__)


class ProductCache:
    """
    Least-recently-used cache of products keyed by UPC.

    Shared by request threads and Firestore snapshot callbacks, so every
    access holds the lock.
    """

    def __init__(self, max_size: int):
        self.max_size = max_size
        self._entries: "OrderedDict[str, Product]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, upc: str) -> Optional[Product]:
        with self._lock:
            product = self._entries.get(upc)
            if product is not None:
                self._entries.move_to_end(upc)
            return product

    def put(self, product: Product) -> None:
        with self._lock:
            self._entries[product.upc] = product
            self._entries.move_to_end(product.upc)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def remove(self, upc: str) -> None:
        with self._lock:
            self._entries.pop(upc, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, upc: str) -> bool:
        with self._lock:
            return upc in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def compress_image(data: bytes, max_dimension: Optional[int] = None, quality: Optional[int] = None) -> bytes:
    """
    Re-encode an uploaded photo as a JPEG no larger than ``max_dimension`` on
    either side, with the EXIF orientation applied to the pixels.

    Raises ``PIL.UnidentifiedImageError`` if ``data`` is not an image.
    """
    max_dimension = max_dimension or settings.IMAGE_MAX_DIMENSION
    quality = quality or settings.IMAGE_JPEG_QUALITY

    with Image.open(io.BytesIO(data)) as image:
        image = ImageOps.exif_transpose(image)
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        # thumbnail keeps the aspect ratio and never upscales.
        image.thumbnail((max_dimension, max_dimension))

        output = io.BytesIO()
        image.save(output, format="JPEG", quality=quality)
        return output.getvalue()


class ProductRepository(BaseRepository[Product]):
    """
    Crowdsourced product catalogue keyed by UPC.

    Lookups go through a process-wide LRU cache since scanning the same
    barcode repeatedly is the common case.
    """

    cache = ProductCache(settings.PRODUCT_CACHE_SIZE)

    def __init__(self, db, bucket=None):
        super().__init__(Product, db, Collections.PRODUCTS)
        self.bucket = bucket

    def get_product_info(self, upc: str) -> Optional[Product]:
        cached = self.cache.get(upc)
        if cached is not None:
            return cached

        product = self.get(upc)
        if product is not None:
            self.cache.put(product)
        return product

    def get_products(self, upcs) -> dict:
        """Look up several products at once; unknown UPCs are left out."""
        products = {}
        for upc in dict.fromkeys(upcs):
            product = self.get_product_info(upc)
            if product is not None:
                products[upc] = product
        return products

    def inject_to_cache(self, product: Product) -> None:
        self.cache.put(product)

    def save_product(self, product: Product) -> Product:
        """Write a product, regenerating its search tokens."""
        product = product.with_search_tokens()
        data = product.to_document()
        data[Fields.LAST_UPDATED] = firestore.SERVER_TIMESTAMP
        self.document(product.upc).set(data)
        self.cache.put(product)
        logger.info("Saved product %s", product.upc)
        return product

    def save_product_with_image(self, product: Product, image: Optional[bytes] = None) -> Product:
        """
        Save a product, then upload its photo to ``products/<upc>.jpg``.

        A failed upload keeps the saved product without an image URL.
        """
        product = self.save_product(product)
        if not image:
            return product
        if self.bucket is None:
            logger.warning("No storage bucket configured; skipping image for %s", product.upc)
            return product

        try:
            compressed = compress_image(image)
            blob = self.bucket.blob(StoragePaths.product_image(product.upc))
            blob.upload_from_string(compressed, content_type="image/jpeg")
            blob.make_public()
            image_url = blob.public_url
        except Exception as ex:
            logger.error("Image upload failed for product %s: %s", product.upc, ex)
            return product

        self.document(product.upc).update({Fields.IMAGE_URL: image_url})
        product = product.model_copy(update={"image_url": image_url})
        self.cache.put(product)
        return product

    def search_products(self, query: str, limit: int = 20) -> List[Product]:
        """
        Search by the first word of ``query`` against stored search tokens.

        Matching is exact on a token, so "mil" finds "Milk" through its prefix.
        """
        terms = (query or "").strip().lower().split()
        if not terms:
            return []
        return self.query(
            self.collection
            .where(filter=FieldFilter(Fields.SEARCH_TOKENS, "array_contains", terms[0]))
            .limit(limit)
        )

    def delete_product(self, upc: str) -> bool:
        deleted = self.delete(upc)
        self.cache.remove(upc)
        if deleted and self.bucket is not None:
            try:
                blob = self.bucket.blob(StoragePaths.product_image(upc))
                if blob.exists():
                    blob.delete()
            except Exception as ex:
                logger.warning("Could not delete image for product %s: %s", upc, ex)
        return deleted
