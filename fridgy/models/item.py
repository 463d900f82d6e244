import time
from datetime import datetime
from typing import Optional

from fridgy.config import settings
from fridgy.models.base import DocumentModel
from fridgy.models.product import Product

MS_PER_DAY = 86_400_000


def now_ms() -> int:
    return int(time.time() * 1000)


def is_expired(expiration_date: Optional[int], now: Optional[int] = None) -> bool:
    now = now_ms() if now is None else now
    return expiration_date is not None and expiration_date < now


def is_expiring_soon(expiration_date: Optional[int], now: Optional[int] = None) -> bool:
    now = now_ms() if now is None else now
    threshold = settings.EXPIRING_SOON_DAYS * MS_PER_DAY
    return (
        expiration_date is not None
        and expiration_date > now
        and expiration_date - now < threshold
    )


class Item(DocumentModel):
    """
    One physical unit stored at ``fridges/{fridgeId}/items/{itemId}``.

    Units are tracked individually so each can carry its own expiration date.
    ``expiration_date`` is epoch milliseconds.
    """

    id: str = ""
    upc: str = ""
    expiration_date: Optional[int] = None
    added_by: str = ""
    added_at: Optional[datetime] = None
    last_updated_by: str = ""
    last_updated_at: Optional[datetime] = None

    @property
    def is_expired(self) -> bool:
        return is_expired(self.expiration_date)

    @property
    def is_expiring_soon(self) -> bool:
        return is_expiring_soon(self.expiration_date)


class DisplayItem(DocumentModel):
    item: Item
    product: Optional[Product] = None
    is_expired: bool = False
    is_expiring_soon: bool = False

    @classmethod
    def build(cls, item: Item, product: Optional[Product] = None, now: Optional[int] = None) -> "DisplayItem":
        return cls(
            item=item,
            product=product,
            is_expired=is_expired(item.expiration_date, now),
            is_expiring_soon=is_expiring_soon(item.expiration_date, now),
        )

    @property
    def document_id(self) -> str:
        return self.item.id

    def sort_key(self):
        """Expired first, then expiring soon, then dated, then undated."""
        if self.is_expired:
            bucket = 0
        elif self.is_expiring_soon:
            bucket = 1
        elif self.item.expiration_date is not None:
            bucket = 2
        else:
            bucket = 3
        expiration = self.item.expiration_date
        return bucket, expiration if expiration is not None else float("inf")
