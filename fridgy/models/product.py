import re
from datetime import datetime
from enum import Enum
from pydantic import Field
from typing import List, Optional

from fridgy.models.base import DocumentModel

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")

MIN_WORD_LENGTH = 2
MIN_FRAGMENT_LENGTH = 3


def generate_search_tokens(name: Optional[str], brand: Optional[str]) -> List[str]:
    """
    Build the ``searchTokens`` array for a product.

    Firestore has no full-text search, so each product stores the lowercase
    fragments a user might type: every word, its prefixes from 3 characters up
    and, for words of 4+ characters, its suffixes of 3+ characters (so "milk"
    matches "oatmilk"). Order is first-seen; callers only test membership.
    """
    text = f"{name or ''} {brand or ''}".lower().strip()
    if not text:
        return []

    words = []
    for raw in _WHITESPACE.split(text):
        if not raw or not any(ch.isalnum() for ch in raw):
            continue
        word = _NON_ALNUM.sub("", raw)
        if len(word) >= MIN_WORD_LENGTH:
            words.append(word)

    tokens = {}
    for word in words:
        tokens[word] = None

        if len(word) >= MIN_FRAGMENT_LENGTH:
            for end in range(MIN_FRAGMENT_LENGTH, len(word) + 1):
                tokens[word[:end]] = None

        if len(word) >= 4:
            for start in range(len(word) - MIN_FRAGMENT_LENGTH, -1, -1):
                tokens[word[start:]] = None

    return list(tokens)


class SizeUnit(str, Enum):
    """Standard units of measurement, with display names."""

    # Volume - US
    GALLON = "GALLON"
    QUART = "QUART"
    PINT = "PINT"
    CUP = "CUP"
    FLUID_OUNCE = "FLUID_OUNCE"

    # Volume - Metric
    LITER = "LITER"
    MILLILITER = "MILLILITER"

    # Weight - US
    POUND = "POUND"
    OUNCE = "OUNCE"

    # Weight - Metric
    KILOGRAM = "KILOGRAM"
    GRAM = "GRAM"

    # Count
    PIECE = "PIECE"
    DOZEN = "DOZEN"
    PACK = "PACK"
    BOX = "BOX"
    BAG = "BAG"
    BOTTLE = "BOTTLE"
    CAN = "CAN"

    OTHER = "OTHER"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional["SizeUnit"]:
        if value is None:
            return None
        for unit in cls:
            if unit.name.lower() == value.strip().lower():
                return unit
        return None


class Product(DocumentModel):
    """
    Crowdsourced product keyed by its UPC barcode (the document ID).

    ``search_tokens`` is derived from name and brand; use :meth:`with_search_tokens`
    before every write.
    """

    id_field = "upc"

    upc: str = ""
    name: str = ""
    brand: str = ""
    image_url: Optional[str] = None
    category: str = "Other"
    size: Optional[float] = None
    unit: Optional[str] = None
    search_tokens: List[str] = Field(default_factory=list)
    last_updated: Optional[datetime] = None

    def with_search_tokens(self) -> "Product":
        return self.model_copy(
            update={"search_tokens": generate_search_tokens(self.name, self.brand)}
        )

    @property
    def size_unit(self) -> Optional[SizeUnit]:
        return SizeUnit.from_string(self.unit)
