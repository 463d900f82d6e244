from pydantic import BaseModel, Field, field_validator
from typing import Optional

from fridgy.models.product import SizeUnit


class ProductSave(BaseModel):
    """Schema for creating or updating a product by UPC."""
    name: str = Field(..., min_length=1, max_length=200)
    brand: str = Field("", max_length=100)
    category: str = Field("Other", max_length=100)
    size: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = Field(None, description="A SizeUnit name, e.g. GALLON")

    @field_validator("unit")
    @classmethod
    def validate_unit(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        unit = SizeUnit.from_string(value)
        if unit is None:
            raise ValueError(f"Unknown unit '{value}'")
        return unit.value
