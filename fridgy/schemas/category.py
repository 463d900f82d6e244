from pydantic import BaseModel, Field

from fridgy.models.category import DEFAULT_CATEGORY_ORDER


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    order: int = Field(DEFAULT_CATEGORY_ORDER, ge=0)


class CategoryUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    order: int = Field(..., ge=0)
