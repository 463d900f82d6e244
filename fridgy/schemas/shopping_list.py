from pydantic import BaseModel, Field


class ShoppingListItemCreate(BaseModel):
    """Schema for adding a product to the household shopping list."""
    upc: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(1, ge=1, le=999)
    store: str = Field("", max_length=100)
    custom_name: str = Field("", max_length=200)


class PickupUpdate(BaseModel):
    """How many units the caller picked up and which fridge they go to."""
    obtained_quantity: int = Field(..., ge=0)
    total_quantity: int = Field(..., ge=1)
    target_fridge_id: str = ""


class SessionCompleteResponse(BaseModel):
    items_created: int
