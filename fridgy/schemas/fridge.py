from pydantic import BaseModel, Field
from typing import Optional


class FridgeCreate(BaseModel):
    """Schema for creating a fridge in a household."""
    household_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100, description="Fridge name")
    location: Optional[str] = Field(None, max_length=100)


class FridgeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, max_length=100)


class ItemCreate(BaseModel):
    """Schema for adding an item; ``quantity`` separate documents are created."""
    upc: str = Field(..., min_length=1, max_length=64)
    expiration_date: Optional[int] = Field(None, description="Epoch milliseconds")
    quantity: int = Field(1, ge=1, le=100)


class ItemExpirationUpdate(BaseModel):
    expiration_date: Optional[int] = Field(None, description="Epoch milliseconds; null clears it")


class ItemMoveRequest(BaseModel):
    target_fridge_id: str = Field(..., min_length=1)


class ItemMoveResponse(BaseModel):
    item_id: str
    fridge_id: str
