from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from fridgy.database import get_db
from fridgy.dependencies import get_current_user
from fridgy.models.fridge import DisplayFridge
from fridgy.models.item import DisplayItem, Item
from fridgy.models.user import CurrentUser
from fridgy.schemas.fridge import (
    FridgeCreate,
    FridgeUpdate,
    ItemCreate,
    ItemExpirationUpdate,
    ItemMoveRequest,
    ItemMoveResponse,
)
from fridgy.schemas.result import Result
from fridgy.services.fridge_service import FridgeService

router = APIRouter()


@router.get("", response_model=Result[List[DisplayFridge]])
async def get_household_fridges(
    household_id: str = Query(..., min_length=1),
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """List a household's fridges with item counts."""
    service = FridgeService(db)
    return Result.successful(data=service.get_household_fridges(household_id, current_user.uid))


@router.post("", response_model=Result[DisplayFridge], status_code=status.HTTP_201_CREATED)
async def create_fridge(
    fridge_data: FridgeCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Create a fridge (owner or manager)."""
    service = FridgeService(db)
    return Result.successful(data=service.create_fridge(current_user.uid, fridge_data))


@router.get("/{fridge_id}", response_model=Result[DisplayFridge])
async def get_fridge(
    fridge_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = FridgeService(db)
    return Result.successful(data=service.get_fridge(fridge_id, current_user.uid))


@router.put("/{fridge_id}", response_model=Result[DisplayFridge])
async def update_fridge(
    fridge_id: str,
    fridge_data: FridgeUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Rename or relocate a fridge (owner or manager)."""
    service = FridgeService(db)
    return Result.successful(data=service.update_fridge(fridge_id, current_user.uid, fridge_data))


@router.delete("/{fridge_id}", response_model=Result[dict])
async def delete_fridge(
    fridge_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Delete a fridge and all its items (owner or manager)."""
    service = FridgeService(db)
    service.delete_fridge(fridge_id, current_user.uid)
    return Result.acknowledged("Fridge deleted successfully")


@router.get("/{fridge_id}/items", response_model=Result[List[DisplayItem]])
async def get_items(
    fridge_id: str,
    upc: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Items in a fridge, expired and expiring-soon first. Filter with ``upc``."""
    service = FridgeService(db)
    if upc:
        items = service.get_items_by_upc(fridge_id, current_user.uid, upc)
        return Result.successful(data=service.item_repo.build_display_items(items))
    return Result.successful(data=service.get_items(fridge_id, current_user.uid))


@router.post("/{fridge_id}/items", response_model=Result[List[Item]], status_code=status.HTTP_201_CREATED)
async def add_items(
    fridge_id: str,
    item_data: ItemCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Add one or more units of a product."""
    service = FridgeService(db)
    return Result.successful(data=service.add_items(fridge_id, current_user.uid, item_data))


@router.put("/{fridge_id}/items/{item_id}", response_model=Result[Item])
async def update_item_expiration(
    fridge_id: str,
    item_id: str,
    expiration_data: ItemExpirationUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = FridgeService(db)
    item = service.update_expiration_date(fridge_id, item_id, current_user.uid, expiration_data.expiration_date)
    return Result.successful(data=item)


@router.delete("/{fridge_id}/items/{item_id}", response_model=Result[dict])
async def delete_item(
    fridge_id: str,
    item_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = FridgeService(db)
    service.delete_item(fridge_id, item_id, current_user.uid)
    return Result.acknowledged("Item deleted successfully")


@router.post("/{fridge_id}/items/{item_id}/move", response_model=Result[ItemMoveResponse])
async def move_item(
    fridge_id: str,
    item_id: str,
    move_data: ItemMoveRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Move an item to another fridge in the same household."""
    service = FridgeService(db)
    new_id = service.move_item(fridge_id, item_id, current_user.uid, move_data.target_fridge_id)
    return Result.successful(data={"item_id": new_id, "fridge_id": move_data.target_fridge_id})
