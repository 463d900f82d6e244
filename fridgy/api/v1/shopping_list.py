from fastapi import APIRouter, Depends, status
from typing import List

from fridgy.database import get_db
from fridgy.dependencies import get_current_user
from fridgy.models.shopping_list import ActiveViewer, ShoppingListItem
from fridgy.models.user import CurrentUser
from fridgy.schemas.result import Result
from fridgy.schemas.shopping_list import PickupUpdate, SessionCompleteResponse, ShoppingListItemCreate
from fridgy.services.shopping_list_service import ShoppingListService

router = APIRouter()


@router.get("/{household_id}/shopping-list", response_model=Result[List[ShoppingListItem]])
async def get_shopping_list(
    household_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Get the household's shopping list."""
    service = ShoppingListService(db)
    return Result.successful(data=service.get_items(household_id, current_user.uid))


@router.post(
    "/{household_id}/shopping-list",
    response_model=Result[ShoppingListItem],
    status_code=status.HTTP_201_CREATED,
)
async def add_shopping_list_item(
    household_id: str,
    item_data: ShoppingListItemCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Add a product to the list; recent shoppers are notified."""
    service = ShoppingListService(db)
    item = service.add_item(household_id, current_user.uid, item_data)
    return Result.successful(data=item)


@router.put("/{household_id}/shopping-list/{upc}/pickup", response_model=Result[ShoppingListItem])
async def update_pickup(
    household_id: str,
    upc: str,
    pickup_data: PickupUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Record how many units the caller picked up and the fridge they go to."""
    service = ShoppingListService(db)
    item = service.update_pickup(household_id, current_user.uid, upc, pickup_data)
    return Result.successful(data=item)


@router.post("/{household_id}/shopping-list/complete", response_model=Result[SessionCompleteResponse])
async def complete_shopping_session(
    household_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Put everything the caller picked up into their chosen fridges."""
    service = ShoppingListService(db)
    created = service.complete_shopping_session(household_id, current_user.uid)
    return Result.successful(data={"items_created": created})


@router.get("/{household_id}/shopping-list/presence", response_model=Result[List[ActiveViewer]])
async def get_active_viewers(
    household_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Members who have the list open right now."""
    service = ShoppingListService(db)
    return Result.successful(data=service.get_active_viewers(household_id, current_user.uid))


@router.put("/{household_id}/shopping-list/presence", response_model=Result[dict])
async def set_presence(
    household_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Heartbeat while the caller has the list open."""
    service = ShoppingListService(db)
    service.set_presence(household_id, current_user.uid)
    return Result.acknowledged("Presence updated")


@router.delete("/{household_id}/shopping-list/presence", response_model=Result[dict])
async def remove_presence(
    household_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = ShoppingListService(db)
    service.remove_presence(household_id, current_user.uid)
    return Result.acknowledged("Presence removed")


@router.delete("/{household_id}/shopping-list/{upc}", response_model=Result[dict])
async def remove_shopping_list_item(
    household_id: str,
    upc: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = ShoppingListService(db)
    service.remove_item(household_id, current_user.uid, upc)
    return Result.acknowledged("Item removed from shopping list")
