from fastapi import APIRouter, Depends, status
from typing import List

from fridgy.database import get_db
from fridgy.dependencies import get_current_admin, get_current_user
from fridgy.models.category import Category
from fridgy.models.user import CurrentUser
from fridgy.schemas.category import CategoryCreate, CategoryUpdate
from fridgy.schemas.result import Result
from fridgy.services.category_service import CategoryService

router = APIRouter()


@router.get("", response_model=Result[List[Category]])
async def get_categories(
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """All categories in display order."""
    service = CategoryService(db)
    return Result.successful(data=service.get_categories())


@router.post("", response_model=Result[Category], status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    current_user: CurrentUser = Depends(get_current_admin),
    db=Depends(get_db)
):
    service = CategoryService(db)
    return Result.successful(data=service.create_category(current_user, category_data))


@router.put("/{category_id}", response_model=Result[Category])
async def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    current_user: CurrentUser = Depends(get_current_admin),
    db=Depends(get_db)
):
    service = CategoryService(db)
    return Result.successful(data=service.update_category(current_user, category_id, category_data))


@router.delete("/{category_id}", response_model=Result[dict])
async def delete_category(
    category_id: str,
    current_user: CurrentUser = Depends(get_current_admin),
    db=Depends(get_db)
):
    service = CategoryService(db)
    service.delete_category(current_user, category_id)
    return Result.acknowledged("Category deleted successfully")
