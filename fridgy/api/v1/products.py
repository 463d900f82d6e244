from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from typing import List, Optional

from fridgy.core.exception import ValidationException
from fridgy.database import get_db
from fridgy.dependencies import get_current_user, get_storage_bucket
from fridgy.models.product import Product
from fridgy.models.user import CurrentUser
from fridgy.schemas.product import ProductSave
from fridgy.schemas.result import Result
from fridgy.services.product_service import ProductService

router = APIRouter()


@router.get("/search", response_model=Result[List[Product]])
async def search_products(
    q: str = Query(..., description="Search text; the first word is matched"),
    limit: int = Query(20, ge=1, le=100),
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = ProductService(db)
    return Result.successful(data=service.search_products(q, limit))


@router.get("/{upc}", response_model=Result[Product])
async def get_product(
    upc: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Look up a product by its barcode."""
    service = ProductService(db)
    return Result.successful(data=service.get_product(upc))


@router.put("/{upc}", response_model=Result[Product])
async def save_product(
    upc: str,
    product_data: ProductSave,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Create or update a product's details."""
    service = ProductService(db)
    return Result.successful(data=service.save_product(upc, product_data))


@router.post("/{upc}", response_model=Result[Product])
async def save_product_with_image(
    upc: str,
    name: str = Form(...),
    brand: str = Form(""),
    category: str = Form("Other"),
    size: Optional[float] = Form(None),
    unit: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db),
    bucket=Depends(get_storage_bucket)
):
    """Create or update a product together with its photo (multipart form)."""
    try:
        product_data = ProductSave(name=name, brand=brand, category=category, size=size, unit=unit)
    except ValueError as ex:
        raise ValidationException(str(ex))

    image_bytes = await image.read() if image else None
    service = ProductService(db, bucket)
    return Result.successful(data=service.save_product(upc, product_data, image_bytes))


@router.put("/{upc}/image", response_model=Result[Product])
async def upload_product_image(
    upc: str,
    image: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db),
    bucket=Depends(get_storage_bucket)
):
    """Replace a product's photo; it is resized and stored as JPEG."""
    service = ProductService(db, bucket)
    return Result.successful(data=service.upload_image(upc, await image.read()))


@router.delete("/{upc}", response_model=Result[dict])
async def delete_product(
    upc: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db),
    bucket=Depends(get_storage_bucket)
):
    """Delete a product (admin only)."""
    service = ProductService(db, bucket)
    service.delete_product(upc, current_user)
    return Result.acknowledged("Product deleted successfully")
