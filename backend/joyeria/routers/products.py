
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.deps import require_user
from joyeria.models import User
from joyeria.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from joyeria.services import inventory_service, storage_service


router = APIRouter(prefix="/api/v1/products", tags=["products"])

PRODUCT_BUCKET = "products"


@router.get("", response_model=list[ProductResponse])
async def list_products(
    search: str | None = None,
    available_only: bool = False,
    in_stock_only: bool = False,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await inventory_service.list_products(session, search, available_only, in_stock_only)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await inventory_service.create_product(session, payload, user)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await inventory_service.get_product(session, product_id)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await inventory_service.update_product(session, product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    await inventory_service.delete_product(session, product_id)


@router.post("/{product_id}/image", response_model=ProductResponse)
async def upload_product_image(
    product_id: int,
    request: Request,
    extension: str | None = None,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """Raw image bytes in the body; stored in the products bucket."""
    await inventory_service.get_product(session, product_id)
    data = await storage_service.read_body(request)
    url = await storage_service.upload(PRODUCT_BUCKET, storage_service.generated_name(extension), data)
    return await inventory_service.set_product_image(session, product_id, url)
