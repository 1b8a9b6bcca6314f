from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.deps import require_user
from joyeria.models import User
from joyeria.schemas.sale import SaleCreate, SaleResponse
from joyeria.services import inventory_service

router = APIRouter(prefix="/api/v1/sales", tags=["sales"])


@router.get("", response_model=list[SaleResponse])
async def list_sales(
    search: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await inventory_service.list_sales(session, search, limit)


@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
async def record_sale(
    payload: SaleCreate,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await inventory_service.record_sale(session, payload, user)
