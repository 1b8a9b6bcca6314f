from datetime import date

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.deps import require_user
from joyeria.models import User
from joyeria.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseResponse, COMMON_CATEGORIES
from joyeria.services import expense_service

router = APIRouter(prefix="/api/v1/expenses", tags=["expenses"])


@router.get("", response_model=list[ExpenseResponse])
async def list_expenses(
    date_from: date | None = None,
    date_to: date | None = None,
    category: str | None = None,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await expense_service.list_expenses(session, date_from, date_to, category)


@router.get("/categories", response_model=list[str])
async def expense_categories():
    return COMMON_CATEGORIES


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    payload: ExpenseCreate,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await expense_service.create_expense(session, payload, user)


@router.patch("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    payload: ExpenseUpdate,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await expense_service.update_expense(session, expense_id, payload)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    await expense_service.delete_expense(session, expense_id)
