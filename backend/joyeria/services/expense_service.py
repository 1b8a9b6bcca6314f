import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.models import Expense, User
from joyeria.schemas.expense import ExpenseCreate, ExpenseUpdate
from joyeria.services.change_feed import change_feed

logger = logging.getLogger(__name__)


async def list_expenses(
    session: AsyncSession,
    date_from: date | None = None,
    date_to: date | None = None,
    category: str | None = None,
) -> list[Expense]:
    query = select(Expense)
    if date_from:
        query = query.where(Expense.expense_date >= date_from)
    if date_to:
        query = query.where(Expense.expense_date <= date_to)
    if category:
        query = query.where(Expense.category == category)
    result = await session.execute(query.order_by(Expense.expense_date.desc(), Expense.id.desc()))
    return list(result.scalars().all())


async def get_expense(session: AsyncSession, expense_id: int) -> Expense:
    expense = await session.get(Expense, expense_id)
    if not expense:
        raise AppException(ErrorType.NOT_FOUND, "Expense not found")
    return expense


async def create_expense(session: AsyncSession, data: ExpenseCreate, user: User) -> Expense:
    expense = Expense(**data.model_dump(exclude_none=True), user_id=user.id)
    session.add(expense)
    await session.commit()

    logger.info(f"Expense recorded: {expense.id} {expense.concept} {expense.amount}")
    change_feed.publish("expenses", "INSERT", expense.id)
    return expense


async def update_expense(session: AsyncSession, expense_id: int, data: ExpenseUpdate) -> Expense:
    expense = await get_expense(session, expense_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(expense, key, value)
    await session.commit()

    change_feed.publish("expenses", "UPDATE", expense.id)
    return expense


async def delete_expense(session: AsyncSession, expense_id: int) -> None:
    expense = await get_expense(session, expense_id)
    await session.delete(expense)
    await session.commit()

    logger.info(f"Expense deleted: {expense_id}")
    change_feed.publish("expenses", "DELETE", expense_id)
