"""
Dashboard and statistics read models, aggregated from sales, expenses and
products.
"""
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.models import Product, Sale, Expense
from joyeria.schemas.stats import ChartData, DashboardSummary, StatsResponse, StatsTotals
from joyeria.services.lifecycle import to_money
from joyeria.time_utils import today as current_date

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90, "all": None}
TOP_CATEGORIES = 5
NO_CATEGORY = "Sin categoría"


def period_start(period: str, today: date) -> date | None:
    if period not in PERIOD_DAYS:
        raise AppException(ErrorType.VALIDATION, f"Unknown period: {period}")
    days = PERIOD_DAYS[period]
    return today - timedelta(days=days) if days else None


async def dashboard_summary(session: AsyncSession) -> DashboardSummary:
    total_products = await session.scalar(select(func.count(Product.id)))
    available_products = await session.scalar(
        select(func.count(Product.id)).where(Product.available.is_(True))
    )
    total_sales = await session.scalar(select(func.coalesce(func.sum(Sale.total_price), 0)))
    total_profit = await session.scalar(select(func.coalesce(func.sum(Sale.profit), 0)))
    total_expenses = await session.scalar(select(func.coalesce(func.sum(Expense.amount), 0)))

    total_profit = to_money(total_profit)
    total_expenses = to_money(total_expenses)
    return DashboardSummary(
        total_products=total_products or 0,
        available_products=available_products or 0,
        total_sales=to_money(total_sales),
        total_profit=total_profit,
        total_expenses=total_expenses,
        net_profit=total_profit - total_expenses,
    )


# Dataset labels shown on the statistics charts
SALES_SERIES = {"sales": "Ventas", "profit": "Ganancia"}
QUANTITY_SERIES = {"quantity": "Piezas vendidas"}
EXPENSE_SERIES = {"amount": "Gastos"}


def chart_data(rows: list[dict], label_key: str, series: dict[str, str]) -> ChartData:
    """One Chart.js dataset per entry of series (row key -> dataset label)."""
    return ChartData(
        labels=[str(row[label_key]) for row in rows],
        datasets=[
            {"label": label, "data": [float(row[key] or 0) for row in rows]}
            for key, label in series.items()
        ],
    )


def _sales_by_month(sales: list[Sale]) -> list[dict]:
    months: dict[str, dict] = {}
    for sale in sales:
        key = sale.sale_date.strftime("%Y-%m")
        bucket = months.setdefault(key, {"month": key, "sales": Decimal(0), "profit": Decimal(0)})
        bucket["sales"] += to_money(sale.total_price)
        bucket["profit"] += to_money(sale.profit)
    return [months[key] for key in sorted(months)]


def _top_categories(sales: list[Sale]) -> list[dict]:
    categories: dict[str, dict] = {}
    for sale in sales:
        name = (sale.product.category if sale.product else None) or NO_CATEGORY
        bucket = categories.setdefault(
            name, {"category": name, "quantity": 0, "sales": Decimal(0), "profit": Decimal(0)}
        )
        bucket["quantity"] += sale.quantity
        bucket["sales"] += to_money(sale.total_price)
        bucket["profit"] += to_money(sale.profit)
    ranked = sorted(categories.values(), key=lambda c: c["quantity"], reverse=True)
    return ranked[:TOP_CATEGORIES]


def _expenses_by_category(expenses: list[Expense]) -> list[dict]:
    categories: dict[str, Decimal] = {}
    for expense in expenses:
        name = expense.category or NO_CATEGORY
        categories[name] = categories.get(name, Decimal(0)) + to_money(expense.amount)
    return [{"category": name, "amount": amount} for name, amount in categories.items()]


async def statistics(session: AsyncSession, period: str = "30d", today: date | None = None) -> StatsResponse:
    start = period_start(period, today or current_date())

    sales_query = select(Sale).options(selectinload(Sale.product)).order_by(Sale.sale_date)
    expenses_query = select(Expense).order_by(Expense.expense_date)
    if start:
        sales_query = sales_query.where(Sale.sale_date >= start)
        expenses_query = expenses_query.where(Expense.expense_date >= start)

    sales = list((await session.execute(sales_query)).scalars().all())
    expenses = list((await session.execute(expenses_query)).scalars().all())

    total_sales = sum((to_money(s.total_price) for s in sales), Decimal(0))
    total_profit = sum((to_money(s.profit) for s in sales), Decimal(0))
    total_expenses = sum((to_money(e.amount) for e in expenses), Decimal(0))
    margin = float(total_profit / total_sales * 100) if total_sales > 0 else 0.0

    return StatsResponse(
        period=period,
        totals=StatsTotals(
            sales=total_sales,
            profit=total_profit,
            expenses=total_expenses,
            net_profit=total_profit - total_expenses,
            margin_percentage=round(margin, 2),
        ),
        sales_by_month=chart_data(_sales_by_month(sales), "month", SALES_SERIES),
        top_categories=chart_data(_top_categories(sales), "category", QUANTITY_SERIES),
        expenses_by_category=chart_data(_expenses_by_category(expenses), "category", EXPENSE_SERIES),
    )
