from pydantic import BaseModel
from typing import Any


class ChartData(BaseModel):
    labels: list[str]
    datasets: list[dict[str, Any]]


class DashboardSummary(BaseModel):
    total_products: int
    available_products: int
    total_sales: float
    total_profit: float
    total_expenses: float
    net_profit: float


class StatsTotals(BaseModel):
    sales: float
    profit: float
    expenses: float
    net_profit: float
    margin_percentage: float


class StatsResponse(BaseModel):
    period: str
    totals: StatsTotals
    sales_by_month: ChartData
    top_categories: ChartData
    expenses_by_category: ChartData
