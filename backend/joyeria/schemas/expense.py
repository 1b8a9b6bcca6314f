from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

COMMON_CATEGORIES = [
    "Transporte",
    "Alimentación",
    "Suministros",
    "Mantenimiento",
    "Publicidad",
    "Servicios",
    "Otros",
]


class ExpenseCreate(BaseModel):
    concept: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(gt=0)
    category: str | None = None
    description: str | None = None
    expense_date: date | None = None


class ExpenseUpdate(BaseModel):
    concept: str | None = Field(default=None, min_length=1, max_length=255)
    amount: Decimal | None = Field(default=None, gt=0)
    category: str | None = None
    description: str | None = None
    expense_date: date | None = None


class ExpenseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    concept: str
    amount: float
    category: str | None = None
    description: str | None = None
    expense_date: date | None = None
    created_at: datetime | None = None
