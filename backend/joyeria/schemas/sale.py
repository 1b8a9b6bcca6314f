from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SaleCreate(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(ge=0)
    customer: str | None = None
    payment_method: str | None = "Efectivo"


class SaleResponse(BaseModel):
    id: int
    product_id: int | None = None
    product_name: str | None = None
    quantity: int
    unit_price: float
    total_price: float
    profit: float
    customer: str | None = None
    payment_method: str | None = None
    sale_date: date | None = None
    created_at: datetime | None = None
