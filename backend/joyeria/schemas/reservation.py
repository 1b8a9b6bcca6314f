from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ReservationCreate(BaseModel):
    product_id: int
    customer_name: str = Field(min_length=1, max_length=255)
    phone: str | None = None
    email: str | None = None
    deposit_amount: Decimal = Field(gt=0)
    due_date: date
    notes: str | None = None


class ReservationResponse(BaseModel):
    id: int
    product_id: int
    product_name: str | None = None
    customer_name: str
    phone: str | None = None
    email: str | None = None
    deposit_amount: float
    total_amount: float
    remaining_amount: float
    reserved_on: date | None = None
    due_date: date
    status: str
    notes: str | None = None
    created_at: datetime | None = None


class ReservationListResponse(BaseModel):
    total_active_deposits: float
    total_completed: float
    reservations: list[ReservationResponse]
