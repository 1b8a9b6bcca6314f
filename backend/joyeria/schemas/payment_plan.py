from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from joyeria.services.lifecycle import MIN_INSTALLMENTS, MAX_INSTALLMENTS


class PlanCreate(BaseModel):
    sale_id: int
    installment_count: int = Field(default=3, ge=MIN_INSTALLMENTS, le=MAX_INSTALLMENTS)
    due_date: date
    notes: str | None = None


class PaymentCreate(BaseModel):
    amount: Decimal = Field(gt=0)
    payment_method: str | None = "Efectivo"
    notes: str | None = None


class InstallmentResponse(BaseModel):
    id: int
    plan_id: int
    sequence_number: int
    amount: float
    amount_paid: float
    pending_amount: float
    due_date: date
    paid_date: date | None = None
    status: str
    payment_method: str | None = None
    notes: str | None = None


class PlanProgress(BaseModel):
    total_paid: float
    percentage: float
    paid_installments: int


class PlanResponse(BaseModel):
    id: int
    sale_id: int
    customer: str | None = None
    product_name: str | None = None
    installment_count: int
    total_amount: float
    amount_per_installment: float
    start_date: date
    due_date: date
    status: str
    notes: str | None = None
    created_at: datetime | None = None
    progress: PlanProgress
    installments: list[InstallmentResponse]


class PlanListResponse(BaseModel):
    total_outstanding: float
    total_completed: float
    open_plans: int
    plans: list[PlanResponse]
