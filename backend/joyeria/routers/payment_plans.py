from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.deps import require_user
from joyeria.models import User
from joyeria.schemas.payment_plan import PlanCreate, PaymentCreate, PlanResponse, PlanListResponse
from joyeria.services import payment_plan_service
from joyeria.services.lifecycle import PlanStatus

router = APIRouter(prefix="/api/v1", tags=["payment plans"])


@router.get("/payment-plans", response_model=PlanListResponse)
async def list_plans(
    status: PlanStatus | None = None,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await payment_plan_service.list_plans(session, status.value if status else None)


@router.post("/payment-plans", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    payload: PlanCreate,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await payment_plan_service.create_plan(session, payload, user)


@router.get("/payment-plans/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: int,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await payment_plan_service.get_plan(session, plan_id)


@router.post("/payment-plans/{plan_id}/cancel", response_model=PlanResponse)
async def cancel_plan(
    plan_id: int,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await payment_plan_service.cancel_plan(session, plan_id)


@router.post("/installments/{installment_id}/payments", response_model=PlanResponse)
async def register_payment(
    installment_id: int,
    payload: PaymentCreate,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await payment_plan_service.register_payment(session, installment_id, payload)
