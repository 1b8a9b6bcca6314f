"""
Installment plans: turning a sale into a payment schedule and recording
payments against it.

A plan and its installments are written in a single transaction. The
one-plan-per-sale rule is the database's UNIQUE constraint on sale_id; the
constraint violation is the "already exists" signal.
"""
import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.models import PaymentPlan, Installment, Sale, User
from joyeria.schemas.payment_plan import (
    PlanCreate,
    PaymentCreate,
    InstallmentResponse,
    PlanProgress,
    PlanResponse,
    PlanListResponse,
)
from joyeria.services import lifecycle
from joyeria.services.change_feed import change_feed
from joyeria.services.lifecycle import InstallmentStatus, PlanStatus, to_money
from joyeria.time_utils import today as current_date

logger = logging.getLogger(__name__)


def _plan_query():
    return (
        select(PaymentPlan)
        .options(
            selectinload(PaymentPlan.installments),
            selectinload(PaymentPlan.sale).selectinload(Sale.product),
        )
        .execution_options(populate_existing=True)
    )


# =============================================================================
# READ MODEL
# =============================================================================

def installment_to_response(installment: Installment, today: date) -> InstallmentResponse:
    amount = to_money(installment.amount)
    paid = to_money(installment.amount_paid)
    return InstallmentResponse(
        id=installment.id,
        plan_id=installment.plan_id,
        sequence_number=installment.sequence_number,
        amount=amount,
        amount_paid=paid,
        pending_amount=amount - paid,
        due_date=installment.due_date,
        paid_date=installment.paid_date,
        status=lifecycle.effective_installment_status(installment.status, installment.due_date, today),
        payment_method=installment.payment_method,
        notes=installment.notes,
    )


def plan_progress(plan: PaymentPlan) -> PlanProgress:
    total_paid = sum((to_money(i.amount_paid) for i in plan.installments), to_money(0))
    total = to_money(plan.total_amount)
    percentage = float(total_paid / total * 100) if total > 0 else 0.0
    paid = sum(1 for i in plan.installments if i.status == InstallmentStatus.PAID.value)
    return PlanProgress(total_paid=total_paid, percentage=round(percentage, 2), paid_installments=paid)


def plan_to_response(plan: PaymentPlan, today: date) -> PlanResponse:
    sale = plan.sale
    return PlanResponse(
        id=plan.id,
        sale_id=plan.sale_id,
        customer=sale.customer if sale else None,
        product_name=sale.product.name if sale and sale.product else None,
        installment_count=plan.installment_count,
        total_amount=plan.total_amount,
        amount_per_installment=plan.amount_per_installment,
        start_date=plan.start_date,
        due_date=plan.due_date,
        status=lifecycle.effective_plan_status(plan.status, plan.due_date, today),
        notes=plan.notes,
        created_at=plan.created_at,
        progress=plan_progress(plan),
        installments=[installment_to_response(i, today) for i in plan.installments],
    )


async def _load_plan(session: AsyncSession, plan_id: int) -> PaymentPlan:
    result = await session.execute(_plan_query().where(PaymentPlan.id == plan_id))
    plan = result.scalar_one_or_none()
    if not plan:
        raise AppException(ErrorType.NOT_FOUND, "Payment plan not found")
    return plan


async def get_plan(session: AsyncSession, plan_id: int, today: date | None = None) -> PlanResponse:
    plan = await _load_plan(session, plan_id)
    return plan_to_response(plan, today or current_date())


async def list_plans(
    session: AsyncSession,
    status: str | None = None,
    today: date | None = None,
) -> PlanListResponse:
    """All plans newest first, with the summary figures of the plans screen.

    Status filtering and summaries use the effective (overdue-aware) status;
    nothing is written back.
    """
    today = today or current_date()
    result = await session.execute(
        _plan_query().order_by(PaymentPlan.created_at.desc(), PaymentPlan.id.desc())
    )
    plans = [plan_to_response(plan, today) for plan in result.scalars().all()]

    terminal = {PlanStatus.COMPLETED.value, PlanStatus.CANCELLED.value}
    open_plans = [p for p in plans if p.status not in terminal]
    total_outstanding = sum(to_money(p.total_amount) - to_money(p.progress.total_paid) for p in open_plans)
    total_completed = sum(to_money(p.total_amount) for p in plans if p.status == PlanStatus.COMPLETED.value)

    if status:
        plans = [p for p in plans if p.status == status]

    return PlanListResponse(
        total_outstanding=total_outstanding,
        total_completed=total_completed,
        open_plans=len(open_plans),
        plans=plans,
    )


# =============================================================================
# COMMANDS
# =============================================================================

async def create_plan(
    session: AsyncSession,
    data: PlanCreate,
    user: User,
    today: date | None = None,
) -> PlanResponse:
    today = today or current_date()
    lifecycle.validate_installment_count(data.installment_count)
    lifecycle.validate_future_date(data.due_date, today)

    sale = await session.get(Sale, data.sale_id)
    if not sale:
        raise AppException(ErrorType.NOT_FOUND, "Sale not found")

    total = to_money(sale.total_price)
    amounts = lifecycle.split_amount(total, data.installment_count)
    due_dates = lifecycle.installment_due_dates(today, data.due_date, data.installment_count)

    plan = PaymentPlan(
        sale_id=sale.id,
        installment_count=data.installment_count,
        total_amount=total,
        amount_per_installment=amounts[-1],
        start_date=today,
        due_date=data.due_date,
        status=PlanStatus.PENDING.value,
        notes=data.notes or None,
        user_id=user.id,
    )
    plan.installments = [
        Installment(
            sequence_number=number,
            amount=amount,
            amount_paid=to_money(0),
            due_date=due,
            status=InstallmentStatus.PENDING.value,
        )
        for number, (amount, due) in enumerate(zip(amounts, due_dates), start=1)
    ]
    session.add(plan)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AppException(ErrorType.CONFLICT, "This sale already has a payment plan")

    logger.info(f"Payment plan created: {plan.id} sale={sale.id} installments={data.installment_count}")
    change_feed.publish("payment_plans", "INSERT", plan.id)
    change_feed.publish("installments", "INSERT", plan.id)
    return await get_plan(session, plan.id, today)


async def register_payment(
    session: AsyncSession,
    installment_id: int,
    data: PaymentCreate,
    today: date | None = None,
) -> PlanResponse:
    today = today or current_date()
    installment = await session.get(Installment, installment_id)
    if not installment:
        raise AppException(ErrorType.NOT_FOUND, "Installment not found")

    plan = await _load_plan(session, installment.plan_id)
    plan_status = lifecycle.effective_plan_status(plan.status, plan.due_date, today)
    if plan_status not in lifecycle.OPEN_PLAN_STATUSES:
        raise AppException(ErrorType.CONFLICT, f"Payment plan is {plan_status}")

    status = lifecycle.effective_installment_status(installment.status, installment.due_date, today)
    if status in (InstallmentStatus.PAID.value, InstallmentStatus.EXPIRED.value):
        raise AppException(ErrorType.CONFLICT, f"Installment is {status}")

    new_paid, new_status = lifecycle.apply_payment(installment.amount, installment.amount_paid, data.amount)
    installment.amount_paid = new_paid
    installment.status = new_status
    # A later payment without method or notes keeps what the earlier one recorded
    if data.payment_method and ("payment_method" in data.model_fields_set or not installment.payment_method):
        installment.payment_method = data.payment_method
    if data.notes:
        installment.notes = data.notes
    if new_status == InstallmentStatus.PAID.value and installment.paid_date is None:
        installment.paid_date = today

    plan.status = lifecycle.derive_plan_status(plan.installments)
    await session.commit()

    logger.info(f"Payment registered: installment={installment.id} amount={data.amount} status={new_status}")
    change_feed.publish("installments", "UPDATE", installment.id)
    change_feed.publish("payment_plans", "UPDATE", plan.id)
    return plan_to_response(plan, today)


async def cancel_plan(session: AsyncSession, plan_id: int, today: date | None = None) -> PlanResponse:
    today = today or current_date()
    plan = await _load_plan(session, plan_id)
    status = lifecycle.effective_plan_status(plan.status, plan.due_date, today)
    if status not in lifecycle.OPEN_PLAN_STATUSES:
        raise AppException(ErrorType.CONFLICT, f"Payment plan is {status}")

    plan.status = PlanStatus.CANCELLED.value
    await session.commit()

    logger.info(f"Payment plan cancelled: {plan.id}")
    change_feed.publish("payment_plans", "UPDATE", plan.id)
    return plan_to_response(plan, today)
