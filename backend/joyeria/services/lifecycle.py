"""
Lifecycle rules shared by payment plans, installments and layaways.

Everything here is pure: no session, no I/O. Services call these to validate
input and derive numeric fields and statuses before anything is written.
"""
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable

from joyeria.errors import ErrorType
from joyeria.exceptions import AppException

CENT = Decimal("0.01")

MIN_INSTALLMENTS = 2
MAX_INSTALLMENTS = 24
MIN_DEPOSIT_RATIO = Decimal("0.10")


class PlanStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    EXPIRED = "expired"


class ReservationStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


OPEN_PLAN_STATUSES = {PlanStatus.PENDING.value, PlanStatus.IN_PROGRESS.value}


def to_money(value) -> Decimal:
    """Round any numeric value to cents."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# DERIVED STATUS
# =============================================================================

def _is_overdue(due_date: date, today: date) -> bool:
    return due_date < today


def effective_installment_status(status: str, due_date: date, today: date) -> str:
    if status == InstallmentStatus.PENDING.value and _is_overdue(due_date, today):
        return InstallmentStatus.EXPIRED.value
    return status


def effective_reservation_status(status: str, due_date: date, today: date) -> str:
    if status == ReservationStatus.ACTIVE.value and _is_overdue(due_date, today):
        return ReservationStatus.EXPIRED.value
    return status


def effective_plan_status(status: str, due_date: date, today: date) -> str:
    if status in OPEN_PLAN_STATUSES and _is_overdue(due_date, today):
        return PlanStatus.EXPIRED.value
    return status


def derive_plan_status(installments: Iterable) -> str:
    """Plan status implied by its installments' payments."""
    installments = list(installments)
    if installments and all(i.status == InstallmentStatus.PAID.value for i in installments):
        return PlanStatus.COMPLETED.value
    if any(to_money(i.amount_paid) > 0 for i in installments):
        return PlanStatus.IN_PROGRESS.value
    return PlanStatus.PENDING.value


# =============================================================================
# PAYMENT PLANS
# =============================================================================

def validate_installment_count(count: int) -> None:
    if count < MIN_INSTALLMENTS or count > MAX_INSTALLMENTS:
        raise AppException(
            ErrorType.VALIDATION,
            f"Installment count must be between {MIN_INSTALLMENTS} and {MAX_INSTALLMENTS}"
        )


def validate_future_date(due_date: date, today: date) -> None:
    if due_date <= today:
        raise AppException(ErrorType.VALIDATION, "Due date must be in the future")


def split_amount(total, count: int) -> list[Decimal]:
    """Split total into count shares of whole cents.

    Every share is floor(total_cents / count) cents; the first
    total_cents % count shares carry one extra cent, so the shares add up to
    total exactly and none is zero.
    """
    total_cents = int(to_money(total) / CENT)
    if total_cents < count:
        raise AppException(
            ErrorType.VALIDATION,
            f"Total must be at least {to_money(CENT * count)} to split into {count} installments"
        )
    base, extra = divmod(total_cents, count)
    return [(base + (1 if i < extra else 0)) * CENT for i in range(count)]


def installment_due_dates(start: date, due_date: date, count: int) -> list[date]:
    """Evenly spaced due dates; the i-th (1-based) falls ceil(i * days / count) days after start."""
    days = (due_date - start).days
    return [start + timedelta(days=-(-(i * days) // count)) for i in range(1, count + 1)]


def apply_payment(amount, amount_paid, payment) -> tuple[Decimal, str]:
    """Return the new (amount_paid, status) of an installment after a payment."""
    payment = to_money(payment)
    if payment <= 0:
        raise AppException(ErrorType.VALIDATION, "Payment amount must be greater than 0")

    amount = to_money(amount)
    new_paid = to_money(amount_paid) + payment
    if new_paid > amount:
        raise AppException(
            ErrorType.VALIDATION,
            f"Payment exceeds the installment amount (pending {amount - to_money(amount_paid)})"
        )

    if new_paid >= amount:
        return new_paid, InstallmentStatus.PAID.value
    return new_paid, InstallmentStatus.PARTIAL.value


# =============================================================================
# LAYAWAYS
# =============================================================================

def minimum_deposit(total) -> Decimal:
    return to_money(to_money(total) * MIN_DEPOSIT_RATIO)


def validate_deposit(deposit, total) -> None:
    deposit = to_money(deposit)
    total = to_money(total)
    if deposit >= total:
        raise AppException(ErrorType.VALIDATION, "Deposit must be less than the total price")
    if deposit < total * MIN_DEPOSIT_RATIO:
        raise AppException(
            ErrorType.VALIDATION,
            f"Deposit must be at least 10% of the total price ({minimum_deposit(total)})"
        )
