"""
Layaways: one active reservation per product against a partial deposit.

The at-most-one-active rule is a partial unique index on
reservations(product_id) WHERE status = 'active'. Inserting a second active
row fails in the database, which is reported as a conflict.
"""
import logging
from datetime import date

from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.models import Product, Reservation, User
from joyeria.schemas.reservation import ReservationCreate, ReservationResponse, ReservationListResponse
from joyeria.services import lifecycle
from joyeria.services.change_feed import change_feed
from joyeria.services.lifecycle import ReservationStatus, to_money
from joyeria.time_utils import today as current_date

logger = logging.getLogger(__name__)


def reservation_to_response(reservation: Reservation, today: date) -> ReservationResponse:
    deposit = to_money(reservation.deposit_amount)
    total = to_money(reservation.total_amount)
    return ReservationResponse(
        id=reservation.id,
        product_id=reservation.product_id,
        product_name=reservation.product.name if reservation.product else None,
        customer_name=reservation.customer_name,
        phone=reservation.phone,
        email=reservation.email,
        deposit_amount=deposit,
        total_amount=total,
        remaining_amount=total - deposit,
        reserved_on=reservation.reserved_on,
        due_date=reservation.due_date,
        status=lifecycle.effective_reservation_status(reservation.status, reservation.due_date, today),
        notes=reservation.notes,
        created_at=reservation.created_at,
    )


async def _load_reservation(session: AsyncSession, reservation_id: int) -> Reservation:
    result = await session.execute(
        select(Reservation)
        .options(selectinload(Reservation.product))
        .where(Reservation.id == reservation_id)
        .execution_options(populate_existing=True)
    )
    reservation = result.scalar_one_or_none()
    if not reservation:
        raise AppException(ErrorType.NOT_FOUND, "Reservation not found")
    return reservation


async def get_reservation(session: AsyncSession, reservation_id: int, today: date | None = None) -> ReservationResponse:
    reservation = await _load_reservation(session, reservation_id)
    return reservation_to_response(reservation, today or current_date())


async def list_reservations(
    session: AsyncSession,
    status: str | None = None,
    search: str | None = None,
    today: date | None = None,
) -> ReservationListResponse:
    today = today or current_date()
    query = select(Reservation).options(selectinload(Reservation.product))
    if search:
        pattern = f"%{search}%"
        query = query.join(Product, Reservation.product_id == Product.id).where(
            or_(
                Reservation.customer_name.ilike(pattern),
                Product.name.ilike(pattern),
                Reservation.phone.ilike(pattern),
                Reservation.email.ilike(pattern),
            )
        )
    result = await session.execute(
        query.order_by(Reservation.created_at.desc(), Reservation.id.desc())
    )
    reservations = [reservation_to_response(r, today) for r in result.scalars().all()]

    total_active = sum(
        to_money(r.deposit_amount) for r in reservations if r.status == ReservationStatus.ACTIVE.value
    )
    total_completed = sum(
        to_money(r.total_amount) for r in reservations if r.status == ReservationStatus.COMPLETED.value
    )
    if status:
        reservations = [r for r in reservations if r.status == status]

    return ReservationListResponse(
        total_active_deposits=total_active,
        total_completed=total_completed,
        reservations=reservations,
    )


async def create_reservation(
    session: AsyncSession,
    data: ReservationCreate,
    user: User,
    today: date | None = None,
) -> ReservationResponse:
    today = today or current_date()
    lifecycle.validate_future_date(data.due_date, today)

    product = await session.get(Product, data.product_id)
    if not product:
        raise AppException(ErrorType.NOT_FOUND, "Product not found")
    if not product.available or product.stock <= 0:
        raise AppException(ErrorType.CONFLICT, "Product is not available")

    total = to_money(product.sale_price)
    lifecycle.validate_deposit(data.deposit_amount, total)

    # An overdue row stored as active still holds the product's slot in the unique index
    expired = await session.execute(
        update(Reservation)
        .where(
            Reservation.product_id == product.id,
            Reservation.status == ReservationStatus.ACTIVE.value,
            Reservation.due_date < today,
        )
        .values(status=ReservationStatus.EXPIRED.value)
        .execution_options(synchronize_session=False)
    )
    if expired.rowcount:
        logger.info(f"Expired {expired.rowcount} overdue reservation(s) of product {product.id}")

    reservation = Reservation(
        product_id=product.id,
        customer_name=data.customer_name,
        phone=data.phone or None,
        email=data.email or None,
        deposit_amount=to_money(data.deposit_amount),
        total_amount=total,
        reserved_on=today,
        due_date=data.due_date,
        status=ReservationStatus.ACTIVE.value,
        notes=data.notes or None,
        user_id=user.id,
    )
    session.add(reservation)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AppException(ErrorType.CONFLICT, "This product is already reserved")

    logger.info(f"Reservation created: {reservation.id} product={product.id} deposit={reservation.deposit_amount}")
    change_feed.publish("reservations", "INSERT", reservation.id)
    return await get_reservation(session, reservation.id, today)


async def _transition(
    session: AsyncSession,
    reservation_id: int,
    target: ReservationStatus,
    today: date | None,
) -> ReservationResponse:
    today = today or current_date()
    reservation = await _load_reservation(session, reservation_id)
    status = lifecycle.effective_reservation_status(reservation.status, reservation.due_date, today)
    if status != ReservationStatus.ACTIVE.value:
        raise AppException(ErrorType.CONFLICT, f"Reservation is {status}")

    reservation.status = target.value
    await session.commit()

    logger.info(f"Reservation {reservation.id} -> {target.value}")
    change_feed.publish("reservations", "UPDATE", reservation.id)
    return reservation_to_response(reservation, today)


async def complete_reservation(session: AsyncSession, reservation_id: int, today: date | None = None) -> ReservationResponse:
    """Final payment and handover. Stock is adjusted separately, through a sale or a product edit."""
    return await _transition(session, reservation_id, ReservationStatus.COMPLETED, today)


async def cancel_reservation(session: AsyncSession, reservation_id: int, today: date | None = None) -> ReservationResponse:
    """The product becomes reservable again: no active row remains for it."""
    return await _transition(session, reservation_id, ReservationStatus.CANCELLED, today)
