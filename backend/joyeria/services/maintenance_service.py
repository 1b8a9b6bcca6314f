"""
Expiry sweep: persists the overdue transitions that reads only compute.

Reads report the effective status without writing; this sweep makes the
stored status catch up, once, outside any read path.
"""
import asyncio
import logging
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.models import Installment, PaymentPlan, Reservation
from joyeria.schemas.maintenance import SweepResult
from joyeria.services.change_feed import change_feed
from joyeria.services.lifecycle import InstallmentStatus, PlanStatus, ReservationStatus, OPEN_PLAN_STATUSES
from joyeria.time_utils import today as current_date

logger = logging.getLogger(__name__)


async def _expire(session: AsyncSession, model, open_statuses, expired_status: str, today: date) -> list[int]:
    result = await session.execute(
        select(model.id).where(model.status.in_(open_statuses), model.due_date < today)
    )
    ids = list(result.scalars().all())
    if ids:
        await session.execute(
            update(model)
            .where(model.id.in_(ids), model.status.in_(open_statuses))
            .values(status=expired_status)
            .execution_options(synchronize_session=False)
        )
    return ids


async def expire_overdue(session: AsyncSession, today: date | None = None) -> SweepResult:
    today = today or current_date()

    installment_ids = await _expire(
        session, Installment, [InstallmentStatus.PENDING.value], InstallmentStatus.EXPIRED.value, today
    )
    plan_ids = await _expire(
        session, PaymentPlan, sorted(OPEN_PLAN_STATUSES), PlanStatus.EXPIRED.value, today
    )
    reservation_ids = await _expire(
        session, Reservation, [ReservationStatus.ACTIVE.value], ReservationStatus.EXPIRED.value, today
    )
    await session.commit()

    for table, ids in (
        ("installments", installment_ids),
        ("payment_plans", plan_ids),
        ("reservations", reservation_ids),
    ):
        for record_id in ids:
            change_feed.publish(table, "UPDATE", record_id)

    if installment_ids or plan_ids or reservation_ids:
        logger.info(
            f"Expired {len(installment_ids)} installments, {len(plan_ids)} plans, "
            f"{len(reservation_ids)} reservations"
        )
    return SweepResult(
        installments=len(installment_ids),
        plans=len(plan_ids),
        reservations=len(reservation_ids),
    )


async def run_periodic_sweep(session_factory, interval_seconds: int):
    """Run expire_overdue every interval until cancelled."""
    while True:
        try:
            async with session_factory() as session:
                await expire_overdue(session)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Expiry sweep failed: {e}")
        await asyncio.sleep(interval_seconds)
