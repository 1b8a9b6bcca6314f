from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.deps import require_user
from joyeria.models import User
from joyeria.schemas.reservation import ReservationCreate, ReservationResponse, ReservationListResponse
from joyeria.services import reservation_service
from joyeria.services.lifecycle import ReservationStatus

router = APIRouter(prefix="/api/v1/reservations", tags=["reservations"])


@router.get("", response_model=ReservationListResponse)
async def list_reservations(
    status: ReservationStatus | None = None,
    search: str | None = None,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await reservation_service.list_reservations(
        session, status.value if status else None, search
    )


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await reservation_service.create_reservation(session, payload, user)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await reservation_service.get_reservation(session, reservation_id)


@router.post("/{reservation_id}/complete", response_model=ReservationResponse)
async def complete_reservation(
    reservation_id: int,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await reservation_service.complete_reservation(session, reservation_id)


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: int,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await reservation_service.cancel_reservation(session, reservation_id)
