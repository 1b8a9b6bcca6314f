from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.deps import require_user
from joyeria.models import User
from joyeria.schemas.maintenance import SweepResult
from joyeria.services import maintenance_service

router = APIRouter(prefix="/api/v1/maintenance", tags=["maintenance"])


@router.post("/expire-overdue", response_model=SweepResult)
async def expire_overdue(
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await maintenance_service.expire_overdue(session)
