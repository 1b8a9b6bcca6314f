from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.deps import require_user
from joyeria.models import User
from joyeria.schemas.stats import DashboardSummary, StatsResponse
from joyeria.services import stats_service

router = APIRouter(prefix="/api/v1/stats", tags=["stats"])


@router.get("/summary", response_model=DashboardSummary)
async def summary(
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await stats_service.dashboard_summary(session)


@router.get("", response_model=StatsResponse)
async def statistics(
    period: str = "30d",
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await stats_service.statistics(session, period)
