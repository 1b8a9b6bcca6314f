from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.deps import require_user
from joyeria.models import User
from joyeria.schemas.audit import AuditEntry
from joyeria.services import audit_service

router = APIRouter(prefix="/api/v1/audit", tags=["audit"])


@router.get("", response_model=list[AuditEntry])
async def audit_log(
    type: str | None = None,
    action: str | None = None,
    search: str | None = None,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await audit_service.list_entries(session, type, action, search)
