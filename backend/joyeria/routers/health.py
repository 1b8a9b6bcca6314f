from fastapi import APIRouter

from joyeria.config import Config
from joyeria.time_utils import utcnow, to_utc_z

router = APIRouter(tags=["health"])


@router.get("/api/v1/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": to_utc_z(utcnow()),
        "service": Config.SERVICE_NAME,
    }
