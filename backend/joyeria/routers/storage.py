from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import FileResponse

from joyeria.deps import require_user
from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.models import User
from joyeria.schemas.storage import UploadResponse
from joyeria.services import storage_service

router = APIRouter(prefix="/api/v1/storage", tags=["storage"])


@router.put("/{bucket}/{path:path}", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload(bucket: str, path: str, request: Request, _user: User = Depends(require_user)):
    data = await storage_service.read_body(request)
    url = await storage_service.upload(bucket, path, data)
    return UploadResponse(bucket=bucket, path=path, public_url=url)


@router.get("/{bucket}/{path:path}")
async def download(bucket: str, path: str):
    target = storage_service.object_file(bucket, path)
    if not target.is_file():
        raise AppException(ErrorType.NOT_FOUND, "Object not found")
    return FileResponse(target)
