"""
Object storage: named buckets on the local filesystem, served back by the API.
"""
import logging
import re
import secrets
from pathlib import Path, PurePosixPath

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from joyeria.config import Config
from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.time_utils import utcnow

logger = logging.getLogger(__name__)

BUCKET_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{0,62}$")
SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


def validate_location(bucket: str, path: str) -> PurePosixPath:
    if not BUCKET_PATTERN.match(bucket):
        raise AppException(ErrorType.BAD_REQUEST, f"Invalid bucket name: {bucket}")
    relative = PurePosixPath(path)
    parts = relative.parts
    if not parts or relative.is_absolute():
        raise AppException(ErrorType.BAD_REQUEST, "Invalid object path")
    for part in parts:
        if part in (".", "..") or not SEGMENT_PATTERN.match(part):
            raise AppException(ErrorType.BAD_REQUEST, "Invalid object path")
    return relative


def object_file(bucket: str, path: str) -> Path:
    relative = validate_location(bucket, path)
    return Path(Config.STORAGE_ROOT, bucket, *relative.parts)


def public_url(bucket: str, path: str) -> str:
    return f"{Config.PUBLIC_BASE_URL.rstrip('/')}/api/v1/storage/{bucket}/{path}"


def _too_large():
    return AppException(
        ErrorType.PAYLOAD_TOO_LARGE,
        f"Upload exceeds the {Config.MAX_UPLOAD_BYTES} byte limit"
    )


async def read_body(request: Request) -> bytes:
    """Read the raw request body, stopping at Config.MAX_UPLOAD_BYTES."""
    limit = Config.MAX_UPLOAD_BYTES
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise _too_large()

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise _too_large()
    return bytes(body)


def _write(target: Path, data: bytes):
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


async def upload(bucket: str, path: str, data: bytes) -> str:
    """Store data at bucket/path (overwriting) and return its public URL."""
    if not data:
        raise AppException(ErrorType.BAD_REQUEST, "Empty upload")
    if len(data) > Config.MAX_UPLOAD_BYTES:
        raise _too_large()
    target = object_file(bucket, path)
    await run_in_threadpool(_write, target, data)
    logger.info(f"Stored {len(data)} bytes at {bucket}/{path}")
    return public_url(bucket, path)


def generated_name(extension: str | None) -> str:
    """Timestamp plus random suffix, keeping a sane extension."""
    name = f"{int(utcnow().timestamp() * 1000)}-{secrets.token_hex(4)}"
    if extension and SEGMENT_PATTERN.match(extension):
        name = f"{name}.{extension.lstrip('.').lower()}"
    return name
