from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.models import User
from joyeria.services import auth_service


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_optional_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> User | None:
    return await auth_service.get_current_user(session, bearer_token(request))


async def require_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise AppException(ErrorType.UNAUTHORIZED, "Authentication required")
    return user
