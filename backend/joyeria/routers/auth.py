from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.db.database import get_session
from joyeria.deps import bearer_token, get_optional_user, require_user
from joyeria.models import User
from joyeria.schemas.auth import (
    SignUpRequest,
    SignInRequest,
    TokenResponse,
    UserResponse,
    CurrentUserResponse,
)
from joyeria.services import auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/sign-up", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(request: SignUpRequest, session: AsyncSession = Depends(get_session)):
    return await auth_service.sign_up(session, request.email, request.password, request.name)


@router.post("/sign-in", response_model=TokenResponse)
async def sign_in(
    payload: SignInRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    user, token = await auth_service.sign_in(
        session,
        payload.email,
        payload.password,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    request: Request,
    _user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    await auth_service.sign_out(session, bearer_token(request))


@router.get("/me", response_model=CurrentUserResponse)
async def me(user: User | None = Depends(get_optional_user)):
    return CurrentUserResponse(user=UserResponse.model_validate(user) if user else None)
