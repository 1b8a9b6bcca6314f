"""
Authentication: users, bearer session tokens and the login audit trail.

Passwords are hashed with bcrypt. Session tokens are random hex strings
handed to the client once; only their SHA-256 digest is stored.
"""
import hashlib
import logging
import secrets
from datetime import timedelta

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from joyeria.config import Config
from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.models import User, SessionToken, LoginEvent
from joyeria.services.change_feed import change_feed
from joyeria.time_utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "administrador"


def hash_password(password: str) -> str:
    if len(password) < Config.PASSWORD_MIN_LENGTH:
        raise AppException(
            ErrorType.VALIDATION,
            f"Password must be at least {Config.PASSWORD_MIN_LENGTH} characters long"
        )
    salt = bcrypt.gensalt(rounds=Config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def sign_up(session: AsyncSession, email: str, password: str, name: str | None = None) -> User:
    email = _normalize_email(email)
    user = User(
        email=email,
        name=name or email.split("@")[0] or "Usuario",
        role=DEFAULT_ROLE,
        password_hash=hash_password(password),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AppException(ErrorType.CONFLICT, "A user with this email already exists")

    logger.info(f"User registered: {email}")
    change_feed.publish("users", "INSERT", user.id)
    return user


async def _record_login(
    session: AsyncSession,
    email: str,
    user: User | None,
    success: bool,
    ip_address: str | None,
    user_agent: str | None,
):
    event = LoginEvent(
        user_id=user.id if user else None,
        email=email,
        name=user.name if user else None,
        success=success,
        ip_address=ip_address,
        user_agent=user_agent,
        logged_at=utcnow(),
    )
    session.add(event)
    await session.commit()
    change_feed.publish("login_events", "INSERT", event.id)


async def sign_in(
    session: AsyncSession,
    email: str,
    password: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> tuple[User, str]:
    """Verify credentials and open a session. Returns (user, plaintext_token)."""
    email = _normalize_email(email)
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed sign-in for {email}")
        await _record_login(session, email, user, False, ip_address, user_agent)
        raise AppException(ErrorType.UNAUTHORIZED, "Invalid email or password")

    token = generate_token()
    now = utcnow()
    session.add(SessionToken(
        user_id=user.id,
        token_hash=hash_token(token),
        created_at=now,
        expires_at=now + timedelta(hours=Config.SESSION_TTL_HOURS),
    ))
    await _record_login(session, email, user, True, ip_address, user_agent)

    logger.info(f"User signed in: {email}")
    return user, token


async def get_current_user(session: AsyncSession, token: str | None) -> User | None:
    """Resolve a bearer token to its user, or None when missing, expired or revoked."""
    if not token:
        return None

    result = await session.execute(
        select(SessionToken).where(SessionToken.token_hash == hash_token(token))
    )
    session_token = result.scalar_one_or_none()
    if not session_token or session_token.revoked_at is not None:
        return None
    if session_token.expires_at <= utcnow():
        return None

    return await session.get(User, session_token.user_id)


async def sign_out(session: AsyncSession, token: str) -> None:
    result = await session.execute(
        select(SessionToken).where(SessionToken.token_hash == hash_token(token))
    )
    session_token = result.scalar_one_or_none()
    if session_token and session_token.revoked_at is None:
        session_token.revoked_at = utcnow()
        await session.commit()
