from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from joyeria.db.database import Base
from joyeria.time_utils import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="administrador")
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    sessions = relationship("SessionToken", back_populates="user", cascade="all, delete-orphan")


class SessionToken(Base):
    __tablename__ = "session_tokens"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String(64), nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime)

    # Relationships
    user = relationship("User", back_populates="sessions")


class LoginEvent(Base):
    """Append-only record of sign-in attempts, read by the audit log."""
    __tablename__ = "login_events"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    email = Column(String(255), nullable=False)
    name = Column(String(255))
    success = Column(Boolean, nullable=False)
    ip_address = Column(String(64))
    user_agent = Column(String(512))
    logged_at = Column(DateTime, nullable=False)
