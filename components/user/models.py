"""User and session models for the database."""

from sqlalchemy import Column, Integer, String, DateTime, BigInteger, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from components.core.clock import utcnow
from components.core.database import Base


class User(Base):
    """User model representing a paying customer."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("available_balance >= 0", name="ck_users_balance_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    phone_number = Column(String(20), nullable=True)
    email = Column(String(255), nullable=False)
    available_balance = Column(BigInteger, nullable=False, default=0)  # VND
    program = Column(String(100), nullable=True)
    student_id = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")


class AuthSession(Base):
    """Server side association between an opaque token and a user."""
    __tablename__ = "auth_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, nullable=False)  # sha256 of the token
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="sessions")
