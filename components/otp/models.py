"""OTP challenge model for the database."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from components.core.database import Base


class OtpChallenge(Base):
    """Live one-time passcode challenge. The code is stored hashed only."""
    __tablename__ = "otp_challenges"

    id = Column(String(64), primary_key=True)  # random challenge id
    payment_id = Column(String(36), ForeignKey("payment_attempts.id"), unique=True, nullable=False)
    target_email = Column(String(255), nullable=False)
    code_hash = Column(String(64), nullable=False)
    issued_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    attempts = Column(Integer, nullable=False, default=0)
