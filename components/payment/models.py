"""Payment attempt model for the database."""

from sqlalchemy import Column, Integer, String, DateTime, BigInteger, ForeignKey, Enum

from components.core.clock import utcnow
from components.core.database import Base
from components.payment.workflow import PaymentState


class PaymentAttempt(Base):
    """One end to end attempt to pay a single tuition debt."""
    __tablename__ = "payment_attempts"

    id = Column(String(36), primary_key=True)  # uuid4
    payer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    student_id = Column(String(20), ForeignKey("students.student_id"), nullable=True)
    debt_id = Column(Integer, ForeignKey("tuition_debts.debt_id"), nullable=True)
    amount = Column(BigInteger, nullable=True)
    state = Column(Enum(PaymentState, native_enum=False, length=20), nullable=False, default=PaymentState.IDLE)
    failure_reason = Column(String(255), nullable=True)
    transaction_id = Column(String(36), ForeignKey("transactions.transaction_id"), nullable=True)
    otp_verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
