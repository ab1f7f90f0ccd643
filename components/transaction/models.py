"""Transaction model for the database."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, BigInteger, ForeignKey, Enum

from components.core.database import Base


class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Transaction(Base):
    """Tuition payment record. Written once, never updated."""
    __tablename__ = "transactions"

    transaction_id = Column(String(36), primary_key=True)  # uuid4
    payer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    payer_name = Column(String(100), nullable=False)
    receiver_id = Column(String(20), ForeignKey("students.student_id"), nullable=False)
    receiver_name = Column(String(100), nullable=False)
    amount = Column(BigInteger, nullable=False)
    status = Column(Enum(TransactionStatus, native_enum=False, length=10), nullable=False)
    initiated_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True, index=True)
    debt_id = Column(Integer, ForeignKey("tuition_debts.debt_id"), nullable=False)
    semester = Column(String(30), nullable=False)
    academic_year = Column(String(20), nullable=False)
