"""Student and tuition debt models for the database."""

import enum

from sqlalchemy import Column, Integer, String, Date, BigInteger, ForeignKey, Enum
from sqlalchemy.orm import relationship

from components.core.database import Base


class DebtStatus(str, enum.Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"


class Student(Base):
    """Student who owes tuition."""
    __tablename__ = "students"

    student_id = Column(String(20), primary_key=True)
    full_name = Column(String(100), nullable=False)
    program = Column(String(100), nullable=True)

    debts = relationship("TuitionDebt", back_populates="student")


class TuitionDebt(Base):
    """Tuition obligation for one semester."""
    __tablename__ = "tuition_debts"

    debt_id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(20), ForeignKey("students.student_id"), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)  # VND
    semester = Column(String(30), nullable=False)
    academic_year = Column(String(20), nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(Enum(DebtStatus, native_enum=False, length=10), nullable=False, default=DebtStatus.UNPAID)

    student = relationship("Student", back_populates="debts")
