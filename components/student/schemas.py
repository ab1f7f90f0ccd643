"""Pydantic schemas for student tuition data."""

from datetime import date
from typing import List, Optional
from pydantic import BaseModel

from components.student.models import DebtStatus


class TuitionDebt(BaseModel):
    """Schema for an outstanding tuition debt."""
    debt_id: int
    amount: int
    semester: str
    academic_year: str
    due_date: date
    status: DebtStatus

    class Config:
        from_attributes = True


class StudentDebtRecord(BaseModel):
    """Student profile together with its single outstanding debt."""
    student_id: str
    full_name: str
    program: Optional[str] = None
    tuition: TuitionDebt


class DebtImportError(BaseModel):
    """Schema for a rejected CSV row."""
    row: int
    message: str


class DebtImportResponse(BaseModel):
    """Schema for tuition CSV upload response."""
    success: bool
    message: str
    imported: int = 0
    errors: Optional[List[DebtImportError]] = None
