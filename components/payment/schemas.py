"""Pydantic schemas for the payment confirmation workflow."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from components.payment.workflow import PaymentState
from components.student.schemas import StudentDebtRecord
from components.transaction.schemas import Transaction


class PaymentStartRequest(BaseModel):
    student_id: str


class OtpVerifyRequest(BaseModel):
    code: Optional[str] = None


class OtpChallengeInfo(BaseModel):
    """What the client may know about the live challenge. Never the code."""
    email: str
    issued_at: datetime
    expires_at: datetime
    ttl_seconds: int
    remaining_seconds: int


class PaymentAttemptResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    payment_id: str
    state: PaymentState
    student: Optional[StudentDebtRecord] = None
    otp: Optional[OtpChallengeInfo] = None
    failure_reason: Optional[str] = None
    transaction_id: Optional[str] = None


class PaymentCompletedResponse(BaseModel):
    success: bool = True
    message: str
    payment_id: str
    state: PaymentState
    transaction: Transaction
    available_balance: int
