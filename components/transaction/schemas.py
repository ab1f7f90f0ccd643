"""Pydantic schemas for transaction history."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from components.transaction.models import TransactionStatus


class Transaction(BaseModel):
    """Schema for a transaction in history responses."""
    transaction_id: str
    payer_id: int
    payer_name: str
    receiver_id: str
    receiver_name: str
    amount: int
    status: TransactionStatus
    initiated_at: datetime
    completed_at: Optional[datetime] = None
    debt_id: int
    semester: str
    academic_year: str

    class Config:
        from_attributes = True


class TransactionList(BaseModel):
    """Transactions of the current user, newest first. Empty is valid."""
    success: bool = True
    count: int
    transactions: List[Transaction]
